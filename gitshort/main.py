"""
gitshort: CLI entrypoint.

Usage:
    gitshort --help
    gitshort create https://example.com/some/long/path "Example page"
    gitshort info 2NEpo7TZRRrLZSi2U
    gitshort list --from v1.0
    gitshort publish --output-dir site/
    gitshort sync
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

import click

from gitshort import __version__
from gitshort.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="gitshort")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (shows every git command).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yml (default: $GITSHORT_CONFIG or ~/.config/gitshort/config.yml).",
)
@click.option("--repo", "repository", default=None, help="Record repository path (overrides config).")
@click.option("--branch", default=None, help="Tracked branch (overrides config).")
@click.option("--remote", default=None, help="Remote to sync with (overrides config).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    repository: str | None,
    branch: str | None,
    remote: str | None,
) -> None:
    """gitshort: a URL shortener whose records are git commits."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["overrides"] = {"repository": repository, "branch": branch, "remote": remote}

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


# ── Helpers ─────────────────────────────────────────────────────


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


def _open_store(ctx: click.Context):
    """Build the RecordStore for this invocation (config file + flags)."""
    from gitshort.core.config.loader import ConfigError, load_config
    from gitshort.core.services.store import RecordStore, StoreError

    try:
        config = load_config(ctx.obj.get("config_path"), **ctx.obj.get("overrides", {}))
        return RecordStore(config)
    except (ConfigError, StoreError) as e:
        _fail(str(e))


def _parse_meta(pairs: tuple[str, ...]) -> dict[str, Any]:
    extensions: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--meta")
        extensions[key.strip()] = value
    return extensions


def _echo_record(record, *, verbose: bool = False) -> None:
    click.secho(f"🔗 {record.short_id}", fg="cyan", bold=True, nl=False)
    click.echo(f"  → {record.url}")
    if record.description:
        for line in record.description.splitlines()[:10 if verbose else 3]:
            click.echo(f"   {line}")
    click.echo(f"   id:      {record.id}")
    click.echo(f"   created: {record.created.isoformat()} by {record.creator or '?'}")
    for key, value in record.extensions.items():
        click.echo(f"   {key}: {value}")


# ── Records ─────────────────────────────────────────────────────


@cli.command()
@click.argument("url")
@click.argument("description", nargs=-1)
@click.option("--meta", "-m", "meta", multiple=True, metavar="KEY=VALUE",
              help="Extra metadata stored with the record (repeatable).")
@click.option("--sync", "sync_after", is_flag=True, help="Push to the remote after creating.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def create(
    ctx: click.Context,
    url: str,
    description: tuple[str, ...],
    meta: tuple[str, ...],
    sync_after: bool,
    as_json: bool,
) -> None:
    """Create a short URL for URL, with an optional DESCRIPTION."""
    from gitshort.core.services.store import StoreError

    extensions = _parse_meta(meta)
    store = _open_store(ctx)

    try:
        record = store.create(url, " ".join(description), extensions)
    except StoreError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.secho("✅ Created", fg="green", bold=True)
        _echo_record(record, verbose=ctx.obj.get("verbose", False))

    if sync_after:
        try:
            store.sync()
        except StoreError as e:
            _fail(f"Record created but sync failed: {e}")
        if not as_json and not ctx.obj.get("quiet"):
            click.secho("   ⇡ synced", fg="green")


@cli.command()
@click.argument("identifier")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info(ctx: click.Context, identifier: str, as_json: bool) -> None:
    """Show the record for IDENTIFIER (id or short id)."""
    from gitshort.core.services.store import StoreError

    store = _open_store(ctx)
    try:
        record = store.get(identifier)
    except StoreError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
        return
    _echo_record(record, verbose=True)


@cli.command("list")
@click.option("--from", "since", default=None, help="List only from this revision (inclusive).")
@click.option("--until", default=None, help="List only up to this revision.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON lines.")
@click.pass_context
def list_records(ctx: click.Context, since: str | None, until: str | None, as_json: bool) -> None:
    """List records, oldest first."""
    from gitshort.core.services.store import StoreError

    store = _open_store(ctx)
    count = 0
    try:
        for record in store.walk(since=since, until=until):
            count += 1
            if as_json:
                click.echo(json.dumps(record.to_dict(), ensure_ascii=False))
                continue
            summary = record.description.splitlines()[0] if record.description else ""
            click.secho(f"  {record.short_id:<10}", fg="yellow", nl=False)
            click.echo(f"  {record.url}")
            if summary:
                click.echo(f"              {summary[:70]}")
    except StoreError as e:
        _fail(str(e))
        return

    if not count and not as_json and not ctx.obj.get("quiet"):
        click.secho("No records found.", fg="yellow")


@cli.command()
@click.option("--output-dir", "-o", default=".", type=click.Path(file_okay=False),
              help="Where to write the redirect pages.")
@click.option("--from", "since", default=None, help="Publish only from this revision (inclusive).")
@click.option("--until", default=None, help="Publish only up to this revision.")
@click.pass_context
def publish(ctx: click.Context, output_dir: str, since: str | None, until: str | None) -> None:
    """Write a static redirect page for every record."""
    from gitshort.core.services.publisher import Publisher
    from gitshort.core.services.store import StoreError

    store = _open_store(ctx)
    publisher = Publisher(Path(output_dir))
    count = 0
    try:
        for record in store.walk(since=since, until=until):
            path = publisher.publish(record)
            count += 1
            if ctx.obj.get("verbose"):
                click.echo(f"   {path}")
    except (StoreError, OSError) as e:
        _fail(str(e))
        return

    if not ctx.obj.get("quiet"):
        click.secho(f"✅ Published {count} page(s) to {output_dir}", fg="green")


@cli.command()
@click.pass_context
def sync(ctx: click.Context) -> None:
    """Push the tracked branch, merging remote records once if needed."""
    from gitshort.core.services.store import StoreError

    store = _open_store(ctx)
    try:
        result = store.sync()
    except StoreError as e:
        _fail(str(e))
        return

    if ctx.obj.get("quiet"):
        return
    if result.merged:
        click.secho("✅ Synced (merged remote records, pushed on retry)", fg="green")
    else:
        click.secho("✅ Synced", fg="green")


# ── Register sub-commands from gitshort/ui/cli/ ───────────────────

from gitshort.ui.cli.config import config  # noqa: E402

cli.add_command(config)


if __name__ == "__main__":
    cli()
