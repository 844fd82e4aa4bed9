"""
CLI command for reading and writing gitshort configuration.

Thin wrapper over ``gitshort.core.config.loader``.
"""

from __future__ import annotations

import sys

import click


@click.command()
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--all", "-a", "show_all", is_flag=True, help="Print every config value.")
@click.pass_context
def config(ctx: click.Context, key: str | None, value: str | None, show_all: bool) -> None:
    """Get or set a configuration value (repository, branch, remote, ...)."""
    from gitshort.core.config.loader import (
        ConfigError,
        config_items,
        load_config,
        set_config_value,
    )

    path = ctx.obj.get("config_path")

    try:
        if show_all:
            for k, v in config_items(load_config(path)).items():
                click.echo(f"{k}={v}")
            return

        if not key:
            click.secho("❌ KEY must be given unless --all is set", fg="red")
            sys.exit(1)

        if value is None:
            items = config_items(load_config(path))
            if key not in items:
                raise ConfigError(f"Unknown config key '{key}'. Valid: {', '.join(items)}")
            click.echo(f"{key}={items[key]}")
            return

        updated = set_config_value(key, value, path)
        click.echo(f"{key}={config_items(updated)[key]}")
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
