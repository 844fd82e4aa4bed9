"""
Logging setup for the gitshort CLI.

Called once per invocation by main.py.  Library modules only ever do
``logger = logging.getLogger(__name__)`` and never configure handlers.

Console level, highest precedence first:
    --debug  >  --verbose  >  --quiet  >  $GITSHORT_LOG_LEVEL  >  WARNING

$GITSHORT_LOG_FILE adds a file handler; its level comes from
$GITSHORT_LOG_FILE_LEVEL and falls back to the console level.

At DEBUG the object store logs every git command line it runs.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "GITSHORT_LOG_LEVEL"
LOG_FILE_ENV = "GITSHORT_LOG_FILE"
LOG_FILE_LEVEL_ENV = "GITSHORT_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d | %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}
_CONSOLE_DEFAULT = ("%(levelname)s: %(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d | %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV) or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the console handler (and optional file handler) on the root logger.

    Safe to call more than once: existing root handlers are replaced.
    """
    console_level = parse_level(level)
    fmt, datefmt = _console_format(console_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.addHandler(console)

    root_level = console_level
    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.WARNING


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            return _CONSOLE_FORMATS[threshold]
    return _CONSOLE_DEFAULT
