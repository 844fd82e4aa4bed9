"""
Store errors: the failure taxonomy of the record store.

Every error raised by ``gitshort.core.services.store`` derives from
``StoreError``.  The CLI catches ``StoreError`` at the top level and
turns it into a non-zero exit.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for all record-store failures."""


class ValidationError(StoreError):
    """Raised when a record's fields are rejected before any write."""


class NotFound(StoreError):
    """Raised when an identifier or revision does not resolve to a record."""


class RepositoryStateError(StoreError):
    """Raised when the repository is not in a state that allows appending."""


class DecodeFailure(StoreError):
    """Raised when a commit message cannot be parsed as a record."""


class NotARecord(DecodeFailure):
    """Raised when a commit message parses but carries no valid ``url``."""


class AmbiguousPrefix(StoreError):
    """Raised by the object store when a hex prefix matches several objects."""

    def __init__(self, prefix: str):
        super().__init__(f"short object id {prefix} is ambiguous")
        self.prefix = prefix


class GitCommandError(StoreError):
    """Raised when a git plumbing command exits unexpectedly."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"git {' '.join(args)}: {detail}")
        self.git_args = list(args)
        self.returncode = returncode
        self.stderr = stderr


class SyncError(StoreError):
    """Raised when the tracked branch cannot be pushed to the remote."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(f"{message}: {stderr.strip()}" if stderr.strip() else message)
        self.stderr = stderr
