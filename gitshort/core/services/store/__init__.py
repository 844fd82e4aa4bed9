"""
Git-backed record store: redirects stored as commits.

Public API::

    from gitshort.core.services.store import RecordStore
    from gitshort.core.models import StoreConfig

    store = RecordStore(StoreConfig(repository=Path("~/links").expanduser()))
    record = store.create("https://example.com/a/long/path", "Example")
    same = store.get(record.short_id)
    for record in store.walk():
        ...
    store.sync()

Storage:
    - One record = one commit on the tracked branch, tree unchanged.
    - The commit message carries the record as YAML front matter.
    - ``id`` is base58(commit hash); ``short_id`` is base58 of the
      shortest unique whole-byte prefix at read time.
"""

from gitshort.core.services.store.errors import (
    DecodeFailure,
    GitCommandError,
    NotARecord,
    NotFound,
    RepositoryStateError,
    StoreError,
    SyncError,
    ValidationError,
)
from gitshort.core.services.store.repository import RecordStore
from gitshort.core.services.store.sync import SyncResult
from gitshort.core.services.store.urls import is_valid_url

__all__ = [
    "DecodeFailure",
    "GitCommandError",
    "NotARecord",
    "NotFound",
    "RecordStore",
    "RepositoryStateError",
    "StoreError",
    "SyncError",
    "SyncResult",
    "ValidationError",
    "is_valid_url",
]
