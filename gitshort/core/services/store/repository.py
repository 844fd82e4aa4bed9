"""
Record store: the facade that wires the storage engine together.

    objects ─┬─ resolver ── identifiers ─┐
             │                           ├─ reader ─┬─ history
             └───────────────────────────┘          ├─ writer ── sync
                                                    └─ get()

Constructed once per invocation from an explicit ``StoreConfig``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from gitshort.core.models.config import StoreConfig
from gitshort.core.models.record import Record, RecordFields
from gitshort.core.services.store import identifiers as ids
from gitshort.core.services.store.disambiguation import Disambiguator, GitDisambiguator
from gitshort.core.services.store.errors import DecodeFailure, NotFound
from gitshort.core.services.store.history import HistoryWalker
from gitshort.core.services.store.identifiers import IdentifierEngine
from gitshort.core.services.store.objects import GitObjectStore
from gitshort.core.services.store.reader import RecordReader
from gitshort.core.services.store.resolver import CommitResolver
from gitshort.core.services.store.sync import SyncEngine, SyncResult
from gitshort.core.services.store.writer import WriteCoordinator

logger = logging.getLogger(__name__)


class RecordStore:
    """Append-only store of redirect records in a git branch."""

    def __init__(
        self,
        config: StoreConfig,
        *,
        objects: GitObjectStore | None = None,
        disambiguator: Disambiguator | None = None,
    ):
        self.config = config
        self.objects = objects or GitObjectStore(
            config.repository, network_timeout=config.network_timeout,
        )
        self.resolver = CommitResolver(
            self.objects, disambiguator or GitDisambiguator(self.objects),
        )
        self.identifiers = IdentifierEngine(self.resolver)
        self.reader = RecordReader(self.objects, self.identifiers)
        self.history = HistoryWalker(self.objects, self.reader, config.branch)
        self.writer = WriteCoordinator(self.objects, self.reader, config.branch)
        self.syncer = SyncEngine(self.objects, self.writer, config.branch, config.remote)

    def __repr__(self) -> str:
        return (
            f"<RecordStore repository={str(self.objects.root)!r} "
            f"branch={self.config.branch!r} remote={self.config.remote!r}>"
        )

    def get(self, identifier: str) -> Record:
        """Look up a record by ``id`` or ``short_id``.

        Raises:
            NotFound: Nothing resolves, or the commit is not a record.
        """
        prefix = ids.decode(identifier)
        oid = self.resolver.resolve(prefix)
        if oid is None:
            raise NotFound(f"No record with id {identifier}")

        try:
            return self.reader.read(oid)
        except DecodeFailure as e:
            raise NotFound(f"No record with id {identifier} ({e})") from e

    def walk(self, since: str | None = None, until: str | None = None) -> Iterator[Record]:
        """Records on the tracked branch, oldest first. See ``HistoryWalker.walk``."""
        return self.history.walk(since=since, until=until)

    def create(
        self,
        url: str,
        description: str = "",
        extensions: dict[str, Any] | None = None,
    ) -> Record:
        """Append a new record and return it exactly as persisted."""
        fields = RecordFields(url=url, description=description or "", extensions=extensions or {})
        return self.writer.create(fields)

    def sync(self) -> SyncResult:
        """Push the tracked branch, merging and retrying once if rejected."""
        return self.syncer.sync()
