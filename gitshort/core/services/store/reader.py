"""
Record reader: the single read path from commit to ``Record``.

Used by lookups, history traversal, and by the writer to hand back
exactly what was persisted.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from gitshort.core.models.record import Record
from gitshort.core.services.store import codec
from gitshort.core.services.store.identifiers import IdentifierEngine
from gitshort.core.services.store.objects import CommitObject, GitObjectStore


def authored_at(commit: CommitObject) -> datetime:
    """Author time as an aware datetime in the author's own UTC offset."""
    tz = timezone(timedelta(minutes=commit.author_offset))
    return datetime.fromtimestamp(commit.author_time, tz=tz)


class RecordReader:
    """Turns commit ids into records (or raises ``DecodeFailure``)."""

    def __init__(self, objects: GitObjectStore, identifiers: IdentifierEngine):
        self.objects = objects
        self.identifiers = identifiers

    def read(self, oid: str) -> Record:
        commit = self.objects.read_commit(oid)
        return self.from_commit(commit)

    def from_commit(self, commit: CommitObject) -> Record:
        # Decode first: non-records must not pay for the short-id search
        decoded = codec.decode(commit.message)

        return Record(
            id=self.identifiers.canonical_id(commit.oid),
            short_id=self.identifiers.short_id(commit.oid),
            url=decoded.header.url,
            description=decoded.description,
            created=authored_at(commit),
            creator=commit.author_name,
            extensions=decoded.header.extensions,
        )
