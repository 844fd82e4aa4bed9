"""
History walker: a commit range as a lazy, oldest-first record stream.

Commits that do not decode as records (merges, unrelated history,
malformed messages) are skipped; the walk itself only fails if git
does.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from gitshort.core.models.record import Record
from gitshort.core.services.store.errors import DecodeFailure, NotFound
from gitshort.core.services.store.objects import GitObjectStore
from gitshort.core.services.store.reader import RecordReader

logger = logging.getLogger(__name__)


class HistoryWalker:
    """Walks the tracked branch (or an explicit range) into records."""

    def __init__(self, objects: GitObjectStore, reader: RecordReader, branch: str):
        self.objects = objects
        self.reader = reader
        self.branch = branch

    def walk(self, since: str | None = None, until: str | None = None) -> Iterator[Record]:
        """Lazily stream records from *since* (inclusive) to *until*, oldest first.

        The range is resolved eagerly, so bad revisions fail on the call
        itself rather than on first iteration.

        Args:
            since: Revision of the first commit to include. Default: the
                beginning of history.
            until: Revision of the last commit to include. Default: the
                tip of the tracked branch.

        Raises:
            NotFound: *since* or *until* does not name a commit.
            GitCommandError: The underlying ``rev-list`` failed.
        """
        args = self._range_args(since, until)
        if args is None:
            return iter(())
        return self._records(args)

    def _records(self, args: list[str]) -> Iterator[Record]:
        for oid in self.objects.iter_rev_list(*args):
            try:
                yield self.reader.read(oid)
            except DecodeFailure as e:
                logger.debug("Skipping %s: %s", oid[:12], e)

    def _range_args(self, since: str | None, until: str | None) -> list[str] | None:
        if until is None:
            until_oid = self.objects.branch_tip(self.branch)
            if until_oid is None:
                logger.info("Branch '%s' has no commits yet", self.branch)
                return None
        else:
            until_oid = self.objects.resolve_revision(until)
            if until_oid is None:
                raise NotFound(f"Unknown revision: {until}")

        args = ["--date-order", "--reverse", until_oid]

        if since is not None:
            since_oid = self.objects.resolve_revision(since)
            if since_oid is None:
                raise NotFound(f"Unknown revision: {since}")
            # Exclude the parents of `since` (none for a root commit)
            args += ["--not", f"{since_oid}^@"]

        return args
