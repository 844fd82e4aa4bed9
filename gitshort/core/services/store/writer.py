"""
Write coordinator: append one record as one commit.

Preconditions are checked in a fixed order and every rejection happens
before any ref moves:

    1. url is valid, no reserved keys    → ValidationError
    2. tracked branch is checked out     → RepositoryStateError (bare: always)
    3. no unmerged index entries         → RepositoryStateError
    4. no staged changes                 → RepositoryStateError
    5. a tip commit exists               → RepositoryStateError
    6. no merge/rebase/... in progress   → RepositoryStateError

The new commit reuses its parent's tree, so the record lives purely in
the message.  The branch ref is moved with a compare-and-swap against
the tip validated in step 5.
"""

from __future__ import annotations

import logging

from gitshort.core.models.record import Record, RecordFields
from gitshort.core.services.store import codec
from gitshort.core.services.store.errors import (
    GitCommandError,
    RepositoryStateError,
    ValidationError,
)
from gitshort.core.services.store.objects import GitObjectStore
from gitshort.core.services.store.reader import RecordReader
from gitshort.core.services.store.urls import is_valid_url

logger = logging.getLogger(__name__)


class WriteCoordinator:
    """Validates repository state and appends record commits."""

    def __init__(self, objects: GitObjectStore, reader: RecordReader, branch: str):
        self.objects = objects
        self.reader = reader
        self.branch = branch

    def create(self, fields: RecordFields) -> Record:
        if not is_valid_url(fields.url):
            raise ValidationError(f"A valid http, https or ftp URL is required: {fields.url!r}")

        # Fail on bad extension keys before touching the repository
        message = codec.encode(fields)

        self.ensure_checked_out()

        if self.objects.has_unmerged_entries():
            raise RepositoryStateError("Index has unresolved merge conflicts")

        if self.objects.has_staged_changes():
            raise RepositoryStateError(
                "Index has staged changes; commit or unstage them first"
            )

        tip = self.objects.branch_tip(self.branch)
        if tip is None:
            raise RepositoryStateError(
                f"Branch '{self.branch}' has no commits; create an initial commit first"
            )

        operation = self.objects.operation_in_progress()
        if operation:
            raise RepositoryStateError(f"A {operation} is in progress")

        tree = self.objects.tree_of(tip)
        oid = self.objects.commit_tree(tree, [tip], message)
        try:
            self.objects.update_ref(
                f"refs/heads/{self.branch}", oid, tip,
                reason=f"gitshort: create {fields.url}",
            )
        except GitCommandError as e:
            raise RepositoryStateError(
                f"Branch '{self.branch}' moved while creating the record: {e.stderr.strip()}"
            ) from e

        logger.info("Created record %s → %s", oid[:12], fields.url)
        return self.reader.read(oid)

    def ensure_checked_out(self) -> None:
        """Make the tracked branch the checked-out branch."""
        if self.objects.bare:
            raise RepositoryStateError("Cannot append records in a bare repository")

        current = self.objects.current_branch()
        if current == self.branch:
            return

        logger.info("Checking out branch '%s' (was %s)", self.branch, current or "detached HEAD")
        try:
            self.objects.checkout(self.branch)
        except GitCommandError as e:
            raise RepositoryStateError(
                f"Cannot check out branch '{self.branch}': {e.stderr.strip()}"
            ) from e
