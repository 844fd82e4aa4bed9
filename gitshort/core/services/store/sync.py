"""
Sync engine: push the tracked branch, reconciling once on rejection.

    push ──ok──────────────────────────────────────────▶ done
      │
      └─rejected (non-fast-forward)
           fetch  +refs/heads/<b>:refs/remotes/<remote>/<b>
           merge  refs/remotes/<remote>/<b>
           push again ──ok──▶ done
                      └─any failure──▶ SyncError

Record commits all carry the same tree, so the merge never has tree
conflicts; it only joins sibling histories into one tip.  There is no
second retry: persistent races surface as ``SyncError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gitshort.core.services.store.errors import RepositoryStateError, SyncError
from gitshort.core.services.store.objects import GitObjectStore, remote_tracking_ref
from gitshort.core.services.store.writer import WriteCoordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """What ``sync()`` had to do to get the branch onto the remote."""

    pushed: bool = True
    merged: bool = False
    retried: bool = False


class SyncEngine:
    """Optimistic, lock-free convergence of independent clones."""

    def __init__(
        self,
        objects: GitObjectStore,
        writer: WriteCoordinator,
        branch: str,
        remote: str,
    ):
        self.objects = objects
        self.writer = writer
        self.branch = branch
        self.remote = remote

    def sync(self) -> SyncResult:
        first = self.objects.push(self.remote, self.branch)
        if first.ok:
            logger.info("Pushed '%s' to %s", self.branch, self.remote)
            return SyncResult()

        if not first.non_fast_forward:
            raise SyncError(f"Push to {self.remote} failed", first.stderr)

        logger.info("Push rejected (non-fast-forward), fetching %s/%s", self.remote, self.branch)
        self._fetch_and_merge()

        retry = self.objects.push(self.remote, self.branch)
        if not retry.ok:
            raise SyncError(f"Push to {self.remote} failed after merge", retry.stderr)

        logger.info("Pushed '%s' to %s after merging remote changes", self.branch, self.remote)
        return SyncResult(merged=True, retried=True)

    def _fetch_and_merge(self) -> None:
        r = self.objects.fetch(self.remote, self.branch)
        if r.returncode != 0:
            raise SyncError(f"Fetch from {self.remote} failed", r.stderr)

        try:
            self.writer.ensure_checked_out()
        except RepositoryStateError as e:
            raise SyncError(f"Cannot merge into '{self.branch}': {e}") from e

        tracking = remote_tracking_ref(self.remote, self.branch)
        r = self.objects.merge(tracking)
        if r.returncode != 0:
            self.objects.merge_abort()
            raise SyncError(f"Merge of {tracking} failed", r.stderr or r.stdout)
