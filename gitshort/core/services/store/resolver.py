"""
Commit resolver: hex prefix (or full id) to exactly one commit.

Two-stage lookup:
  1. Direct prefix lookup in the object store.
  2. If the store reports the prefix as ambiguous, ask the
     ``Disambiguator`` for every candidate and pick a commit.

Stage 2 spawns a process, so the prefix is checked against
``^[0-9a-fA-F]{4,}$`` first; nothing else ever reaches it.
"""

from __future__ import annotations

import logging
import re

from gitshort.core.services.store.disambiguation import Disambiguator
from gitshort.core.services.store.errors import AmbiguousPrefix
from gitshort.core.services.store.objects import GitObjectStore

logger = logging.getLogger(__name__)

MINIMUM_PREFIX = 4

_SAFE_PREFIX_RE = re.compile(r"[a-fA-F0-9]{%d,}" % MINIMUM_PREFIX)


def is_safe_prefix(prefix: str) -> bool:
    """True if *prefix* is pure hex and at least ``MINIMUM_PREFIX`` long."""
    return isinstance(prefix, str) and _SAFE_PREFIX_RE.fullmatch(prefix) is not None


class CommitResolver:
    """Resolve abbreviated commit ids against a ``GitObjectStore``."""

    def __init__(self, objects: GitObjectStore, disambiguator: Disambiguator):
        self.objects = objects
        self.disambiguator = disambiguator

    def resolve(self, prefix: str, *, unique: bool = False) -> str | None:
        """Return the full id of the commit *prefix* names, or None.

        Args:
            prefix: Hex prefix or full commit id.
            unique: Only accept the prefix if exactly one commit shares it.
                Without this, an ambiguous prefix resolves to the first
                candidate that is a commit.
        """
        try:
            found = self.objects.lookup_prefix(prefix)
        except AmbiguousPrefix:
            return self._disambiguate(prefix, unique=unique)

        if found is None:
            return None
        oid, kind = found
        return oid if kind == "commit" else None

    def _disambiguate(self, prefix: str, *, unique: bool) -> str | None:
        if not is_safe_prefix(prefix):
            logger.warning("Refusing to disambiguate non-hex prefix %r", prefix)
            return None

        commits = []
        for oid in self.disambiguator.candidates(prefix):
            if self.objects.object_type(oid) != "commit":
                continue
            if not unique:
                return oid
            commits.append(oid)

        if len(commits) == 1:
            return commits[0]
        if len(commits) > 1:
            logger.debug("Prefix %s matches %d commits", prefix, len(commits))
        return None
