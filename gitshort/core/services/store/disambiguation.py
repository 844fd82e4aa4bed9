"""
Prefix disambiguation: enumerate every object id sharing a hex prefix.

The object store can say a prefix is ambiguous but not list the
candidates, so this goes through a separate ``git rev-parse`` process.
Callers must validate the prefix (hex only, 4+ chars) *before* calling.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from gitshort.core.services.store.errors import GitCommandError
from gitshort.core.services.store.objects import GitObjectStore

logger = logging.getLogger(__name__)


class Disambiguator(ABC):
    """Lists full object ids that share an abbreviated id."""

    @abstractmethod
    def candidates(self, prefix: str) -> list[str]:
        """Return every object id starting with *prefix*, in git's order."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class GitDisambiguator(Disambiguator):
    """Runs ``git rev-parse --disambiguate=<prefix>``, one process per call."""

    def __init__(self, objects: GitObjectStore):
        self.objects = objects

    def candidates(self, prefix: str) -> list[str]:
        logger.debug("Disambiguating prefix %s", prefix)
        r = self.objects.run("rev-parse", f"--disambiguate={prefix}")
        if r.returncode != 0:
            raise GitCommandError(["rev-parse", f"--disambiguate={prefix}"], r.returncode, r.stderr)
        return [line.strip() for line in r.stdout.splitlines() if line.strip()]
