"""
Record models: the shapes that flow in and out of the record store.

``RecordFields`` is what a caller supplies to create a record.
``RecordHeader`` is what the codec parses back out of a commit message.
``Record`` is the fully resolved, user-visible entry.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

# Keys that are derived from the commit and never stored in its message
DERIVED_KEYS = frozenset({"id", "short_id", "created", "creator"})
RESERVED_KEYS = DERIVED_KEYS | {"url", "description"}


class RecordFields(BaseModel):
    """Caller-supplied fields for a new record."""

    url: str
    description: str = ""
    extensions: dict[str, Any] = Field(default_factory=dict)


class RecordHeader(BaseModel):
    """The key/value header block of a record commit message.

    ``url`` is the only required key; everything else is carried
    verbatim in ``extensions``.
    """

    url: str
    extensions: dict[str, Any] = Field(default_factory=dict)


class DecodedMessage(BaseModel):
    """A commit message split into its header and free-text description."""

    description: str = ""
    header: RecordHeader


class Record(BaseModel):
    """A redirect entry backed by exactly one commit.

    ``id`` is stable for the life of the repository.  ``short_id`` is the
    shortest unique prefix *at read time* and may grow as commits are
    added, so never persist it as a key.
    """

    id: str
    short_id: str
    url: str
    description: str = ""
    created: datetime
    creator: str = ""
    extensions: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-ready view with extension fields alongside the core ones."""
        data = self.model_dump(mode="json", exclude={"extensions"})
        extra = {
            key: value
            for key, value in self.model_dump(mode="json")["extensions"].items()
            if key not in data
        }
        return {**data, **extra}
