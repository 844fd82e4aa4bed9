"""
Record codec: records to and from commit messages.

Wire format (YAML front matter)::

    ---
    url: https://example.com/some/long/path
    campaign: spring
    ---
    Free-text description of the redirect.

The header holds ``url`` plus any extension fields.  Derived fields
(``id``, ``short_id``, ``created``, ``creator``) are never written; they
come from the commit itself.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from gitshort.core.models.record import (
    RESERVED_KEYS,
    DecodedMessage,
    RecordFields,
    RecordHeader,
)
from gitshort.core.services.store.errors import DecodeFailure, NotARecord, ValidationError
from gitshort.core.services.store.urls import is_valid_url

logger = logging.getLogger(__name__)

DELIMITER = "---"


def encode(fields: RecordFields) -> str:
    """Serialize *fields* into a commit message."""
    clashing = sorted(RESERVED_KEYS & set(fields.extensions))
    if clashing:
        raise ValidationError(f"Reserved field name(s) in extensions: {', '.join(clashing)}")

    metadata: dict[str, Any] = {"url": fields.url, **fields.extensions}
    header = yaml.safe_dump(
        metadata,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    return f"{DELIMITER}\n{header}{DELIMITER}\n{fields.description or ''}"


def decode(message: str) -> DecodedMessage:
    """Parse a commit message back into its header and description.

    Raises:
        DecodeFailure: The message has no well-formed header block.
        NotARecord: The header parses but ``url`` is missing or invalid.
    """
    lines = message.strip().split("\n")
    if not lines or lines[0].rstrip() != DELIMITER:
        raise DecodeFailure("Message has no header block")

    try:
        end = next(i for i in range(1, len(lines)) if lines[i].rstrip() == DELIMITER)
    except StopIteration:
        raise DecodeFailure("Header block is not terminated") from None

    try:
        data = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as e:
        raise DecodeFailure(f"Invalid YAML in header block: {e}") from e

    if not isinstance(data, dict):
        raise DecodeFailure(f"Expected a mapping in header block, got {type(data).__name__}")

    url = data.pop("url", None)
    if not is_valid_url(url):
        raise NotARecord("Commit is not a redirect record")

    extensions = {str(key): value for key, value in data.items()}
    description = "\n".join(lines[end + 1:])

    return DecodedMessage(
        description=description,
        header=RecordHeader(url=url, extensions=extensions),
    )
