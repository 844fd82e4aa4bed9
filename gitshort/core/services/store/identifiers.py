"""
Identifier engine: record ids derived from commit hashes.

    id        base58(full hash bytes)          stable forever
    short_id  base58(shortest unique prefix)   may grow as history grows

Prefixes are whole bytes (an even number of hex digits) so that they
survive the round trip through base58.
"""

from __future__ import annotations

import logging

import base58

from gitshort.core.services.store.errors import NotFound
from gitshort.core.services.store.resolver import MINIMUM_PREFIX, CommitResolver

logger = logging.getLogger(__name__)


def encode_hex(hex_id: str) -> str:
    """Base58-encode the bytes of an even-length hex string."""
    return base58.b58encode(bytes.fromhex(hex_id)).decode("ascii")


def decode(identifier: str) -> str:
    """Turn an ``id`` or ``short_id`` back into its hex prefix.

    Raises:
        NotFound: *identifier* is not valid base58.
    """
    try:
        raw = base58.b58decode(identifier.strip())
    except ValueError as e:
        raise NotFound(f"Invalid identifier {identifier!r}: {e}") from e
    if not raw:
        raise NotFound(f"Invalid identifier {identifier!r}")
    return raw.hex()


class IdentifierEngine:
    """Computes canonical and minimal identifiers for commits."""

    def __init__(self, resolver: CommitResolver):
        self.resolver = resolver

    def canonical_id(self, oid: str) -> str:
        return encode_hex(oid)

    def short_id(self, oid: str) -> str:
        """Shortest whole-byte prefix of *oid* that resolves only to *oid*."""
        oid = oid.lower()
        length = MINIMUM_PREFIX
        while length < len(oid):
            prefix = oid[:length]
            if self.resolver.resolve(prefix, unique=True) == oid:
                return encode_hex(prefix)
            length += 2

        # The full hash is unique by definition
        return encode_hex(oid)
