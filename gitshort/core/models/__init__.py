"""
Domain models: Pydantic types for gitshort.

    from gitshort.core.models import Record, RecordFields, StoreConfig
"""

from gitshort.core.models.config import StoreConfig
from gitshort.core.models.record import (
    DecodedMessage,
    Record,
    RecordFields,
    RecordHeader,
)

__all__ = [
    "DecodedMessage",
    "Record",
    "RecordFields",
    "RecordHeader",
    "StoreConfig",
]
