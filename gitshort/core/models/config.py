"""
Store configuration: where the record repository lives and how it syncs.

Constructed once per invocation (from the config file plus CLI overrides)
and handed to ``RecordStore``.  Nothing in the store reads ambient state.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, field_validator


class StoreConfig(BaseModel):
    """Repository path, tracked branch and remote for the record store."""

    repository: Path = Path(".")
    branch: str = "master"
    remote: str = "origin"
    network_timeout: float | None = None     # push/fetch block indefinitely when unset

    @field_validator("branch", "remote")
    @classmethod
    def _no_option_like_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        if value.startswith("-"):
            raise ValueError(f"must not start with '-': {value!r}")
        return value
