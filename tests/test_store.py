"""
Tests for the RecordStore facade: lookups by id and short id.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from gitrepo import append_raw_commit, git, rev
from gitshort.core.models import StoreConfig
from gitshort.core.services.store import NotFound, RecordStore
from gitshort.core.services.store import identifiers as ids


class TestGet:
    def test_by_id_and_short_id(self, store: RecordStore):
        record = store.create("https://example.com/x", "X marks the spot", {"owner": "ops"})
        assert store.get(record.id) == record
        assert store.get(record.short_id) == record

    @pytest.mark.parametrize("description", [
        "line1\u2028line2",
        "line1\r\nline2",
        "form\x0cfeed, file\x1cseparator, next\x85line",
        "tab\tand\vvertical tab",
    ])
    def test_description_round_trips(self, store: RecordStore, description: str):
        record = store.create("https://example.com/d", description)
        assert record.description == description
        assert store.get(record.id).description == description

    def test_by_any_even_prefix_that_is_unique(self, store: RecordStore):
        record = store.create("https://example.com/x")
        full = ids.decode(record.id)
        assert store.get(ids.encode_hex(full[:8])).id == record.id

    def test_ordinary_commit_is_not_found(self, repo: Path, store: RecordStore):
        with pytest.raises(NotFound):
            store.get(ids.encode_hex(rev(repo)))

    def test_commit_in_legacy_encoding_is_not_found(self, repo: Path, store: RecordStore):
        oid = append_raw_commit(repo, b"caf\xe9 notes\n", encoding="ISO-8859-1")
        with pytest.raises(NotFound):
            store.get(ids.encode_hex(oid))

    def test_undecodable_message_is_not_found(self, repo: Path, store: RecordStore):
        oid = append_raw_commit(repo, b"---\nurl: https://example.com/\xff\n---\n")
        with pytest.raises(NotFound):
            store.get(ids.encode_hex(oid))

    def test_record_in_legacy_encoding(self, repo: Path, store: RecordStore):
        message = "---\nurl: https://example.com/menu\n---\nCaf\u00e9\n"
        oid = append_raw_commit(repo, message.encode("latin-1"), encoding="ISO-8859-1")
        record = store.get(ids.encode_hex(oid))
        assert record.url == "https://example.com/menu"
        assert record.description == "Caf\u00e9"

    def test_tree_id_is_not_found(self, repo: Path, store: RecordStore):
        tree = rev(repo, "HEAD^{tree}")
        with pytest.raises(NotFound):
            store.get(ids.encode_hex(tree))

    def test_unknown_id(self, store: RecordStore):
        with pytest.raises(NotFound):
            store.get(ids.encode_hex("ff" * 20))

    @pytest.mark.parametrize("identifier", ["", "0OIl", "HEAD"])
    def test_invalid_identifier(self, store: RecordStore, identifier: str):
        with pytest.raises(NotFound):
            store.get(identifier)


class TestRecordFields:
    def test_created_keeps_author_offset(self, repo: Path, monkeypatch):
        monkeypatch.setenv("GIT_AUTHOR_DATE", "2024-03-01T12:00:00+0530")
        store = RecordStore(StoreConfig(repository=repo))
        record = store.create("https://example.com/")
        assert record.created.utcoffset() == timedelta(hours=5, minutes=30)
        assert record.created.isoformat() == "2024-03-01T12:00:00+05:30"

    def test_creator_is_author_name(self, repo: Path):
        git(repo, "config", "user.name", "Ada Lovelace")
        record = RecordStore(StoreConfig(repository=repo)).create("https://example.com/")
        assert record.creator == "Ada Lovelace"

    def test_to_dict_is_flat(self, store: RecordStore):
        record = store.create("https://example.com/", "d", {"tags": ["x"]})
        data = record.to_dict()
        assert data["url"] == "https://example.com/"
        assert data["tags"] == ["x"]
        assert data["id"] == record.id
        assert "extensions" not in data


class TestConstruction:
    def test_subdirectory_resolves_to_root(self, repo: Path):
        sub = repo / "nested"
        sub.mkdir()
        store = RecordStore(StoreConfig(repository=sub))
        assert store.objects.root == repo.resolve()

    def test_repr(self, store: RecordStore):
        assert "branch='master'" in repr(store)
