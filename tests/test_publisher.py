"""
Tests for the redirect page publisher.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from gitshort.core.models import Record
from gitshort.core.services.publisher import TEMPLATE_PATH, Publisher, render


def _record(**overrides) -> Record:
    fields = dict(
        id="2NEpo7TZRRrLZSi2U",
        short_id="Ldp",
        url="https://example.com/path?a=1&b=2",
        description="Example page\nsecond line",
        created=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        creator="Test User",
    )
    fields.update(overrides)
    return Record(**fields)


class TestRender:
    def test_substitutes_and_escapes(self):
        out = render("<a href=\"__URL__\">__TITLE__</a>", {
            "URL": "https://e.com/?q=\"x\"&y=<z>",
            "TITLE": "<script>",
        })
        assert out == '<a href="https://e.com/?q=&quot;x&quot;&amp;y=&lt;z&gt;">&lt;script&gt;</a>'

    def test_unknown_placeholders_untouched(self):
        assert render("__NOPE__ __URL__", {"URL": "u"}) == "__NOPE__ u"

    def test_template_ships_with_package(self):
        assert TEMPLATE_PATH.is_file()
        assert "__URL__" in TEMPLATE_PATH.read_text()


class TestPublisher:
    def test_page_path_uses_short_id(self, tmp_path: Path):
        publisher = Publisher(tmp_path)
        assert publisher.page_path(_record()) == tmp_path / "Ldp" / "index.html"

    def test_publish_writes_redirect(self, tmp_path: Path):
        path = Publisher(tmp_path).publish(_record())
        content = path.read_text()
        assert 'content="0; url=https://example.com/path?a=1&amp;b=2"' in content
        assert "<title>Example page</title>" in content
        assert "2024-03-01T12:00:00+00:00" in content
        assert "__" not in content

    def test_title_falls_back_to_url(self, tmp_path: Path):
        path = Publisher(tmp_path).publish(_record(url="https://example.com/", description=""))
        assert "<title>https://example.com/</title>" in path.read_text()

    def test_republish_overwrites(self, tmp_path: Path):
        publisher = Publisher(tmp_path)
        publisher.publish(_record())
        path = publisher.publish(_record(url="https://example.org/"))
        assert "https://example.org/" in path.read_text()

    def test_custom_template(self, tmp_path: Path):
        template = tmp_path / "t.html"
        template.write_text("go: __URL__")
        path = Publisher(tmp_path / "out", template).publish(_record())
        assert path.read_text() == "go: https://example.com/path?a=1&amp;b=2"
