"""
Page publisher: static redirect pages for records.

Each record becomes ``<output_dir>/<short_id>/index.html``, rendered
from ``templates/redirect.html`` by ``__PLACEHOLDER__`` substitution.
Every substituted value is HTML-escaped.
"""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path

from gitshort.core.models.record import Record

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).resolve().parents[2] / "templates" / "redirect.html"

_PLACEHOLDER_RE = re.compile(r"__([A-Z][A-Z_]*[A-Z])__")


def render(template: str, values: dict[str, str]) -> str:
    """Replace ``__NAME__`` placeholders with escaped values.

    Unknown placeholders are left untouched.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in values:
            return match.group(0)
        return html.escape(values[key], quote=True)

    return _PLACEHOLDER_RE.sub(_sub, template)


class Publisher:
    """Writes one redirect page per record under ``output_dir``."""

    def __init__(self, output_dir: Path | str = ".", template_path: Path = TEMPLATE_PATH):
        self.output_dir = Path(output_dir)
        self.template_path = template_path
        self._template: str | None = None

    @property
    def template(self) -> str:
        if self._template is None:
            self._template = self.template_path.read_text(encoding="utf-8")
        return self._template

    def page_path(self, record: Record) -> Path:
        return self.output_dir / record.short_id / "index.html"

    def publish(self, record: Record) -> Path:
        """Render and write the page for *record*. Returns its path."""
        path = self.page_path(record)
        path.parent.mkdir(parents=True, exist_ok=True)

        content = render(self.template, {
            "TITLE": record.description.splitlines()[0] if record.description else record.url,
            "URL": record.url,
            "DESCRIPTION": record.description,
            "SHORT_ID": record.short_id,
            "CREATOR": record.creator,
            "CREATED": record.created.isoformat(),
        })
        path.write_text(content, encoding="utf-8")
        logger.info("Published %s → %s", record.short_id, path)
        return path
