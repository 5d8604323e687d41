"""Converter backed by markdownify."""

from __future__ import annotations

from typing import Optional

from markdownify import markdownify as html_to_markdown

from ..base import HtmlConverter
from ..registry import REGISTRY

LANGUAGE_PREFIX = "language-"


def code_language(el) -> Optional[str]:
    """Return the ``language-X`` hint of a ``<pre>`` block, if any."""
    candidates = [el]
    code = el.find("code")
    if code is not None:
        candidates.insert(0, code)
    for node in candidates:
        for css_class in node.get("class") or []:
            if css_class.startswith(LANGUAGE_PREFIX):
                return css_class[len(LANGUAGE_PREFIX):]
    return None


class MarkdownifyConverter(HtmlConverter):
    slug = "markdownify"

    def convert(self, html: str) -> str:
        return html_to_markdown(
            html,
            heading_style=self.options.get("heading_style", "ATX"),
            bullets="-",
            code_language_callback=code_language,
        )


REGISTRY.register(MarkdownifyConverter)
