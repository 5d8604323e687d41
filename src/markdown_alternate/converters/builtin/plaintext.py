"""Converter that drops all markup and keeps readable text."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ..base import HtmlConverter
from ..registry import REGISTRY


def extract_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    lines = [line.strip() for line in soup.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line)


class PlainTextConverter(HtmlConverter):
    slug = "plaintext"

    def convert(self, html: str) -> str:
        return extract_text(html)


REGISTRY.register(PlainTextConverter)
