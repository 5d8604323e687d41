"""Base classes for HTML to Markdown converters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class HtmlConverter(ABC):
    """Black-box HTML to Markdown conversion.

    Implementations receive final, sanitized HTML and return Markdown text.
    They may raise; the renderer owns the fallback policy.
    """

    slug: str = ""

    def __init__(self, **options: Any) -> None:
        self.options: Dict[str, Any] = dict(options)

    @abstractmethod
    def convert(self, html: str) -> str:
        """Convert ``html`` into Markdown."""
