"""Mapping between canonical document URLs and their Markdown alternates."""

from __future__ import annotations

import re
from dataclasses import dataclass

LEGACY_EXTENSIONS = (".html", ".htm", ".php", ".aspx", ".asp")
MARKDOWN_SUFFIX = ".md"
FRONT_PAGE_MARKDOWN = "/index.md"

_LEGACY_EXTENSION_RE = re.compile(r"\.(html?|php|aspx?)$", re.IGNORECASE)


def to_markdown_url(canonical_url: str, site_root: str) -> str:
    """Return the ``.md`` alternate for ``canonical_url``.

    The front page maps to ``<root>/index.md`` instead of ``<root>.md``.
    Legacy extensions are replaced, anything else gets ``.md`` appended.
    """
    normalized = canonical_url.rstrip("/")
    root = site_root.rstrip("/")

    if normalized == root:
        return root + FRONT_PAGE_MARKDOWN

    if _LEGACY_EXTENSION_RE.search(normalized):
        return _LEGACY_EXTENSION_RE.sub(MARKDOWN_SUFFIX, normalized)

    return normalized + MARKDOWN_SUFFIX


def to_canonical_url(markdown_url: str, site_root: str | None = None) -> str:
    """Best-effort inverse of :func:`to_markdown_url`.

    A replaced legacy extension cannot be recovered, ``/page.html`` comes back
    as ``/page``. URLs without a ``.md`` suffix pass through untouched.
    """
    if site_root is not None:
        root = site_root.rstrip("/")
        if markdown_url == root + FRONT_PAGE_MARKDOWN:
            return root
    if markdown_url.endswith(MARKDOWN_SUFFIX):
        return markdown_url[: -len(MARKDOWN_SUFFIX)]
    return markdown_url


@dataclass(frozen=True)
class UrlConverter:
    site_root: str = ""

    def to_markdown(self, canonical_url: str) -> str:
        return to_markdown_url(canonical_url, self.site_root)

    def to_canonical(self, markdown_url: str) -> str:
        return to_canonical_url(markdown_url, self.site_root)
