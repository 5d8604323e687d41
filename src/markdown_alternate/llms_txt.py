"""llms.txt generation with permalinks pointing at Markdown alternates.

Rewriting is switched on by :func:`markdown_links`, a scoped flag held in a
context variable. Nested scopes are no-ops; only the scope that switched the
flag on switches it off again.
"""

from __future__ import annotations

import html
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterable, Iterator

from .eligibility import EligibilityPolicy
from .models import Document
from .urls import UrlConverter

_markdown_links: ContextVar[bool] = ContextVar("markdown_links", default=False)


@contextmanager
def markdown_links() -> Iterator[bool]:
    """Enable permalink rewriting; yields ``True`` if this scope enabled it."""
    if _markdown_links.get():
        yield False
        return
    token = _markdown_links.set(True)
    try:
        yield True
    finally:
        _markdown_links.reset(token)


def markdown_links_active() -> bool:
    return _markdown_links.get()


def permalink_for(document: Document, policy: EligibilityPolicy, urls: UrlConverter) -> str:
    if markdown_links_active() and policy.is_supported_type(document.type):
        return urls.to_markdown(document.canonical_url)
    return document.canonical_url


def build_llms_txt(
    documents: Iterable[Document],
    policy: EligibilityPolicy,
    urls: UrlConverter,
    *,
    site_name: str = "Site",
) -> str:
    eligible = sorted(
        (doc for doc in documents if policy.is_eligible(doc)),
        key=lambda doc: (-doc.published_at.timestamp(), doc.id),
    )
    lines = [f"# {site_name}", ""]
    with markdown_links():
        for document in eligible:
            title = html.unescape(document.title)
            lines.append(f"- [{title}]({permalink_for(document, policy, urls)})")
    return "\n".join(lines) + "\n"
