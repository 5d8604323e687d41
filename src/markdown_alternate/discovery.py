"""``<link rel="alternate">`` tag for HTML pages."""

from __future__ import annotations

import html
from typing import Optional

from .eligibility import EligibilityPolicy
from .models import Document
from .urls import UrlConverter

ALTERNATE_LINK_TEMPLATE = '<link rel="alternate" type="text/markdown" href="{href}" />'


def alternate_link_tag(document: Document, policy: EligibilityPolicy, urls: UrlConverter) -> Optional[str]:
    """Return the discovery tag, or ``None`` when the document is not served."""
    if not policy.is_eligible(document):
        return None
    href = html.escape(urls.to_markdown(document.canonical_url), quote=True)
    return ALTERNATE_LINK_TEMPLATE.format(href=href)
