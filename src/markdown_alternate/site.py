"""Minimal host site serving the canonical HTML pages."""

from __future__ import annotations

import html
from urllib.parse import urlsplit

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from .discovery import alternate_link_tag
from .errors import raise_error
from .llms_txt import build_llms_txt
from .models import Document
from .service import MarkdownAlternate

router = APIRouter()

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<link rel="canonical" href="{canonical}" />
{alternate}
</head>
<body>
<article>
<h1>{title}</h1>
{body}
</article>
</body>
</html>
"""

PROTECTED_BODY = "<p>This content is password protected.</p>"


def _service(request: Request) -> MarkdownAlternate:
    return request.app.state.markdown_alternate


def render_page(document: Document, service: MarkdownAlternate) -> str:
    alternate = alternate_link_tag(document, service.policy, service.urls) or ""
    body = PROTECTED_BODY if document.password_protected else document.body_html
    return PAGE_TEMPLATE.format(
        title=html.escape(html.unescape(document.title)),
        canonical=html.escape(document.canonical_url, quote=True),
        alternate=alternate,
        body=body,
    )


@router.get("/llms.txt", response_class=PlainTextResponse)
async def llms_txt(request: Request) -> str:
    service = _service(request)
    return build_llms_txt(
        service.repository.documents(),
        service.policy,
        service.urls,
        site_name=service.settings.site.name,
    )


@router.api_route("/{path:path}", methods=["GET", "HEAD"], response_class=HTMLResponse)
async def document_page(path: str, request: Request) -> Response:
    service = _service(request)
    key = path.strip("/")
    if key:
        document = service.repository.find_document(key)
    else:
        document = service.repository.front_page()
    if document is None or not document.is_published:
        raise_error("ERR_DOCUMENT_NOT_FOUND", detail=f"No document at /{path}")

    canonical_path = urlsplit(document.canonical_url).path or "/"
    if request.url.path != canonical_path:
        location = canonical_path
        if request.url.query:
            location = f"{location}?{request.url.query}"
        return RedirectResponse(location, status_code=301)

    return HTMLResponse(render_page(document, service))
