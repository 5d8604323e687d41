"""API route definitions for the Markdown alternate service."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request

from ..config import Settings, settings_dependency
from ..errors import raise_error
from ..monitoring import collect_dependency_status
from .schemas import HealthResponse, MarkdownUrlResponse

router = APIRouter()


@router.get("/monitor/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(settings_dependency)) -> HealthResponse:
    deps = collect_dependency_status(settings)
    status = "ok" if all(value == "ok" for value in deps.values()) else "degraded"
    return HealthResponse(status=status, timestamp=datetime.now(timezone.utc), dependencies=deps)


@router.get("/markdown-url", response_model=MarkdownUrlResponse)
async def markdown_url(request: Request, url: str = Query("", description="Canonical URL")) -> MarkdownUrlResponse:
    if not url.strip():
        raise_error("ERR_URL_INVALID")
    service = request.app.state.markdown_alternate
    return MarkdownUrlResponse(canonical_url=url, markdown_url=service.urls.to_markdown(url))
