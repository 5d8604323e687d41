"""FastAPI application factory for the Markdown alternate service."""

from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.middleware.trustedhost import TrustedHostMiddleware
import uvicorn

from .api.routes import router as api_router
from .config import Settings, get_settings, settings_dependency
from .logging import configure_logging
from .middleware import install_markdown_alternate
from .monitoring import ensure_metrics_server, render_metrics
from .repository import DocumentRepository
from .service import MarkdownAlternate, build_service
from .site import router as site_router


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[DocumentRepository] = None,
    service: Optional[MarkdownAlternate] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    metrics_disabled = os.getenv("MDALT_DISABLE_METRICS", "false").lower() in {"1", "true", "yes"}
    if settings.monitoring.enabled and not metrics_disabled:
        ensure_metrics_server(settings.monitoring.prometheus_port)

    service = service or build_service(settings, repository)

    app = FastAPI(
        title="Markdown Alternate",
        version=settings.api_version,
        docs_url=f"{settings.base_url}/docs",
        redoc_url=f"{settings.base_url}/redoc",
        openapi_url=f"{settings.base_url}/openapi.json",
    )

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=["*"])
    install_markdown_alternate(app, service)
    app.dependency_overrides[settings_dependency] = lambda: settings

    app.include_router(api_router, prefix=settings.base_url)

    @app.get("/healthz")
    async def root_health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics() -> Response:
        data, content_type = render_metrics()
        return Response(content=data, media_type=content_type)

    # Catch-all document pages go last.
    app.include_router(site_router)

    return app


def main() -> None:
    host = os.getenv("MDALT_HOST", "0.0.0.0")
    port = int(os.getenv("MDALT_PORT", "8080"))
    reload_enabled = os.getenv("MDALT_RELOAD", "false").lower() in {"1", "true", "yes"}
    uvicorn.run(
        "markdown_alternate.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
