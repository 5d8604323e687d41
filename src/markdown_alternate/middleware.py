"""ASGI wiring: run negotiation ahead of the host's routes."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from .negotiation import InboundRequest
from .service import MarkdownAlternate


def inbound_from_request(request: Request) -> InboundRequest:
    return InboundRequest(
        path=request.url.path,
        method=request.method,
        query=request.query_params,
        headers=request.headers,
        query_string=request.url.query,
    )


def install_markdown_alternate(app: FastAPI, service: MarkdownAlternate) -> None:
    """Attach ``service`` to ``app`` and intercept Markdown requests.

    A served, redirected or forbidden request never reaches the host's
    routes, so their canonical redirects cannot fire for it.
    """

    app.state.markdown_alternate = service

    @app.middleware("http")
    async def markdown_alternate_middleware(request: Request, call_next):
        # Conversion and cache I/O are blocking.
        result = await run_in_threadpool(service.router.handle, inbound_from_request(request))
        if result is None:
            return await call_next(request)

        return Response(
            content=result.body,
            status_code=result.status,
            headers=result.headers,
        )
