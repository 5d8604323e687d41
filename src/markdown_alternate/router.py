"""Composition root for a single Markdown request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

import structlog

from .cache import RenderCache
from .errors import spec_for_reason
from .models import Forbidden, NegotiationOutcome, NotApplicable, RedirectTo, Serve
from .monitoring import record_negotiation
from .negotiation import InboundRequest, NegotiationEngine
from .renderer import MarkdownRenderer

log = structlog.get_logger(__name__)

MARKDOWN_CONTENT_TYPE = "text/markdown; charset=UTF-8"
PLAIN_TEXT_CONTENT_TYPE = "text/plain; charset=UTF-8"


def estimate_tokens(body: str) -> int:
    return len(body) // 4


@dataclass(frozen=True)
class MarkdownResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""


class RequestRouter:
    """Runs negotiation and turns the outcome into a response.

    ``handle`` returns ``None`` whenever the request is not ours; the caller
    must then continue with its normal handling.
    """

    def __init__(
        self,
        engine: NegotiationEngine,
        cache: RenderCache,
        renderer: MarkdownRenderer,
        *,
        emit_token_header: bool = True,
        token_header: str = "X-Markdown-Tokens",
    ) -> None:
        self.engine = engine
        self.cache = cache
        self.renderer = renderer
        self._emit_token_header = emit_token_header
        self._token_header = token_header

    def handle(self, request: InboundRequest) -> Optional[MarkdownResponse]:
        outcome = self.engine.negotiate(request)
        self._record(request, outcome)

        if isinstance(outcome, Serve):
            return self._serve(outcome)
        if isinstance(outcome, RedirectTo):
            return self._redirect(outcome)
        if isinstance(outcome, Forbidden):
            return self._forbidden(outcome)
        return None

    def _serve(self, outcome: Serve) -> MarkdownResponse:
        document = outcome.document
        body = self.cache.get_or_render(document, self.renderer.render)
        headers = {
            "Content-Type": MARKDOWN_CONTENT_TYPE,
            "Vary": "Accept",
            "Link": f'<{document.canonical_url}>; rel="canonical"',
            "X-Content-Type-Options": "nosniff",
        }
        if self._emit_token_header:
            headers[self._token_header] = str(estimate_tokens(body))
        return MarkdownResponse(status=200, headers=headers, body=body)

    def _redirect(self, outcome: RedirectTo) -> MarkdownResponse:
        headers = {"Location": outcome.url}
        if outcome.status == 303:
            headers["Vary"] = "Accept"
        return MarkdownResponse(status=outcome.status, headers=headers)

    def _forbidden(self, outcome: Forbidden) -> MarkdownResponse:
        spec = spec_for_reason(outcome.reason)
        return MarkdownResponse(
            status=spec.http_status,
            headers={"Content-Type": PLAIN_TEXT_CONTENT_TYPE},
            body=spec.en,
        )

    def _record(self, request: InboundRequest, outcome: NegotiationOutcome) -> None:
        if isinstance(outcome, NotApplicable):
            return
        trigger = outcome.trigger.value if outcome.trigger else "none"
        if isinstance(outcome, Serve):
            record_negotiation(trigger, "serve")
            log.info("markdown_negotiated", path=request.path, trigger=trigger, document=outcome.document.id)
        elif isinstance(outcome, RedirectTo):
            record_negotiation(trigger, f"redirect_{outcome.status}")
            log.info("markdown_redirect", path=request.path, trigger=trigger, location=outcome.url, status=outcome.status)
        elif isinstance(outcome, Forbidden):
            record_negotiation(trigger, "forbidden")
            log.info("markdown_forbidden", path=request.path, trigger=trigger, reason=outcome.reason)
