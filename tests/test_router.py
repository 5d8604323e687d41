"""Tests for response assembly in the request router."""

from __future__ import annotations

from markdown_alternate.cache import MemoryCacheBackend
from markdown_alternate.negotiation import InboundRequest
from markdown_alternate.router import RequestRouter, estimate_tokens
from markdown_alternate.service import build_service


def test_not_applicable_returns_none(service):
    assert service.router.handle(InboundRequest(path="/guide/setup")) is None
    assert service.router.handle(InboundRequest(path="/guide/setup.md", method="DELETE")) is None


def test_serve_response(service):
    response = service.router.handle(InboundRequest(path="/guide/setup.md"))

    assert response.status == 200
    assert response.headers["Content-Type"] == "text/markdown; charset=UTF-8"
    assert response.headers["Link"] == '</guide/setup>; rel="canonical"'
    assert response.headers["X-Markdown-Tokens"] == str(estimate_tokens(response.body))


def test_token_header_can_be_disabled(service):
    router = RequestRouter(service.engine, service.cache, service.renderer, emit_token_header=False)
    response = router.handle(InboundRequest(path="/guide/setup.md"))
    assert "X-Markdown-Tokens" not in response.headers


def test_token_header_name_from_settings(test_settings, repository, counting_converter):
    settings = test_settings.model_copy(
        update={"negotiation": test_settings.negotiation.model_copy(update={"token_header": "X-Token-Estimate"})}
    )
    service = build_service(settings, repository, converter=counting_converter, cache_backend=MemoryCacheBackend())
    response = service.router.handle(InboundRequest(path="/guide/setup.md"))
    assert "X-Token-Estimate" in response.headers


def test_taxonomy_footer_enabled_from_settings(test_settings, repository, counting_converter):
    settings = test_settings.model_copy(
        update={"rendering": test_settings.rendering.model_copy(update={"taxonomy_footer": True})}
    )
    service = build_service(settings, repository, converter=counting_converter, cache_backend=MemoryCacheBackend())
    response = service.router.handle(InboundRequest(path="/guide/setup.md"))
    assert response.body.endswith("\n---\n\n**Tags:** intro, setup\n")


def test_redirect_responses(service):
    moved = service.router.handle(InboundRequest(path="/guide/setup.md/"))
    assert moved.status == 301
    assert moved.headers == {"Location": "/guide/setup.md"}

    negotiated = service.router.handle(InboundRequest(path="/guide/setup", headers={"accept": "text/markdown"}))
    assert negotiated.status == 303
    assert negotiated.headers == {"Location": "/guide/setup.md", "Vary": "Accept"}
    assert negotiated.body == ""


def test_forbidden_response(service):
    response = service.router.handle(InboundRequest(path="/members.md"))
    assert response.status == 403
    assert response.headers == {"Content-Type": "text/plain; charset=UTF-8"}
    assert response.body == "This content is password protected."


def test_conversion_failure_still_serves(test_settings, repository):
    class _Broken:
        def convert(self, html):
            raise ValueError("bad markup")

    failures = []
    service = build_service(
        test_settings,
        repository,
        converter=_Broken(),
        cache_backend=MemoryCacheBackend(),
        on_conversion_error=lambda doc, exc: failures.append(doc.id),
    )
    response = service.router.handle(InboundRequest(path="/guide/setup.md"))

    assert response.status == 200
    assert "Follow these steps." in response.body
    assert failures == ["setup-guide"]


def test_estimate_tokens():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcdefgh") == 2
