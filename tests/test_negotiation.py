"""Tests for trigger precedence and eligibility in the negotiation engine."""

from __future__ import annotations

import pytest

from markdown_alternate.eligibility import EligibilityPolicy
from markdown_alternate.models import NOT_APPLICABLE, Forbidden, RedirectTo, Serve, Trigger
from markdown_alternate.negotiation import InboundRequest, NegotiationEngine
from markdown_alternate.repository import InMemoryRepository
from markdown_alternate.urls import UrlConverter


@pytest.fixture()
def engine(repository) -> NegotiationEngine:
    return NegotiationEngine(repository, EligibilityPolicy(), UrlConverter(""))


def _request(path: str, **kwargs) -> InboundRequest:
    return InboundRequest(path=path, **kwargs)


def test_direct_match_serves_document(engine):
    outcome = engine.negotiate(_request("/guide/setup.md"))
    assert isinstance(outcome, Serve)
    assert outcome.document.id == "setup-guide"
    assert outcome.trigger is Trigger.DIRECT


@pytest.mark.parametrize("path", ["/guide/setup.MD", "/guide/setup.Md", "/guide/setup.MD/"])
def test_uppercase_suffix_never_matches(engine, path):
    request = _request(path, query={"format": "markdown"}, headers={"accept": "text/markdown"})
    assert engine.negotiate(request) is NOT_APPLICABLE


def test_trailing_slash_redirects_before_lookup(engine):
    outcome = engine.negotiate(_request("/does/not/exist.md/"))
    assert outcome == RedirectTo(url="/does/not/exist.md", status=301, trigger=Trigger.DIRECT)


def test_trailing_slash_redirect_keeps_query(engine):
    outcome = engine.negotiate(_request("/guide/setup.md/", query_string="ref=feed"))
    assert isinstance(outcome, RedirectTo)
    assert outcome.url == "/guide/setup.md?ref=feed"


def test_index_maps_to_front_page(engine):
    outcome = engine.negotiate(_request("/index.md"))
    assert isinstance(outcome, Serve)
    assert outcome.document.id == "home"


def test_legacy_extension_is_tried_first(engine):
    outcome = engine.negotiate(_request("/2024/02/release-notes.md"))
    assert isinstance(outcome, Serve)
    assert outcome.document.id == "legacy"


@pytest.mark.parametrize("path", ["/missing.md", "/.md", "/guide//setup.md", "guide/setup.md"])
def test_unresolvable_direct_requests_fall_through(engine, path):
    assert engine.negotiate(_request(path)) is NOT_APPLICABLE


def test_query_param_serves_document(engine):
    outcome = engine.negotiate(_request("/guide/setup", query={"format": "markdown"}))
    assert isinstance(outcome, Serve)
    assert outcome.trigger is Trigger.QUERY_PARAM


def test_query_param_on_non_canonical_slash_still_serves(engine):
    outcome = engine.negotiate(_request("/guide/setup/", query={"format": "markdown"}))
    assert isinstance(outcome, Serve)


@pytest.mark.parametrize("value", ["Markdown", "md", "markdown ", ""])
def test_query_param_is_strict(engine, value):
    assert engine.negotiate(_request("/guide/setup", query={"format": value})) is NOT_APPLICABLE


def test_direct_suppresses_query_and_accept(engine):
    request = _request(
        "/guide/setup.md",
        query={"format": "markdown"},
        headers={"accept": "text/markdown"},
    )
    outcome = engine.negotiate(request)
    assert isinstance(outcome, Serve)
    assert outcome.trigger is Trigger.DIRECT


def test_query_suppresses_accept(engine):
    request = _request("/guide/setup", query={"format": "markdown"}, headers={"accept": "text/markdown"})
    outcome = engine.negotiate(request)
    assert isinstance(outcome, Serve)
    assert outcome.trigger is Trigger.QUERY_PARAM


def test_accept_header_redirects_with_303(engine):
    request = _request("/guide/setup", headers={"accept": "text/html, text/markdown;q=0.8"})
    outcome = engine.negotiate(request)
    assert outcome == RedirectTo(url="/guide/setup.md", status=303, trigger=Trigger.ACCEPT_HEADER)


def test_accept_header_on_front_page(engine):
    outcome = engine.negotiate(_request("/", headers={"accept": "text/markdown"}))
    assert isinstance(outcome, RedirectTo)
    assert outcome.url == "/index.md"


@pytest.mark.parametrize(
    "path, location",
    [
        ("/tag/intro/", "/tag/intro.md"),
        ("/category/news", "/category/news.md"),
        ("/author/bob/", "/author/bob.md"),
        ("/2024/01/", "/2024/01.md"),
        ("/2024", "/2024.md"),
    ],
)
def test_accept_header_on_archives(engine, path, location):
    outcome = engine.negotiate(_request(path, headers={"accept": "text/markdown"}))
    assert isinstance(outcome, RedirectTo)
    assert outcome.url == location


def test_accept_header_without_markdown_is_not_applicable(engine):
    assert engine.negotiate(_request("/guide/setup", headers={"accept": "text/html"})) is NOT_APPLICABLE


def test_accept_header_on_unknown_path(engine):
    assert engine.negotiate(_request("/1999/", headers={"accept": "text/markdown"})) is NOT_APPLICABLE


@pytest.mark.parametrize(
    "request_kwargs",
    [
        dict(path="/members.md"),
        dict(path="/members", query={"format": "markdown"}),
    ],
)
def test_protected_document_is_forbidden_when_served(engine, request_kwargs):
    outcome = engine.negotiate(InboundRequest(**request_kwargs))
    assert isinstance(outcome, Forbidden)
    assert outcome.reason == "password_required"


def test_accept_header_on_protected_document_still_redirects(engine):
    request = _request("/members", headers={"accept": "text/html, text/markdown;q=0.8"})
    outcome = engine.negotiate(request)
    assert outcome == RedirectTo(url="/members.md", status=303, trigger=Trigger.ACCEPT_HEADER)


@pytest.mark.parametrize(
    "request_kwargs",
    [
        dict(path="/draft.md"),
        dict(path="/draft", query={"format": "markdown"}),
        dict(path="/draft", headers={"accept": "text/markdown"}),
        dict(path="/shop/widget.md"),
        dict(path="/shop/widget", headers={"accept": "text/markdown"}),
    ],
)
def test_ineligible_documents_fall_through(engine, request_kwargs):
    assert engine.negotiate(InboundRequest(**request_kwargs)) is NOT_APPLICABLE


def test_allow_set_hook_extends_types(repository):
    policy = EligibilityPolicy(supported_types_hook=lambda types: (*types, "product"))
    engine = NegotiationEngine(repository, policy, UrlConverter(""))
    outcome = engine.negotiate(_request("/shop/widget.md"))
    assert isinstance(outcome, Serve)


def test_only_get_and_head_are_negotiated(engine):
    assert engine.negotiate(_request("/guide/setup.md", method="POST")) is NOT_APPLICABLE
    assert isinstance(engine.negotiate(_request("/guide/setup.md", method="HEAD")), Serve)


def test_custom_query_parameter(repository):
    engine = NegotiationEngine(
        repository,
        EligibilityPolicy(),
        UrlConverter(""),
        query_param="output",
        query_value="md",
    )
    assert isinstance(engine.negotiate(_request("/guide/setup", query={"output": "md"})), Serve)
    assert engine.negotiate(_request("/guide/setup", query={"format": "markdown"})) is NOT_APPLICABLE


@pytest.fixture()
def blog_engine(make_document) -> NegotiationEngine:
    root = "https://example.com/blog"
    repository = InMemoryRepository(
        [
            make_document(id="home", canonical_url=f"{root}/", title="Welcome", terms={}),
            make_document(canonical_url=f"{root}/guide/setup"),
        ],
        front_page_id="home",
        site_root=root,
    )
    return NegotiationEngine(repository, EligibilityPolicy(), UrlConverter(root))


def test_index_under_site_subpath_maps_to_front_page(blog_engine):
    outcome = blog_engine.negotiate(_request("/blog/index.md"))
    assert isinstance(outcome, Serve)
    assert outcome.document.id == "home"

    served = blog_engine.negotiate(_request("/blog/guide/setup.md"))
    assert isinstance(served, Serve)
    assert served.document.id == "setup-guide"


def test_accept_under_site_subpath_redirects_to_live_urls(blog_engine):
    front = blog_engine.negotiate(_request("/blog/", headers={"accept": "text/markdown"}))
    assert front == RedirectTo(
        url="https://example.com/blog/index.md",
        status=303,
        trigger=Trigger.ACCEPT_HEADER,
    )

    archive = blog_engine.negotiate(_request("/blog/2024/01/", headers={"accept": "text/markdown"}))
    assert isinstance(archive, RedirectTo)
    assert archive.url == "https://example.com/blog/2024/01.md"
