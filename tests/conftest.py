"""Shared pytest fixtures for the Markdown alternate tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from markdown_alternate.app import create_app
from markdown_alternate.cache import MemoryCacheBackend
from markdown_alternate.config import (
    LoggingSettings,
    MonitoringSettings,
    RenderingSettings,
    Settings,
    SiteSettings,
)
from markdown_alternate.converters.base import HtmlConverter
from markdown_alternate.converters.builtin.markdownify_converter import MarkdownifyConverter
from markdown_alternate.models import Document, TaxonomyTerm
from markdown_alternate.repository import InMemoryRepository
from markdown_alternate.service import MarkdownAlternate, build_service


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class CountingConverter(HtmlConverter):
    slug = "counting"

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self.calls = 0
        self._inner = MarkdownifyConverter(heading_style="ATX")

    def convert(self, html: str) -> str:
        self.calls += 1
        return self._inner.convert(html)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(
        service_name="markdown-alternate-test",
        environment="test",
        site=SiteSettings(root_url="", content_file=None, name="Test Site"),
        rendering=RenderingSettings(converter_modules_file=None),
        logging=LoggingSettings(level="WARNING", log_dir=str(tmp_path / "logs")),
        monitoring=MonitoringSettings(enabled=False),
    )


@pytest.fixture()
def make_document() -> Callable[..., Document]:
    def _make(**overrides: Any) -> Document:
        defaults = dict(
            id="setup-guide",
            canonical_url="/guide/setup",
            title="Setup Guide",
            author="Alice",
            published_at=utc(2024, 1, 1, 9, 30),
            modified_at=utc(2024, 1, 1, 12, 0),
            type="page",
            body_html=(
                "<p>Follow these steps.</p>"
                '<pre class="wp-block-code"><code class="language-bash">'
                '<span class="hl-cmd">pip</span> install demo</code></pre>'
            ),
            terms={
                "post_tag": [
                    TaxonomyTerm(name="intro", url="/tag/intro/"),
                    TaxonomyTerm(name="setup", url="/tag/setup/"),
                ]
            },
        )
        defaults.update(overrides)
        return Document(**defaults)

    return _make


@pytest.fixture()
def repository(make_document) -> InMemoryRepository:
    return InMemoryRepository(
        [
            make_document(),
            make_document(
                id="home",
                canonical_url="/",
                title="Welcome",
                body_html="<p>Hello</p>",
                terms={},
            ),
            make_document(
                id="legacy",
                canonical_url="/2024/02/release-notes.html",
                title="Release notes",
                type="post",
                published_at=utc(2024, 2, 10),
                author_url="/author/bob/",
                terms={"category": [TaxonomyTerm(name="News", url="/category/news/")]},
            ),
            make_document(
                id="members",
                canonical_url="/members",
                title="Members only",
                password_protected=True,
                body_html="<p>Secret plans</p>",
            ),
            make_document(id="draft", canonical_url="/draft", title="Draft", status="draft"),
            make_document(id="product", canonical_url="/shop/widget", title="Widget", type="product"),
        ],
        front_page_id="home",
    )


@pytest.fixture()
def counting_converter() -> CountingConverter:
    return CountingConverter()


@pytest.fixture()
def service(test_settings, repository, counting_converter) -> MarkdownAlternate:
    return build_service(
        test_settings,
        repository,
        converter=counting_converter,
        cache_backend=MemoryCacheBackend(),
    )


@pytest.fixture()
def client(test_settings, service) -> TestClient:
    return TestClient(create_app(test_settings, service=service))
