"""Explicit assembly of the Markdown alternate components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .cache import CacheBackend, Clock, MemoryCacheBackend, RedisCacheBackend, RenderCache, utcnow
from .config import Settings
from .converters import HtmlConverter, converter_from_settings
from .eligibility import EligibilityPolicy, SupportedTypesHook
from .monitoring import record_conversion_failure
from .negotiation import NegotiationEngine
from .renderer import (
    ConversionErrorHook,
    ConversionFallback,
    FooterHook,
    FrontmatterLinesHook,
    MarkdownRenderer,
    TaxonomiesHook,
    plain_text_fallback,
    taxonomy_footer,
)
from .repository import DocumentRepository, InMemoryRepository
from .router import RequestRouter
from .urls import UrlConverter

logger = logging.getLogger(__name__)


@dataclass
class MarkdownAlternate:
    settings: Settings
    repository: DocumentRepository
    urls: UrlConverter
    policy: EligibilityPolicy
    engine: NegotiationEngine
    renderer: MarkdownRenderer
    cache: RenderCache
    router: RequestRouter


def _cache_backend_from_settings(settings: Settings) -> CacheBackend:
    if settings.cache.backend == "redis":
        return RedisCacheBackend.from_url(settings.cache.redis_url)
    return MemoryCacheBackend()


def build_service(
    settings: Settings,
    repository: Optional[DocumentRepository] = None,
    *,
    converter: Optional[HtmlConverter] = None,
    cache_backend: Optional[CacheBackend] = None,
    clock: Clock = utcnow,
    supported_types_hook: Optional[SupportedTypesHook] = None,
    taxonomies_hook: Optional[TaxonomiesHook] = None,
    frontmatter_hook: Optional[FrontmatterLinesHook] = None,
    fallback: ConversionFallback = plain_text_fallback,
    on_conversion_error: Optional[ConversionErrorHook] = None,
    footer: Optional[FooterHook] = None,
) -> MarkdownAlternate:
    """Build the service once at startup and hand it to whoever needs it."""

    site = settings.site
    if repository is None:
        repository = (
            InMemoryRepository.from_yaml(site.content_file, site_root=site.root_url, front_page_id=site.front_page_id)
            if site.content_file
            else InMemoryRepository(site_root=site.root_url, front_page_id=site.front_page_id)
        )

    urls = UrlConverter(site.root_url)
    policy = EligibilityPolicy(settings.negotiation.supported_types, supported_types_hook)
    engine = NegotiationEngine(
        repository,
        policy,
        urls,
        query_param=settings.negotiation.query_param,
        query_value=settings.negotiation.query_value,
    )

    if footer is None and settings.rendering.taxonomy_footer:
        footer = taxonomy_footer

    def _conversion_failed(document, exc) -> None:
        record_conversion_failure()
        if on_conversion_error is not None:
            on_conversion_error(document, exc)

    renderer = MarkdownRenderer(
        converter or converter_from_settings(settings.rendering),
        urls,
        taxonomies_hook=taxonomies_hook,
        frontmatter_hook=frontmatter_hook,
        fallback=fallback,
        on_conversion_error=_conversion_failed,
        footer=footer,
    )
    cache = RenderCache(
        cache_backend or _cache_backend_from_settings(settings),
        ttl_seconds=settings.cache.ttl_seconds,
        key_prefix=settings.cache.key_prefix,
        clock=clock,
    )
    router = RequestRouter(
        engine,
        cache,
        renderer,
        emit_token_header=settings.negotiation.emit_token_header,
        token_header=settings.negotiation.token_header,
    )
    logger.info(
        "Markdown alternate service ready",
        extra={"cache_backend": settings.cache.backend, "types": sorted(policy.supported_types)},
    )
    return MarkdownAlternate(
        settings=settings,
        repository=repository,
        urls=urls,
        policy=policy,
        engine=engine,
        renderer=renderer,
        cache=cache,
        router=router,
    )
