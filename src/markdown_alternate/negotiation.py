"""Request classification for Markdown alternates.

Triggers are evaluated in a fixed order and the first match wins:

1. a path ending in a lowercase ``.md`` (``/doc.md/`` is first redirected
   to ``/doc.md`` with a 301),
2. the ``format=markdown`` query parameter on a regular path,
3. ``text/markdown`` in the ``Accept`` header, answered with a 303 to the
   ``.md`` URL and never served in place.

Anything else is :data:`NOT_APPLICABLE` and belongs to the host. The engine
never raises; every decision is one of the outcome variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from .eligibility import Eligibility, EligibilityPolicy
from .models import (
    NOT_APPLICABLE,
    Document,
    Forbidden,
    NegotiationOutcome,
    RedirectTo,
    Serve,
    Trigger,
)
from .repository import DocumentRepository, site_relative_key
from .urls import LEGACY_EXTENSIONS, MARKDOWN_SUFFIX, UrlConverter

MARKDOWN_MEDIA_TYPE = "text/markdown"
NEGOTIABLE_METHODS = frozenset({"GET", "HEAD"})
FRONT_PAGE_STEM = "index"


@dataclass(frozen=True)
class InboundRequest:
    path: str
    method: str = "GET"
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""

    @property
    def accept(self) -> str:
        return self.headers.get("accept", "") or self.headers.get("Accept", "")


class NegotiationEngine:
    def __init__(
        self,
        repository: DocumentRepository,
        policy: EligibilityPolicy,
        urls: UrlConverter,
        *,
        query_param: str = "format",
        query_value: str = "markdown",
    ) -> None:
        self._repository = repository
        self._policy = policy
        self._urls = urls
        self._query_param = query_param
        self._query_value = query_value

    def negotiate(self, request: InboundRequest) -> NegotiationOutcome:
        if request.method.upper() not in NEGOTIABLE_METHODS:
            return NOT_APPLICABLE

        path = request.path
        # Malformed paths are never corrected or guessed.
        if not path.startswith("/") or "//" in path:
            return NOT_APPLICABLE

        if path.endswith(MARKDOWN_SUFFIX + "/"):
            return self._strip_trailing_slash(request)
        if path.endswith(MARKDOWN_SUFFIX):
            return self._direct(path)
        if path.lower().rstrip("/").endswith(MARKDOWN_SUFFIX):
            # Uppercase variants fall through to the host's 404.
            return NOT_APPLICABLE

        if request.query.get(self._query_param) == self._query_value:
            return self._by_query(path)

        if MARKDOWN_MEDIA_TYPE in request.accept:
            return self._by_accept(path)

        return NOT_APPLICABLE

    def _strip_trailing_slash(self, request: InboundRequest) -> NegotiationOutcome:
        location = request.path.rstrip("/")
        if request.query_string:
            location = f"{location}?{request.query_string}"
        return RedirectTo(url=location, status=301, trigger=Trigger.DIRECT)

    def _direct(self, path: str) -> NegotiationOutcome:
        stem = path[: -len(MARKDOWN_SUFFIX)].strip("/")
        if not stem:
            return NOT_APPLICABLE
        return self._decide(self._resolve_markdown_stem(stem), Trigger.DIRECT)

    def _by_query(self, path: str) -> NegotiationOutcome:
        return self._decide(self._resolve_path(path), Trigger.QUERY_PARAM)

    def _by_accept(self, path: str) -> NegotiationOutcome:
        document = self._resolve_path(path)
        if document is not None:
            # Protected documents still redirect; the .md target answers 403.
            if self._policy.evaluate(document) is Eligibility.INELIGIBLE:
                return NOT_APPLICABLE
            canonical = document.canonical_url
        else:
            canonical = self._repository.archive_url(path.strip("/"))
            if canonical is None:
                return NOT_APPLICABLE
        return RedirectTo(
            url=self._urls.to_markdown(canonical),
            status=303,
            trigger=Trigger.ACCEPT_HEADER,
        )

    def _decide(self, document: Optional[Document], trigger: Trigger) -> NegotiationOutcome:
        if document is None:
            return NOT_APPLICABLE
        verdict = self._policy.evaluate(document)
        if verdict is Eligibility.ELIGIBLE:
            return Serve(document=document, trigger=trigger)
        if verdict is Eligibility.PROTECTED:
            return Forbidden(reason="password_required", trigger=trigger)
        return NOT_APPLICABLE

    def _resolve_path(self, path: str) -> Optional[Document]:
        key = path.strip("/")
        if not site_relative_key(key, self._urls.site_root):
            return self._repository.front_page()
        return self._repository.find_document(key)

    def _resolve_markdown_stem(self, stem: str) -> Optional[Document]:
        if site_relative_key(stem, self._urls.site_root) == FRONT_PAGE_STEM:
            front = self._repository.front_page()
            if front is not None:
                return front
        # Sites migrated from other permalink schemes keep their old extension.
        for extension in LEGACY_EXTENSIONS:
            document = self._repository.find_document(stem + extension)
            if document is not None:
                return document
        return self._repository.find_document(stem)
