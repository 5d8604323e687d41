"""Domain models shared by negotiation, rendering and caching."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PUBLISHED = "publish"


class TaxonomyTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class Document(BaseModel):
    """A publishable entity supplied by the content repository.

    ``terms`` is keyed by taxonomy name (``category``, ``post_tag`` or any
    custom taxonomy). The renderer decides which taxonomies reach the
    frontmatter.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    canonical_url: str
    title: str
    body_html: str = ""
    author: str = ""
    author_url: Optional[str] = None
    published_at: datetime
    modified_at: datetime
    status: str = PUBLISHED
    password_protected: bool = False
    type: str = "post"
    featured_image: Optional[str] = None
    terms: Dict[str, List[TaxonomyTerm]] = Field(default_factory=dict)

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISHED


class Trigger(str, Enum):
    DIRECT = "direct"
    QUERY_PARAM = "query_param"
    ACCEPT_HEADER = "accept_header"


@dataclass(frozen=True)
class RenderedArtifact:
    markdown: str
    source_modified: datetime


@dataclass(frozen=True)
class CacheEntry:
    artifact: RenderedArtifact
    expires_at: datetime


@dataclass(frozen=True)
class Serve:
    document: Document
    trigger: Trigger


@dataclass(frozen=True)
class RedirectTo:
    url: str
    status: int = 303
    trigger: Optional[Trigger] = None


@dataclass(frozen=True)
class NotApplicable:
    pass


@dataclass(frozen=True)
class Forbidden:
    reason: str
    trigger: Optional[Trigger] = None


NOT_APPLICABLE = NotApplicable()

NegotiationOutcome = Union[Serve, RedirectTo, NotApplicable, Forbidden]
