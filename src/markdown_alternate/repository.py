"""Document repository boundary and an in-memory implementation."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, Field

from .models import Document

logger = logging.getLogger(__name__)

_DATE_ARCHIVE_RE = re.compile(r"^(\d{4})(?:/(\d{2})(?:/(\d{2}))?)?$")


def path_key(url: str) -> str:
    """Normalize a URL or path to the slash-free key used for lookups."""
    return urlsplit(url).path.strip("/")


def site_relative_key(key: str, site_root: str) -> str:
    """Drop the path of ``site_root`` from the front of ``key``.

    With a root of ``https://example.com/blog`` the key ``blog/2024/01``
    becomes ``2024/01``. Keys outside the root are returned unchanged.
    """
    key = key.strip("/")
    prefix = path_key(site_root)
    if not prefix:
        return key
    if key == prefix:
        return ""
    if key.startswith(prefix + "/"):
        return key[len(prefix) + 1 :]
    return key


class DocumentRepository(Protocol):
    def find_document(self, key: str) -> Optional[Document]:
        """Return the document whose canonical path matches ``key``."""

    def front_page(self) -> Optional[Document]:
        """Return the configured front-page document, if any."""

    def archive_url(self, key: str) -> Optional[str]:
        """Return the canonical URL of a taxonomy, author or date archive."""

    def documents(self) -> Iterable[Document]:
        """Iterate every document known to the repository."""


class ContentFile(BaseModel):
    front_page_id: Optional[str] = None
    documents: List[Document] = Field(default_factory=list)


class InMemoryRepository:
    def __init__(
        self,
        documents: Iterable[Document] = (),
        *,
        front_page_id: Optional[str] = None,
        site_root: str = "",
    ) -> None:
        self._site_root = site_root.rstrip("/")
        self._by_id: Dict[str, Document] = {}
        self._by_key: Dict[str, Document] = {}
        self._archives: Dict[str, str] = {}
        self._front_page_id = front_page_id
        for document in documents:
            self.add(document)

    def add(self, document: Document) -> None:
        self._by_id[document.id] = document
        self._by_key[path_key(document.canonical_url)] = document
        for terms in document.terms.values():
            for term in terms:
                self._archives.setdefault(path_key(term.url), term.url)
        if document.author_url:
            self._archives.setdefault(path_key(document.author_url), document.author_url)

    def get(self, document_id: str) -> Optional[Document]:
        return self._by_id.get(document_id)

    def find_document(self, key: str) -> Optional[Document]:
        return self._by_key.get(key.strip("/"))

    def front_page(self) -> Optional[Document]:
        if self._front_page_id:
            return self._by_id.get(self._front_page_id)
        return self._by_key.get(path_key(self._site_root))

    def archive_url(self, key: str) -> Optional[str]:
        key = key.strip("/")
        if key in self._archives:
            return self._archives[key]
        relative = site_relative_key(key, self._site_root)
        match = _DATE_ARCHIVE_RE.match(relative)
        if match and self._has_posts_dated(*match.groups()):
            return f"{self._site_root}/{relative}/"
        return None

    def documents(self) -> Iterable[Document]:
        return list(self._by_id.values())

    def _has_posts_dated(self, year: str, month: Optional[str], day: Optional[str]) -> bool:
        prefix = "-".join(part for part in (year, month, day) if part)
        return any(
            doc.published_at.strftime("%Y-%m-%d").startswith(prefix) for doc in self._by_id.values()
        )

    @classmethod
    def from_yaml(cls, path: str | Path, *, site_root: str = "", front_page_id: Optional[str] = None) -> "InMemoryRepository":
        file_path = Path(path)
        if not file_path.exists():
            logger.info("Content file %s not found, starting with an empty repository", file_path)
            return cls(site_root=site_root, front_page_id=front_page_id)

        with file_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError("Content YAML must produce a mapping")

        content = ContentFile(**data)
        logger.info("Loaded %d documents from %s", len(content.documents), file_path)
        return cls(
            content.documents,
            front_page_id=front_page_id or content.front_page_id,
            site_root=site_root,
        )
