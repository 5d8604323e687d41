"""Render cache keyed by document id and qualified by modification time.

An entry is only a hit when its ``source_modified`` equals the document's
current ``modified_at``; any re-save invalidates it. Expiry is checked on
read. Concurrent renders of the same document are not coordinated, the last
writer wins.

Backends swallow their own I/O errors: a failed read is a miss and a failed
write is dropped, the freshly rendered Markdown is still returned.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Protocol

from redis.exceptions import RedisError

from .models import CacheEntry, Document, RenderedArtifact
from .monitoring import CACHE_ENTRIES, record_cache_lookup

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60

Clock = Callable[[], datetime]
RenderFn = Callable[[Document], str]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the stored entry or ``None``."""

    def set(self, key: str, entry: CacheEntry, ttl_seconds: int) -> None:
        """Store ``entry`` under ``key``, replacing any previous value."""


class MemoryCacheBackend:
    """Process-local backend; a dict is enough since entries are immutable."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry, ttl_seconds: int) -> None:
        self._entries[key] = entry
        CACHE_ENTRIES.set(len(self._entries))


def _encode_entry(entry: CacheEntry) -> str:
    return json.dumps(
        {
            "markdown": entry.artifact.markdown,
            "source_modified": entry.artifact.source_modified.isoformat(),
            "expires_at": entry.expires_at.isoformat(),
        }
    )


def _decode_entry(raw: bytes | str) -> CacheEntry:
    data = json.loads(raw)
    artifact = RenderedArtifact(
        markdown=data["markdown"],
        source_modified=datetime.fromisoformat(data["source_modified"]),
    )
    return CacheEntry(artifact=artifact, expires_at=datetime.fromisoformat(data["expires_at"]))


class RedisCacheBackend:
    """Backend shared between worker processes through Redis."""

    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheBackend":
        import redis

        return cls(redis.Redis.from_url(url, socket_connect_timeout=2, socket_timeout=2))

    def get(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self._client.get(key)
        except RedisError:
            logger.warning("Render cache read failed for %s", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return _decode_entry(raw)
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding undecodable render cache entry %s", key)
            return None

    def set(self, key: str, entry: CacheEntry, ttl_seconds: int) -> None:
        try:
            self._client.set(key, _encode_entry(entry), ex=ttl_seconds)
        except RedisError:
            logger.warning("Render cache write failed for %s", key, exc_info=True)


class RenderCache:
    def __init__(
        self,
        backend: CacheBackend,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = "markdown_alternate:",
        clock: Clock = utcnow,
    ) -> None:
        self._backend = backend
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def key_for(self, document: Document) -> str:
        return f"{self._key_prefix}{document.id}"

    def lookup(self, document: Document) -> Optional[RenderedArtifact]:
        entry = self._backend.get(self.key_for(document))
        if entry is None:
            record_cache_lookup("miss")
            return None
        if entry.expires_at <= self._clock():
            record_cache_lookup("expired")
            return None
        if entry.artifact.source_modified != document.modified_at:
            record_cache_lookup("stale")
            return None
        record_cache_lookup("hit")
        return entry.artifact

    def store(self, document: Document, markdown: str, ttl_seconds: int | None = None) -> RenderedArtifact:
        ttl = ttl_seconds if ttl_seconds is not None else self._ttl_seconds
        artifact = RenderedArtifact(markdown=markdown, source_modified=document.modified_at)
        entry = CacheEntry(artifact=artifact, expires_at=self._clock() + timedelta(seconds=ttl))
        self._backend.set(self.key_for(document), entry, ttl)
        return artifact

    def get_or_render(self, document: Document, render_fn: RenderFn, ttl: int | None = None) -> str:
        artifact = self.lookup(document)
        if artifact is not None:
            return artifact.markdown
        return self.store(document, render_fn(document), ttl).markdown
