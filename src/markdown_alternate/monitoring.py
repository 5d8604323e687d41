"""Prometheus metrics and dependency checks."""

from __future__ import annotations

import logging
from typing import Dict

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Gauge, generate_latest, start_http_server
import redis
from redis.exceptions import RedisError

from .config import Settings

logger = logging.getLogger(__name__)

NEGOTIATIONS = Counter(
    "markdown_negotiations_total",
    "Markdown negotiation decisions by trigger and outcome",
    labelnames=("trigger", "outcome"),
)
CACHE_LOOKUPS = Counter(
    "markdown_render_cache_total",
    "Render cache lookups by result",
    labelnames=("result",),
)
CONVERSION_FAILURES = Counter(
    "markdown_conversion_failures_total",
    "HTML to Markdown conversions that fell back to plain text",
)
CACHE_ENTRIES = Gauge(
    "markdown_render_cache_entries",
    "Entries held by the in-process render cache",
)

_metrics_started = False


def ensure_metrics_server(port: int) -> None:
    global _metrics_started
    if _metrics_started:
        return
    try:
        start_http_server(port)
    except OSError as exc:  # pragma: no cover - port in use
        logger.warning("Metrics server already running or port busy: %s", exc)
        return
    _metrics_started = True
    logger.info("Prometheus metrics server started", extra={"port": port})


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


def record_negotiation(trigger: str, outcome: str) -> None:
    NEGOTIATIONS.labels(trigger=trigger, outcome=outcome).inc()


def record_cache_lookup(result: str) -> None:
    CACHE_LOOKUPS.labels(result=result).inc()


def record_conversion_failure(*_args) -> None:
    CONVERSION_FAILURES.inc()


def _check_redis(settings: Settings) -> str:
    try:
        client = redis.Redis.from_url(
            settings.cache.redis_url,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
        return "ok"
    except RedisError as exc:
        logger.warning("Redis health check failed", exc_info=exc)
        return f"error:{exc.__class__.__name__}"


def collect_dependency_status(settings: Settings) -> Dict[str, str]:
    """Probe the render cache backend."""

    if settings.cache.backend == "redis":
        return {"cache": _check_redis(settings)}
    return {"cache": "ok"}
