"""Response models for the JSON API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded", "down"] = "ok"
    timestamp: datetime
    dependencies: dict[str, str] = Field(default_factory=dict)


class MarkdownUrlResponse(BaseModel):
    canonical_url: str = Field(..., description="URL as supplied by the caller")
    markdown_url: str = Field(..., description="Markdown alternate of canonical_url")
