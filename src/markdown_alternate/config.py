"""Centralized settings and configuration loading utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SiteSettings(BaseModel):
    root_url: str = ""
    front_page_id: str | None = None
    content_file: str | None = "./config/content.yaml"
    name: str = "Site"


class NegotiationSettings(BaseModel):
    supported_types: list[str] = Field(default_factory=lambda: ["post", "page"])
    query_param: str = "format"
    query_value: str = "markdown"
    emit_token_header: bool = True
    token_header: str = "X-Markdown-Tokens"


class CacheSettings(BaseModel):
    backend: Literal["memory", "redis"] = "memory"
    ttl_seconds: int = Field(24 * 60 * 60, ge=1)
    redis_url: str = "redis://localhost:6379/2"
    key_prefix: str = "markdown_alternate:"


class RenderingSettings(BaseModel):
    converter: str = "markdownify"
    converter_modules: list[str] = Field(default_factory=list)
    converter_modules_file: str | None = "./config/converters.yaml"
    heading_style: str = "ATX"
    taxonomy_footer: bool = False


class LoggingSettings(BaseModel):
    level: str = "INFO"
    log_dir: str = "./logs"
    file_name: str | None = None
    json_format: bool = False
    max_log_file_size_mb: int = 100
    backup_count: int = 7


class MonitoringSettings(BaseModel):
    enabled: bool = True
    health_api: str = "/monitor/health"
    prometheus_port: int = 9095


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MDALT_", env_nested_delimiter="__", extra="allow")

    service_name: str = "markdown-alternate"
    environment: str = "dev"
    api_version: str = "v1"
    base_url: str = "/api/v1"

    site: SiteSettings = SiteSettings()
    negotiation: NegotiationSettings = NegotiationSettings()
    cache: CacheSettings = CacheSettings()
    rendering: RenderingSettings = RenderingSettings()
    logging: LoggingSettings = LoggingSettings()
    monitoring: MonitoringSettings = MonitoringSettings()

    @staticmethod
    def load_yaml_config_file(file_path: str | Path | None) -> Dict[str, Any]:
        if not file_path:
            return {}
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        import yaml  # lazy import for optional dependency

        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration YAML must produce a mapping")
        return data

    @classmethod
    def from_source(cls, *, config_file: str | None = None, **overrides: Any) -> "Settings":
        base_data = cls.load_yaml_config_file(config_file)
        base_data.update(overrides)
        return cls(**base_data)


@lru_cache
def get_settings() -> Settings:
    cfg_file = os.getenv("MDALT_CONFIG_FILE")
    if cfg_file:
        return Settings.from_source(config_file=cfg_file)

    default_path = Path.cwd() / "config" / "settings.yaml"
    if default_path.exists():
        return Settings.from_source(config_file=str(default_path))

    return Settings()


def reload_settings() -> None:
    get_settings.cache_clear()


def settings_dependency() -> Settings:
    return get_settings()
