"""Markdown alternates for CMS documents via .md URLs and content negotiation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .urls import UrlConverter, to_canonical_url, to_markdown_url

if TYPE_CHECKING:  # pragma: no cover
	from fastapi import FastAPI


def create_app(*args, **kwargs) -> "FastAPI":
	from .app import create_app as _create_app

	return _create_app(*args, **kwargs)


__all__ = ["create_app", "UrlConverter", "to_markdown_url", "to_canonical_url"]
