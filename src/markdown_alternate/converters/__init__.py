"""Converter package exports and convenience loaders."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .base import HtmlConverter
from .registry import (
	DEFAULT_CONVERTER_MODULES,
	REGISTRY,
	load_converters,
	read_converter_module_file,
)

if TYPE_CHECKING:  # pragma: no cover - import guard for type checkers
	from markdown_alternate.config import RenderingSettings


def _modules_from_settings(settings: "RenderingSettings" | None) -> List[str]:
	if not settings:
		return []

	explicit = [module for module in settings.converter_modules if module]
	if explicit:
		return explicit

	if settings.converter_modules_file:
		modules = read_converter_module_file(settings.converter_modules_file)
		if modules:
			return modules

	return []


def load_converters_from_settings(settings: "RenderingSettings" | None = None) -> None:
	"""Load the builtin converters plus any modules named in settings."""

	load_converters(DEFAULT_CONVERTER_MODULES)
	extra = _modules_from_settings(settings)
	if extra:
		load_converters(extra)


def converter_from_settings(settings: "RenderingSettings") -> HtmlConverter:
	load_converters_from_settings(settings)
	return REGISTRY.get(settings.converter, heading_style=settings.heading_style)


__all__ = [
	"REGISTRY",
	"HtmlConverter",
	"converter_from_settings",
	"load_converters_from_settings",
	"load_converters",
	"DEFAULT_CONVERTER_MODULES",
]
