"""Converter registry responsible for managing HTML to Markdown backends."""

from __future__ import annotations

from importlib import import_module
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Type

import yaml

from .base import HtmlConverter


DEFAULT_CONVERTER_MODULES: Sequence[str] = (
    "markdown_alternate.converters.builtin.markdownify_converter",
    "markdown_alternate.converters.builtin.plaintext",
)


class ConverterRegistry:
    def __init__(self) -> None:
        self._registry: Dict[str, Type[HtmlConverter]] = {}

    def register(self, converter_cls: Type[HtmlConverter]) -> None:
        key = converter_cls.slug.lower()
        if not key:
            raise ValueError(f"Converter {converter_cls.__name__} has no slug")
        if key in self._registry:
            raise ValueError(f"Converter already registered for {key}")
        self._registry[key] = converter_cls

    def get(self, slug: str, **options: Any) -> HtmlConverter:
        key = slug.lower()
        if key not in self._registry:
            raise KeyError(f"No converter registered for {slug}")
        return self._registry[key](**options)


REGISTRY = ConverterRegistry()


def load_converters(module_names: Iterable[str] | None = None) -> None:
    """Import converter modules and trigger their registration side-effects."""

    modules = list(module_names or DEFAULT_CONVERTER_MODULES)
    for module in modules:
        import_module(module)


def read_converter_module_file(path: str | Path) -> List[str]:
    file_path = Path(path)
    if not file_path.exists():
        return []

    with file_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    modules = data.get("modules", []) if isinstance(data, dict) else []
    return [str(module) for module in modules]


__all__ = [
    "REGISTRY",
    "DEFAULT_CONVERTER_MODULES",
    "ConverterRegistry",
    "load_converters",
    "read_converter_module_file",
]
