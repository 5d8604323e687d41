"""Single source of truth for which documents may be served as Markdown."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Sequence, Tuple

from .models import Document

DEFAULT_SUPPORTED_TYPES: Tuple[str, ...] = ("post", "page")

SupportedTypesHook = Callable[[Tuple[str, ...]], Iterable[str]]


class Eligibility(str, Enum):
    ELIGIBLE = "eligible"
    PROTECTED = "protected"
    INELIGIBLE = "ineligible"


class EligibilityPolicy:
    """Evaluates the publish/access/type predicate.

    ``supported_types_hook`` receives the configured allow-set and returns the
    effective one, so a host can extend or narrow it without touching config.
    """

    def __init__(
        self,
        supported_types: Sequence[str] = DEFAULT_SUPPORTED_TYPES,
        supported_types_hook: SupportedTypesHook | None = None,
    ) -> None:
        types = tuple(supported_types)
        if supported_types_hook is not None:
            types = tuple(supported_types_hook(types))
        self._types = frozenset(types)

    @property
    def supported_types(self) -> frozenset[str]:
        return self._types

    def is_supported_type(self, doc_type: str) -> bool:
        return doc_type in self._types

    def evaluate(self, document: Document) -> Eligibility:
        if not self.is_supported_type(document.type) or not document.is_published:
            return Eligibility.INELIGIBLE
        if document.password_protected:
            return Eligibility.PROTECTED
        return Eligibility.ELIGIBLE

    def is_eligible(self, document: Document) -> bool:
        return self.evaluate(document) is Eligibility.ELIGIBLE
