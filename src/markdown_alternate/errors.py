"""Error code registry and helpers for consistent responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import HTTPException, status


@dataclass(frozen=True)
class ErrorCodeSpec:
    code: str
    zh: str
    en: str
    status: int
    http_status: int


class ErrorRegistry:
    def __init__(self) -> None:
        self._codes: Dict[str, ErrorCodeSpec] = {}

    def register(self, spec: ErrorCodeSpec) -> None:
        if spec.code in self._codes:
            raise ValueError(f"Error code {spec.code} already registered")
        self._codes[spec.code] = spec

    def get(self, code: str) -> ErrorCodeSpec:
        if code not in self._codes:
            raise KeyError(f"Unknown error code: {code}")
        return self._codes[code]


ERRORS = ErrorRegistry()

# Forbidden reasons produced by negotiation map onto these codes.
FORBIDDEN_REASONS: Dict[str, str] = {
    "password_required": "ERR_PASSWORD_REQUIRED",
}


def register_default_errors() -> None:
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_PASSWORD_REQUIRED",
            zh="该内容受密码保护",
            en="This content is password protected.",
            status=4031,
            http_status=status.HTTP_403_FORBIDDEN,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_DOCUMENT_NOT_FOUND",
            zh="文档不存在",
            en="Document not found",
            status=4041,
            http_status=status.HTTP_404_NOT_FOUND,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_URL_INVALID",
            zh="URL参数缺失或无效",
            en="Missing or invalid url parameter",
            status=4001,
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    )


register_default_errors()


def spec_for_reason(reason: str) -> ErrorCodeSpec:
    return ERRORS.get(FORBIDDEN_REASONS[reason])


def raise_error(code: str, *, detail: Optional[str] = None) -> None:
    spec = ERRORS.get(code)
    raise HTTPException(
        status_code=spec.http_status,
        detail={
            "status": "failure",
            "error_code": spec.code,
            "error_status": spec.status,
            "message": detail or spec.en,
            "zh_message": spec.zh,
        },
    )
