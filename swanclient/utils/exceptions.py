"""
Exception hierarchy and error handling utilities for swanclient.

Provides:
- Error classes for each failure kind seen when talking to Lotus or Swan
- Error categorization (retryable, fatal, validation, ...)
- Safe error message formatting (no token leak into logs)
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(Enum):
    """Error categories for classification."""
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"


class SwanClientError(Exception):
    """Base exception for all swanclient errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportFailure(SwanClientError):
    """No usable response: network error, timeout, non-2xx or unreadable body."""

    def __init__(self, target: str, message: str = "no response from api"):
        super().__init__(
            f"{target}: {message}",
            code="TRANSPORT_FAILURE",
            category=ErrorCategory.RETRYABLE,
            details={"target": target},
        )


class DecodeFailure(SwanClientError):
    """Response body does not match the expected envelope shape."""

    def __init__(self, target: str, message: str):
        super().__init__(
            f"{target}: cannot decode response: {message}",
            code="DECODE_FAILURE",
            category=ErrorCategory.VALIDATION,
            details={"target": target},
        )


class ProtocolError(SwanClientError):
    """The remote explicitly reported a failure (JSON-RPC error or REST status)."""

    def __init__(self, target: str, message: str, remote_code: int | None = None):
        if remote_code is not None:
            text = f"{target}: error code:{remote_code}, message:{message}"
        else:
            text = f"{target}: {message}"
        super().__init__(
            text,
            code="PROTOCOL_ERROR",
            category=ErrorCategory.FATAL,
            details={"target": target, "remote_code": remote_code, "remote_message": message},
        )
        self.remote_code = remote_code
        self.remote_message = message


class EmptyResult(SwanClientError):
    """Syntactically valid response whose payload is absent."""

    def __init__(self, target: str, message: str = "result is null"):
        super().__init__(
            f"{target}: {message}",
            code="EMPTY_RESULT",
            category=ErrorCategory.NOT_FOUND,
            details={"target": target},
        )


class SwanAuthError(SwanClientError):
    """Session handshake with the Swan API failed; nothing else can proceed."""

    def __init__(self, status: str, message: str):
        super().__init__(
            f"{status}: {message}",
            code="FATAL_AUTH",
            category=ErrorCategory.PERMISSION,
            details={"status": status},
        )
        self.status = status


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials (api keys, bearer tokens, JWTs) from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    Returns:
        Tuple of (error_code, category, should_retry)
    """
    if isinstance(exc, SwanClientError):
        return exc.code, exc.category, exc.category is ErrorCategory.RETRYABLE

    if isinstance(exc, httpx.TimeoutException):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, httpx.RequestError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION, False

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    exc_str = str(exc).lower()
    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if "unauthorized" in exc_str or "401" in exc_str:
        return "UNAUTHORIZED", ErrorCategory.PERMISSION, False

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False
