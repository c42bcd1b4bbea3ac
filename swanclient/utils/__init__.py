"""Utility functions for swanclient."""

from swanclient.utils.exceptions import (
    DecodeFailure,
    EmptyResult,
    ErrorCategory,
    ProtocolError,
    SwanAuthError,
    SwanClientError,
    TransportFailure,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "SwanClientError",
    "TransportFailure",
    "DecodeFailure",
    "ProtocolError",
    "EmptyResult",
    "SwanAuthError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
]
