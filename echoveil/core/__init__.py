"""Core utilities shared across the client."""

from .error_handling import (
    ActionRejectedError,
    BaseError,
    DecodeError,
    ErrorCategory,
    ErrorSeverity,
    GatewayError,
    HTTPStatusError,
    TransportError,
    ValidationError,
    user_message,
    with_fallback,
)
from .preferences import ClientPreferences

__all__ = [
    "BaseError",
    "ErrorSeverity",
    "ErrorCategory",
    "GatewayError",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
    "ActionRejectedError",
    "ValidationError",
    "user_message",
    "with_fallback",
    "ClientPreferences",
]
