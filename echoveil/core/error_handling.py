"""
Error handling for the Echoveil client.

This module provides the hierarchical error classification used across the
client: transport failures, non-2xx HTTP responses and decode failures from
the game server, plus local validation errors. It also provides the fallback
decorator used by read paths that degrade to cached or demo data.
"""

import functools
import time
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

import structlog
from typing_extensions import ParamSpec

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    CRITICAL = auto()  # Client cannot continue
    HIGH = auto()  # Operation failed and must be surfaced
    MEDIUM = auto()  # Operation failed but a fallback exists
    LOW = auto()  # Minor issues that can be logged and ignored


class ErrorCategory(Enum):
    """Error categories for classification and routing."""

    SYSTEM = auto()
    SERVICE = auto()  # Server answered with an error status
    NETWORK = auto()  # No response at all
    DECODE = auto()  # Response body unusable
    VALIDATION = auto()  # Local precondition failed
    CONFIGURATION = auto()


class BaseError(Exception):
    """Base exception class with enhanced error information."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """
        Initialize base error with comprehensive metadata.

        Args:
            message: Human-readable error message
            severity: Error severity level
            category: Error category for classification
            error_code: Unique error code for tracking
            context: Additional context information
            recoverable: Whether the UI can continue in a degraded state
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.recoverable = recoverable
        self.timestamp = datetime.now(timezone.utc)

    def _generate_error_code(self) -> str:
        """Generate error code based on category and timestamp."""
        timestamp = int(time.time() * 1000) % 100000
        return f"{self.category.name[:3]}-{self.severity.name[:3]}-{timestamp}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.name,
            "category": self.category.name,
            "context": self.context,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
        }


class GatewayError(BaseError):
    """Any failure talking to the game server."""

    def __init__(self, message: str, endpoint: str, **kwargs: Any) -> None:
        context = kwargs.pop("context", {})
        context["endpoint"] = endpoint
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("category", ErrorCategory.SERVICE)
        super().__init__(message, context=context, **kwargs)
        self.endpoint = endpoint


class TransportError(GatewayError):
    """No response: connection refused, DNS failure, timeout."""

    def __init__(self, message: str, endpoint: str, **kwargs: Any) -> None:
        super().__init__(
            message,
            endpoint,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.NETWORK,
            **kwargs,
        )


class HTTPStatusError(GatewayError):
    """Server responded with a non-2xx status."""

    def __init__(self, endpoint: str, status_code: int, **kwargs: Any) -> None:
        context = kwargs.pop("context", {})
        context["status_code"] = status_code
        super().__init__(
            f"HTTP Error {status_code}",
            endpoint,
            context=context,
            **kwargs,
        )
        self.status_code = status_code


class DecodeError(GatewayError):
    """Response body could not be decoded into the expected shape."""

    def __init__(self, endpoint: str, description: str, **kwargs: Any) -> None:
        context = kwargs.pop("context", {})
        context["description"] = description
        super().__init__(
            f"Failed to decode response: {description}",
            endpoint,
            category=ErrorCategory.DECODE,
            context=context,
            **kwargs,
        )
        self.description = description


class ActionRejectedError(GatewayError):
    """Server accepted the request but reported ``success: false``."""

    def __init__(self, endpoint: str, reason: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(reason or "Server rejected action", endpoint, **kwargs)


class ValidationError(BaseError):
    """Local input validation errors."""

    def __init__(
        self, message: str, field: Optional[str] = None, **kwargs: Any
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            context=context,
            recoverable=True,
            **kwargs,
        )


def user_message(error: BaseException, action: Optional[str] = None) -> str:
    """Render an error as a dismissible banner message."""
    if isinstance(error, TransportError):
        detail = "Could not reach the game server"
    elif isinstance(error, BaseError):
        detail = error.message
    else:
        detail = str(error) or type(error).__name__
    if action:
        return f"Failed to {action}: {detail}"
    return detail


def with_fallback(
    fallback: Callable[..., T],
    errors: Tuple[Type[BaseException], ...] = (GatewayError,),
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for read paths: on one of ``errors`` return ``fallback(*args, **kwargs)``.

    Nothing is retried. The failure is logged once at WARNING.

    Args:
        fallback: Called with the same arguments as the wrapped coroutine
        errors: Exception types that trigger the fallback
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except errors as e:
                logger.warning(
                    "Falling back after read failure",
                    function=func.__qualname__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return fallback(*args, **kwargs)

        return wrapper

    return decorator
