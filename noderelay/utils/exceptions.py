"""
Exception hierarchy and error classification for noderelay.

Provides:
- Exception classes with error codes, one per failure class of a call
- Error categorization (transport, http status, rpc, decode, configuration)
- Safe error message formatting (no credential leak)
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(Enum):
    """Error categories for classification."""
    TRANSPORT = "transport"
    CLIENT = "client"
    SERVER = "server"
    DECODE = "decode"
    RPC = "rpc"
    DOMAIN = "domain"
    CONFIGURATION = "configuration"


class RelayError(Exception):
    """Base exception for all noderelay errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.RPC,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportError(RelayError):
    """The request failed before a response was obtained."""

    def __init__(self, error: Exception):
        super().__init__(
            str(error) or error.__class__.__name__,
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TRANSPORT,
            details={"type": error.__class__.__name__},
            retryable=True,
        )
        self.error = error


class ClientError(RelayError):
    """The server rejected the request (HTTP 4xx)."""

    def __init__(self, text: str, status_code: int | None = None):
        super().__init__(
            f"Client error: {text}",
            code="CLIENT_ERROR",
            category=ErrorCategory.CLIENT,
            details={"status_code": status_code},
        )
        self.text = text
        self.status_code = status_code


class ServerError(RelayError):
    """The server failed to handle the request (HTTP 5xx or other non-success)."""

    def __init__(self, text: str, status_code: int | None = None):
        super().__init__(
            f"Server error: {text}",
            code="SERVER_ERROR",
            category=ErrorCategory.SERVER,
            details={"status_code": status_code},
            retryable=True,
        )
        self.text = text
        self.status_code = status_code


class RequestSerializationError(RelayError):
    """The request parameters could not be encoded as JSON."""

    def __init__(self, method: str, error: Exception):
        super().__init__(
            f"Cannot serialize params for '{method}': {error}",
            code="REQUEST_SERIALIZATION_ERROR",
            category=ErrorCategory.DECODE,
            details={"method": method},
        )
        self.error = error


class ResponseDecodeError(RelayError):
    """The response body is not a JSON-RPC response of the expected shape."""

    def __init__(self, error: Exception, text: str):
        super().__init__(
            f"Deserialization error: {error}. Response: {text}",
            code="RESPONSE_DECODE_ERROR",
            category=ErrorCategory.DECODE,
        )
        self.error = error
        self.text = text


class JsonRpcError(RelayError):
    """The server answered with a JSON-RPC error object."""

    def __init__(self, rpc_code: int, rpc_message: str, data: Any = None):
        super().__init__(
            f"RPC error {rpc_code}: {rpc_message}",
            code="JSON_RPC_ERROR",
            category=ErrorCategory.RPC,
            details={"rpc_code": rpc_code, "data": data},
        )
        self.rpc_code = rpc_code
        self.rpc_message = rpc_message
        self.data = data


class UnexpectedStructureError(RelayError):
    """A result did not have the structure a compatibility conversion expects."""

    def __init__(self, message: str = "the response had an unexpected structure"):
        super().__init__(message, code="UNEXPECTED_STRUCTURE", category=ErrorCategory.DECODE)


class ReturnedError(RelayError):
    """The server returned a value that signals rejection."""

    def __init__(self, returned: str):
        super().__init__(
            f"the server returned an error: {returned}",
            code="RETURNED_ERROR",
            category=ErrorCategory.RPC,
            details={"returned": returned},
        )
        self.returned = returned


class DomainDecodeError(RelayError):
    """A hex-encoded consensus object could not be decoded."""

    def __init__(self, message: str, code: str = "DOMAIN_DECODE_ERROR"):
        super().__init__(message, code=code, category=ErrorCategory.DOMAIN)


class TrailingDataError(DomainDecodeError):
    """Bytes were left over after decoding a consensus object."""

    def __init__(self, remaining: int):
        super().__init__(
            f"data not consumed entirely when explicitly deserializing ({remaining} bytes left)",
            code="TRAILING_DATA",
        )
        self.remaining = remaining


class ConfigurationError(RelayError):
    """Programmer or operator error; not a recoverable runtime condition."""

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message, code=code, category=ErrorCategory.CONFIGURATION, details=details)


class InvalidCookieFile(ConfigurationError):
    """The cookie file does not hold a `user:pass` first line."""

    def __init__(self, path: str):
        super().__init__(f"invalid cookie file: {path}", code="INVALID_COOKIE_FILE", details={"path": path})
        self.path = path


class MissingDefaultError(ConfigurationError):
    """An interior optional argument is absent and declares no default."""

    def __init__(self, index: int):
        super().__init__(f"Missing `default` for argument idx {index}", code="MISSING_DEFAULT", details={"index": index})
        self.index = index


class InvalidUrlError(ConfigurationError):
    """The relay URL cannot be used for HTTP requests."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"invalid url '{url}': {reason}", code="INVALID_URL", details={"url": url})
        self.url = url


_SENSITIVE_PATTERNS = [
    re.compile(r"(rpcpassword|password|passwd|auth|token|secret)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"basic\s+[a-zA-Z0-9+/]+=*", re.IGNORECASE),
    re.compile(r"(https?://)[^/\s:@]+:[^/\s@]+@", re.IGNORECASE),
    re.compile(r"__cookie__:[a-f0-9]{16,}", re.IGNORECASE),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        if pattern.groups == 1:
            sanitized = pattern.sub(lambda m: f"{m.group(1)}{replacement}@", sanitized)
        else:
            sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, retryable).

    Exceptions raised outside this package (httpx, json, pydantic) are mapped
    onto the same categories the relay uses.
    """
    if isinstance(exc, RelayError):
        return exc.code, exc.category, exc.retryable

    if isinstance(exc, httpx.TimeoutException):
        return "TIMEOUT", ErrorCategory.TRANSPORT, True

    if isinstance(exc, httpx.RequestError):
        return "TRANSPORT_ERROR", ErrorCategory.TRANSPORT, True

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        if 400 <= status_code < 500:
            return "CLIENT_ERROR", ErrorCategory.CLIENT, False
        return "SERVER_ERROR", ErrorCategory.SERVER, True

    if isinstance(exc, ConnectionError):
        return "TRANSPORT_ERROR", ErrorCategory.TRANSPORT, True

    if isinstance(exc, json.JSONDecodeError):
        return "RESPONSE_DECODE_ERROR", ErrorCategory.DECODE, False

    if isinstance(exc, (FileNotFoundError, PermissionError)):
        return "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION, False

    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return "RESPONSE_DECODE_ERROR", ErrorCategory.DECODE, False

    return "INTERNAL_ERROR", ErrorCategory.RPC, False


def format_error(exc: Exception, include_details: bool = False) -> str:
    """Format an exception as a one-line message for display."""
    code, category, retryable = classify_exception(exc)

    if isinstance(exc, RelayError):
        message = sanitize_error_message(exc.message)
    else:
        message = sanitize_error_message(str(exc))

    if include_details:
        hint = "retryable" if retryable else "non-retryable"
        return f"Error [{code}] ({category.value}, {hint}): {message}"
    return f"Error [{code}]: {message}"
