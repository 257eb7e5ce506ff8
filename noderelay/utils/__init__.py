"""Utility functions for noderelay."""

from noderelay.utils.exceptions import (
    RelayError,
    TransportError,
    ClientError,
    ServerError,
    RequestSerializationError,
    ResponseDecodeError,
    JsonRpcError,
    UnexpectedStructureError,
    ReturnedError,
    DomainDecodeError,
    TrailingDataError,
    ConfigurationError,
    InvalidCookieFile,
    MissingDefaultError,
    InvalidUrlError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
    format_error,
)

__all__ = [
    "RelayError",
    "TransportError",
    "ClientError",
    "ServerError",
    "RequestSerializationError",
    "ResponseDecodeError",
    "JsonRpcError",
    "UnexpectedStructureError",
    "ReturnedError",
    "DomainDecodeError",
    "TrailingDataError",
    "ConfigurationError",
    "InvalidCookieFile",
    "MissingDefaultError",
    "InvalidUrlError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
    "format_error",
]
