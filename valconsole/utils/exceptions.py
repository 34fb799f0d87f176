"""
Exception hierarchy and error handling utilities for valconsole.

Provides:
- Custom exception classes with error codes
- Error categorization (validation, protocol, remote, transport)
- Safe error message formatting (no key material leak)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    PROTOCOL = "protocol"
    REMOTE = "remote"
    SECURITY = "security"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    FATAL = "fatal"


class ConsoleError(Exception):
    """Base exception for all valconsole errors."""

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

    def with_context(self, **details: Any) -> "ConsoleError":
        """Attach extra context (command name, parameters) without replacing existing keys."""
        for key, value in details.items():
            self.details.setdefault(key, value)
        return self

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ParameterError(ConsoleError):
    """A required command argument is missing."""

    def __init__(self, message: str, name: str | None = None):
        details = {"parameter": name} if name else {}
        super().__init__(message, code="PARAMETER_ERROR", category=ErrorCategory.VALIDATION, details=details)


class UnsupportedCommandError(ParameterError):
    """Command name is not in the registry."""

    def __init__(self, name: str):
        super().__init__(f"command {name} not supported")
        self.code = "COMMAND_NOT_SUPPORTED"
        self.details = {"command": name}


class FormatError(ConsoleError):
    """Malformed hex/base64/integer/hash value, or a payload with the wrong layout."""

    def __init__(self, message: str, name: str | None = None):
        details = {"parameter": name} if name else {}
        super().__init__(message, code="FORMAT_ERROR", category=ErrorCategory.VALIDATION, details=details)


class ValidationError(ConsoleError):
    """Value parsed but lies outside its allowed domain."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class ProtocolError(ConsoleError):
    """Response shape does not match what the command expects."""

    def __init__(self, message: str, command: str | None = None):
        details = {"command": command} if command else {}
        super().__init__(message, code="PROTOCOL_ERROR", category=ErrorCategory.PROTOCOL, details=details)


class RemoteError(ConsoleError):
    """Structured error envelope returned by the remote node."""

    def __init__(self, remote_code: int, remote_message: str, command: str | None = None):
        details: dict[str, Any] = {"remote_code": remote_code, "remote_message": remote_message}
        if command:
            details["command"] = command
        super().__init__(
            f"error response to {command or 'query'}: code {remote_code}: {remote_message}",
            code="REMOTE_ERROR",
            category=ErrorCategory.REMOTE,
            details=details,
        )
        self.remote_code = remote_code
        self.remote_message = remote_message


class SignatureError(ConsoleError):
    """Local verification of a remote-issued signature failed."""

    def __init__(self, message: str = "signature verification failed"):
        super().__init__(message, code="SIGNATURE_ERROR", category=ErrorCategory.SECURITY)


class ConnectError(ConsoleError):
    """Channel could not be established."""

    def __init__(self, message: str):
        super().__init__(message, code="CONNECT_ERROR", category=ErrorCategory.TRANSPORT)


class ChannelError(ConsoleError):
    """Transport failure while a query was in flight."""

    def __init__(self, message: str):
        super().__init__(message, code="CHANNEL_ERROR", category=ErrorCategory.TRANSPORT)


class TimeoutError(ConsoleError):
    """Round trip did not complete in time."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"Operation '{operation}' timed out after {timeout_seconds}s",
            code="TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )


class NotFoundError(ConsoleError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            code="NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class StructureError(ConsoleError):
    """A required sub-tree is missing from a state snapshot."""

    def __init__(self, message: str):
        super().__init__(message, code="STRUCTURE_ERROR", category=ErrorCategory.NOT_FOUND)


_SENSITIVE_PATTERNS = [
    re.compile(r"(pvt_key|private_key|secret|password)[=:]\s*['\"]?([^\s'\",}]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove key material from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory]:
    """Classify an exception and return (error_code, category)."""
    if isinstance(exc, ConsoleError):
        return exc.code, exc.category

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.TRANSPORT

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, OSError):
        return "IO_ERROR", ErrorCategory.FATAL

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    return "INTERNAL_ERROR", ErrorCategory.FATAL


def format_command_error(exc: Exception, include_details: bool = False) -> str:
    """Format an exception as the one-line text printed by the console front-ends."""
    code, category = classify_exception(exc)

    if isinstance(exc, ConsoleError):
        message = exc.message
    else:
        message = sanitize_error_message(str(exc))

    if include_details:
        return f"Error [{code}] ({category.value}): {message}"
    return f"Error executing command: {message}"
