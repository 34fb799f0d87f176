"""Tests for valconsole.utils.exceptions module."""

from __future__ import annotations

import asyncio
import json

from valconsole.utils.exceptions import (
    ConsoleError,
    ErrorCategory,
    FormatError,
    NotFoundError,
    ParameterError,
    RemoteError,
    SignatureError,
    TimeoutError,
    UnsupportedCommandError,
    ValidationError,
    classify_exception,
    format_command_error,
    sanitize_error_message,
)


class TestExceptionClasses:
    """Test custom exception classes."""

    def test_console_error_to_dict(self) -> None:
        exc = ConsoleError("test message", code="TEST_CODE")
        assert exc.to_dict() == {
            "error": "TEST_CODE",
            "message": "test message",
            "category": ErrorCategory.FATAL.value,
            "details": {},
        }
        assert str(exc) == "[TEST_CODE] test message"

    def test_validation_error_with_field(self) -> None:
        exc = ValidationError("category out of range", field="category")
        assert exc.code == "VALIDATION_ERROR"
        assert exc.category == ErrorCategory.VALIDATION
        assert exc.details == {"field": "category"}

    def test_unsupported_command_is_parameter_error(self) -> None:
        exc = UnsupportedCommandError("bogus")
        assert isinstance(exc, ParameterError)
        assert exc.code == "COMMAND_NOT_SUPPORTED"
        assert exc.message == "command bogus not supported"

    def test_remote_error_keeps_code_and_message(self) -> None:
        exc = RemoteError(-3, "key not found", command="exportpub")
        assert exc.remote_code == -3
        assert exc.remote_message == "key not found"
        assert exc.category == ErrorCategory.REMOTE
        assert exc.details["command"] == "exportpub"

    def test_not_found_error(self) -> None:
        exc = NotFoundError("config param", "34")
        assert exc.code == "NOT_FOUND"
        assert "config param not found: 34" in str(exc)

    def test_timeout_error(self) -> None:
        exc = TimeoutError("getstats", 30.0)
        assert exc.code == "TIMEOUT"
        assert exc.category == ErrorCategory.TIMEOUT
        assert "30.0s" in exc.message

    def test_signature_error_is_security(self) -> None:
        assert SignatureError().category == ErrorCategory.SECURITY

    def test_with_context_keeps_existing_keys(self) -> None:
        exc = FormatError("bad hash", name="key_hash")
        assert exc.with_context(parameter="other", command="sign") is exc
        assert exc.details == {"parameter": "key_hash", "command": "sign"}


class TestSanitizeErrorMessage:
    """Test sanitize_error_message function."""

    def test_no_sensitive_info(self) -> None:
        assert sanitize_error_message("Operation failed") == "Operation failed"

    def test_sanitize_private_key(self) -> None:
        result = sanitize_error_message("bad config: pvt_key: 0123abcdef")
        assert "0123abcdef" not in result
        assert "[REDACTED]" in result

    def test_sanitize_bearer(self) -> None:
        result = sanitize_error_message("header Bearer abc.def-123")
        assert "abc.def-123" not in result


class TestClassifyException:
    """Test classify_exception function."""

    def test_console_error(self) -> None:
        assert classify_exception(RemoteError(1, "x")) == ("REMOTE_ERROR", ErrorCategory.REMOTE)

    def test_builtin_errors(self) -> None:
        assert classify_exception(FileNotFoundError("x")) == ("FILE_NOT_FOUND", ErrorCategory.NOT_FOUND)
        assert classify_exception(asyncio.TimeoutError()) == ("TIMEOUT", ErrorCategory.TIMEOUT)
        assert classify_exception(ConnectionResetError()) == ("CONNECTION_ERROR", ErrorCategory.TRANSPORT)
        assert classify_exception(json.JSONDecodeError("x", "", 0)) == ("JSON_PARSE_ERROR", ErrorCategory.VALIDATION)
        assert classify_exception(ValueError("x")) == ("INVALID_VALUE", ErrorCategory.VALIDATION)
        assert classify_exception(RuntimeError("x")) == ("INTERNAL_ERROR", ErrorCategory.FATAL)


class TestFormatCommandError:
    """Test format_command_error function."""

    def test_console_line(self) -> None:
        assert format_command_error(UnsupportedCommandError("x")) == "Error executing command: command x not supported"

    def test_with_details(self) -> None:
        text = format_command_error(ValidationError("out of range"), include_details=True)
        assert text == "Error [VALIDATION_ERROR] (validation): out of range"

    def test_foreign_exception_is_sanitized(self) -> None:
        text = format_command_error(OSError("secret=hunter2"))
        assert "hunter2" not in text
