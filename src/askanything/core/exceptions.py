# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for Ask Anything.

Provides specific exception types for different error categories,
enabling better error handling and clearer error messages.

Absence of data is not an error: reshapers and handlers return an
explanatory result object instead of raising.
"""

from __future__ import annotations

from typing import Any


class AskAnythingException(Exception):  # noqa: N818
    """Base exception for all Ask Anything errors.

    All package-specific exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AskAnythingException):
    """Exception for validation errors.

    Raised when:
    - A required tool argument is missing
    - An argument is outside its enumerated values or range
    - An unknown session field is updated
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigException(AskAnythingException):
    """Exception for configuration errors.

    Raised when:
    - Required environment variables are missing
    - The API token cannot be read
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class NotFoundError(AskAnythingException):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str, resource_id: str, message: str | None = None):
        message = message or f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class SessionNotFoundError(NotFoundError):
    """Raised when a session id is unknown to the session store."""

    def __init__(self, session_id: str):
        super().__init__("Session", session_id)


class NoChildSelectedError(AskAnythingException):
    """Raised when a child-scoped tool runs before a child was selected."""

    def __init__(self, message: str = 'No child selected. Please use the "select_child" tool first.'):
        super().__init__(message)


class ToolNotFoundError(AskAnythingException):
    """Raised when a tool name is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Tool not found: {tool_name}", {"tool_name": tool_name})
        self.tool_name = tool_name


class DataServiceError(AskAnythingException):
    """Exception for failures talking to the remote data service.

    Raised when:
    - The service returns an unexpected HTTP error status
    - The connection fails or times out
    """

    def __init__(self, message: str, status_code: int | None = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class PermissionDeniedError(DataServiceError):
    """Raised when the data service refuses access (HTTP 403).

    Handlers re-raise it with a caller-actionable hint instead of the raw
    transport message.
    """

    def __init__(self, message: str = "Access denied", hint: str | None = None):
        super().__init__(message, status_code=403)
        if hint:
            self.details["hint"] = hint
        self.hint = hint
