# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Shared helpers for MCP tool handlers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from askanything.core.exceptions import DataServiceError, PermissionDeniedError, ValidationException

logger = logging.getLogger(__name__)

PERMISSION_HINT = "Contact a parent or guardian to request access."


def require_string(args: dict[str, Any], name: str, message: str) -> str:
    """Return a non-blank string argument or raise ValidationException."""
    value = args.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(message, field=name, value=value)
    return value


def validate_enum(value: Any, valid_values: list[str], param_name: str, label: str | None = None) -> str:
    """Return ``value`` if it is one of ``valid_values``, else raise ValidationException."""
    if value not in valid_values:
        raise ValidationException(
            f"Invalid {label or param_name}. Must be one of: {', '.join(valid_values)}",
            field=param_name,
            value=value,
        )
    return value


def validate_int(args: dict[str, Any], name: str, default: int, minimum: int, maximum: int | None = None) -> int:
    value = args.get(name, default)
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationException(f"{name} must be an integer", field=name, value=value)
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"between {minimum} and {maximum}" if maximum is not None else f"at least {minimum}"
        raise ValidationException(f"{name} must be {bounds}", field=name, value=value)
    return value


@contextmanager
def service_errors(operation: str) -> Iterator[None]:
    """Re-raise data-service failures as ``Failed to <operation>: <detail>``.

    Permission failures become a PermissionDeniedError with a remediation hint.
    """
    try:
        yield
    except PermissionDeniedError as e:
        logger.warning(f"Permission denied: {operation}")
        raise PermissionDeniedError(
            f"Access denied: you don't have permission to {operation}. {PERMISSION_HINT}",
            hint=PERMISSION_HINT,
        ) from e
    except DataServiceError as e:
        logger.error(f"Failed to {operation}: {e.message}")
        raise DataServiceError(f"Failed to {operation}: {e.message}", status_code=e.status_code) from e
