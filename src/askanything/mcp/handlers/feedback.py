# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Product feedback tool handler."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from askanything.core.exceptions import DataServiceError, PermissionDeniedError, ValidationException
from askanything.core.sessions import Session

from ._utils import validate_enum
from .context import ToolContext

logger = logging.getLogger(__name__)

FEEDBACK_SOURCES = ["ask-anything", "journal-entry", "general"]
DEFAULT_FEEDBACK_SOURCE = "ask-anything"
MAX_FEEDBACK_LENGTH = 10_000

THANK_YOU_MESSAGE = (
    "Thank you for your feedback! Your input has been submitted to the Village Metrics team "
    "and will help us improve the application."
)

_STATUS_MESSAGES = {
    400: "Invalid feedback submission. Please check your feedback text and try again.",
    401: "Authentication failed. Please make sure you are logged in.",
    500: "The feedback service is temporarily unavailable. Please try again later.",
}


async def submit_product_feedback(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """Send product feedback to the Village Metrics team.

    Not child-scoped: works with or without a selected child.
    """
    text = args.get("feedbackText")
    if not isinstance(text, str) or not text.strip():
        raise ValidationException("Feedback text is required and cannot be empty", field="feedbackText")
    text = text.strip()
    if len(text) > MAX_FEEDBACK_LENGTH:
        raise ValidationException(
            "Feedback text must be less than 10,000 characters", field="feedbackText", value=len(text)
        )

    source = args.get("source") or DEFAULT_FEEDBACK_SOURCE
    validate_enum(source, FEEDBACK_SOURCES, "source")

    try:
        await ctx.client.submit_product_feedback(text, source)
    except PermissionDeniedError as e:
        raise DataServiceError("Failed to submit feedback: access denied", status_code=403) from e
    except DataServiceError as e:
        message = _STATUS_MESSAGES.get(e.status_code) if e.status_code is not None else None
        logger.error(f"Feedback submission failed: {e.message}")
        raise DataServiceError(
            message or f"Failed to submit feedback: {e.message}", status_code=e.status_code
        ) from e

    logger.info(f"Product feedback submitted: source={source}, length={len(text)}")
    return {
        "success": True,
        "message": THANK_YOU_MESSAGE,
        "submissionDetails": {
            "source": source,
            "feedbackLength": len(text),
            "submittedAt": datetime.now(UTC).isoformat(),
        },
    }
