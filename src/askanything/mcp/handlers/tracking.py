# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Behavior tracking tool handlers."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from askanything.core.exceptions import ValidationException
from askanything.core.sessions import Session
from askanything.transformers import transform_behavior_data, transform_date_range_metadata

from ._utils import require_string, service_errors
from .context import ToolContext

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def _is_calendar_date(value: str) -> bool:
    if not DATE_PATTERN.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


async def get_behavior_scores(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """Per-goal behavior scores for one date."""
    day = require_string(args, "date", "Date is required (format: YYYY-MM-DD)")
    if not _is_calendar_date(day):
        raise ValidationException(f"Invalid date '{day}'. Expected format: YYYY-MM-DD", field="date", value=day)

    child = ctx.selected_child(session)
    with service_errors("get behavior data"):
        raw = await ctx.client.get_behavior_data(child.child_id, day)

    if raw is None:
        return {
            "date": day,
            "childName": child.child_name,
            "message": (
                f"No behavior data found for {child.child_name} on {day}. "
                "This could mean no data was tracked that day."
            ),
            "scores": {},
            "hasData": False,
        }

    transformed = transform_behavior_data(raw, child.child_name)
    logger.debug(f"Behavior data retrieved: {day}, {len(transformed.get('individualBehaviorGoalScores') or {})} goals")
    return transformed


async def get_date_range_metadata(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """Data coverage and freshness for the selected child."""
    child = ctx.selected_child(session)
    with service_errors("get date range metadata"):
        raw = await ctx.client.get_date_range_metadata(child.child_id)
    return transform_date_range_metadata(raw, child.child_name)
