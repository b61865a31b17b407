# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Analysis tool handlers.

Analysis tools never raise on missing data or missing permission: the agent
gets a result with ``hasData: False`` or ``permissionError: True`` and a
message it can relay.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from askanything.core.exceptions import PermissionDeniedError
from askanything.core.sessions import Session
from askanything.transformers import (
    ANALYSIS_TIME_RANGES,
    HASHTAG_TYPES,
    transform_behavior_analysis,
    transform_hashtag_analysis,
    transform_journal_analysis,
    transform_medication_analysis,
    transform_medication_details,
    transform_overview_analysis,
)

from ._utils import PERMISSION_HINT, require_string, service_errors, validate_enum
from .context import ToolContext

logger = logging.getLogger(__name__)

DEFAULT_DETAIL_TIME_RANGE = "last_365_days"

JOURNAL_PERMISSION = "This requires journal viewing permissions. "


def _time_range(args: dict[str, Any]) -> str:
    time_range = require_string(args, "timeRange", "Time range is required")
    return validate_enum(time_range, ANALYSIS_TIME_RANGES, "timeRange", label="time range")


def _permission_denied(
    time_range: str | None, child_name: str | None, what: str, requirement: str = "", **extra: Any
) -> dict[str, Any]:
    return {
        "timeRange": time_range,
        **extra,
        "childName": child_name,
        "message": (
            f"Access denied: You don't have permission to view {what} for {child_name}. {requirement}{PERMISSION_HINT}"
        ),
        "hasData": False,
        "permissionError": True,
    }


def _no_data(time_range: str | None, child_name: str | None, message: str, **extra: Any) -> dict[str, Any]:
    return {"timeRange": time_range, **extra, "childName": child_name, "message": message, "hasData": False}


async def get_overview_analysis(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    time_range = _time_range(args)
    child = ctx.selected_child(session)

    try:
        with service_errors("get overview analysis"):
            raw = await ctx.client.get_analysis_data(child.child_id, time_range, "overview")
    except PermissionDeniedError:
        return _permission_denied(time_range, child.child_name, "behavior analysis data")

    if raw is None:
        return _no_data(
            time_range,
            child.child_name,
            f"No overview analysis data found for {child.child_name} in the {time_range} period. "
            "Analysis may not be available yet or there may be insufficient data.",
        )
    return transform_overview_analysis(raw, child.child_name, time_range)


async def get_behavior_analysis(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    time_range = _time_range(args)
    child = ctx.selected_child(session)

    try:
        with service_errors("get behavior analysis"):
            raw_analysis, raw_goals = await asyncio.gather(
                ctx.client.get_analysis_data(child.child_id, time_range, "behaviorGoals"),
                ctx.client.get_behavior_goals(child.child_id),
            )
    except PermissionDeniedError:
        return _permission_denied(time_range, child.child_name, "behavior data")

    if raw_analysis is None and raw_goals is None:
        return _no_data(
            time_range,
            child.child_name,
            f"No behavior goals or analysis data found for {child.child_name} in the {time_range} period. "
            "Behavior goals may not be configured yet or analysis may not be available.",
        )
    return transform_behavior_analysis(raw_analysis, raw_goals, child.child_name, time_range)


async def get_medication_analysis(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    time_range = _time_range(args)
    child = ctx.selected_child(session)

    try:
        with service_errors("get medication analysis"):
            raw_analysis, raw_medications = await asyncio.gather(
                ctx.client.get_analysis_data(child.child_id, time_range, "medication"),
                ctx.client.get_medications(child.child_id),
            )
    except PermissionDeniedError:
        return _permission_denied(
            time_range,
            child.child_name,
            "medication data",
            "This requires medical data viewing permissions. ",
        )

    # Missing analysis falls back to the plain medication list
    return transform_medication_analysis(raw_analysis, raw_medications, child.child_name, time_range)


async def get_medication_detailed_analysis(
    ctx: ToolContext, args: dict[str, Any], session: Session
) -> dict[str, Any]:
    cocktail_id = require_string(
        args,
        "cocktailId",
        "Cocktail ID is required - use get_medication_analysis first to find medication combination IDs",
    )
    time_range = args.get("timeRange")
    if time_range is not None:
        validate_enum(time_range, ANALYSIS_TIME_RANGES, "timeRange", label="time range")

    child = ctx.selected_child(session)
    try:
        with service_errors("get medication details"):
            raw_analysis, raw_medications = await asyncio.gather(
                ctx.client.get_analysis_data(child.child_id, time_range or DEFAULT_DETAIL_TIME_RANGE, "medication"),
                ctx.client.get_medications(child.child_id),
            )
    except PermissionDeniedError:
        return _permission_denied(time_range, child.child_name, "detailed medication analysis")

    if raw_analysis is None:
        return _no_data(
            time_range,
            child.child_name,
            f"No detailed medication data found for {child.child_name} in the "
            f"{time_range or DEFAULT_DETAIL_TIME_RANGE} period. "
            "Analysis may not be available yet or there may be insufficient data.",
        )
    return transform_medication_details(raw_analysis, raw_medications, child.child_name, cocktail_id)


async def _journal_analysis(
    ctx: ToolContext, session: Session, time_range: str, operation: str, not_found: str
) -> dict[str, Any]:
    child = ctx.selected_child(session)
    try:
        with service_errors(operation):
            raw = await ctx.client.get_analysis_data(child.child_id, time_range, "journal")
    except PermissionDeniedError:
        return _permission_denied(time_range, child.child_name, "journal entries", JOURNAL_PERMISSION)

    if raw is None:
        return _no_data(time_range, child.child_name, not_found.format(child=child.child_name, range=time_range))
    return transform_journal_analysis(raw, child.child_name, time_range)


async def get_journal_analysis(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    return await _journal_analysis(
        ctx,
        session,
        _time_range(args),
        "get journal analysis",
        "No journal analysis data found for {child} in the {range} period. "
        "Journal entries may not exist yet or analysis may not be available.",
    )


async def list_notable_journal_entries(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    return await _journal_analysis(
        ctx,
        session,
        _time_range(args),
        "find notable journal entries",
        "No notable journal entries found for {child} in the {range} period. "
        "Journal entries may not exist yet or none may have scored highly in special categories.",
    )


async def get_hashtag_analysis(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    hashtag_type = require_string(args, "hashtagType", "Hashtag type is required")
    time_range = _time_range(args)
    validate_enum(hashtag_type, HASHTAG_TYPES, "hashtagType", label="hashtag type")

    child = ctx.selected_child(session)
    try:
        with service_errors("get hashtag analysis"):
            raw = await ctx.client.get_analysis_data(child.child_id, time_range, "journal")
    except PermissionDeniedError:
        return _permission_denied(
            time_range, child.child_name, "journal entries", JOURNAL_PERMISSION, hashtagType=hashtag_type
        )

    if raw is None:
        return _no_data(
            time_range,
            child.child_name,
            f"No hashtag analysis data found for {child.child_name} in the {time_range} period. "
            "Journal entries with hashtags may not exist yet or analysis may not be available.",
            hashtagType=hashtag_type,
        )
    return transform_hashtag_analysis(raw, child.child_name, time_range, hashtag_type)
