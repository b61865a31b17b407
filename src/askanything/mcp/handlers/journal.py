# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Journal tool handlers: search, chronological listing, single entries."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from askanything.core.sessions import Session
from askanything.transformers import (
    transform_journal_details,
    transform_journal_entry,
    transform_journal_list,
    transform_journal_search_results,
)
from askanything.transformers._utils import today_utc

from ._utils import require_string, service_errors, validate_enum, validate_int
from .context import ToolContext

logger = logging.getLogger(__name__)

LIST_TIME_RANGES = {
    "last_7_days": 7,
    "last_14_days": 14,
    "last_30_days": 30,
    "last_60_days": 60,
}
DEFAULT_LIST_TIME_RANGE = "last_30_days"


def list_date_range(time_range: str) -> tuple[str, str]:
    """``(start, end)`` as YYYY-MM-DD, ending today (UTC)."""
    end = today_utc()
    start = end - timedelta(days=LIST_TIME_RANGES[time_range])
    return start.isoformat(), end.isoformat()


async def search_journal_entries(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """Semantic search over the selected child's journal."""
    query = require_string(args, "query", "Search query is required")
    limit = validate_int(args, "limit", default=10, minimum=1, maximum=50)
    offset = validate_int(args, "offset", default=0, minimum=0)

    child = ctx.selected_child(session)
    with service_errors("search journals"):
        raw = await ctx.client.search_journals(child.child_id, query, limit=limit, offset=offset)

    logger.debug(f"Journal search: {len((raw or {}).get('results') or [])} hits for query of {len(query)} chars")
    return transform_journal_search_results(raw, child.child_name)


async def list_journal_entries(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """Journal entries for a recent window, newest first."""
    time_range = args.get("timeRange") or DEFAULT_LIST_TIME_RANGE
    validate_enum(time_range, list(LIST_TIME_RANGES), "timeRange", label="time range")

    child = ctx.selected_child(session)
    start_date, end_date = list_date_range(time_range)
    with service_errors("list journal entries"):
        raw = await ctx.client.list_journal_entries(child.child_id, start_date, end_date)

    return transform_journal_list(raw, child.child_name, time_range, start_date, end_date)


def _entry_not_found(child_name: str | None, entry_id: str) -> dict[str, Any]:
    return {
        "childName": child_name,
        "journalEntryId": entry_id,
        "hasData": False,
        "message": "Journal entry not found",
    }


async def get_journal_entry(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    entry_id = require_string(args, "journalEntryId", "Journal entry ID is required")

    child = ctx.selected_child(session)
    with service_errors("get journal entry"):
        entry = await ctx.client.get_journal_entry(child.child_id, entry_id)

    if not entry:
        return _entry_not_found(child.child_name, entry_id)
    return transform_journal_entry(entry, child.child_name)


async def get_journal_entry_analysis(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    entry_id = require_string(args, "journalEntryId", "Journal entry ID is required")

    child = ctx.selected_child(session)
    with service_errors("get journal details"):
        entry = await ctx.client.get_journal_entry(child.child_id, entry_id)

    if not entry:
        return _entry_not_found(child.child_name, entry_id)
    return transform_journal_details(entry, child.child_name)
