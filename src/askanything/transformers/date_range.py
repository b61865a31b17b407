# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Date-range metadata reshaping.

Tells the agent which periods have data and how stale the newest data is.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ._utils import days_behind, freshness_label, round_half_up

logger = logging.getLogger(__name__)


def _date_part(value: Any) -> str:
    if not value or not isinstance(value, str):
        return "unknown"
    return value.split("T")[0]


def compact_recent_activity(daily_entries: list[dict[str, Any]] | None) -> dict[str, Any]:
    """Keep only days that have entries, plus totals."""
    if daily_entries is None:
        return {"period": "14 days", "summary": "No data available"}

    with_entries = [day for day in daily_entries if (day.get("journalEntryCount") or 0) > 0]
    return {
        "period": "last 14 days",
        "totalEntries": sum(day.get("journalEntryCount") or 0 for day in daily_entries),
        "daysWithEntries": len(with_entries),
        "datesWithEntries": with_entries,
    }


def transform_date_range_metadata(
    raw: dict[str, Any] | None,
    child_name: str | None,
    today: date | None = None,
) -> dict[str, Any]:
    if not raw:
        return {
            "childName": child_name,
            "hasData": False,
            "message": "No date range metadata available",
        }

    recent = raw.get("recentDailyActivity") or {}
    behind = days_behind(recent.get("endDate"), today)

    available_periods: dict[str, dict[str, Any]] = {}
    for period in (raw.get("dateRanges") or {}).values():
        if not (period.get("valid") and period.get("type")):
            continue
        quality = period.get("dataQuality") or {}
        available_periods[period["type"]] = {
            "journalEntryCount": quality.get("journalEntryCount") or 0,
            "daysWithEntries": quality.get("daysWithEntries") or 0,
            "coveragePercent": round_half_up(quality.get("coveragePercent") or 0),
        }

    daily_entries = recent.get("dailyEntries") if raw.get("recentDailyActivity") else None
    logger.debug(f"Date range metadata: {behind} days behind, {len(available_periods)} valid periods")

    return {
        "childName": child_name,
        "hasData": True,
        "allTimeDataCoverage": {
            "earliestEntry": _date_part(raw.get("earliestDataDate")),
            "latestEntry": _date_part(raw.get("latestDataDate")),
            "timeSpanDays": raw.get("dataSpanDays") or 0,
            "daysWithEntries": raw.get("totalUniqueDataDays") or 0,
        },
        "dataFreshness": freshness_label(behind),
        "availablePeriods": available_periods,
        "recentActivity": compact_recent_activity(daily_entries),
    }
