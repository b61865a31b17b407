# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Derived computations shared by the reshapers.

Everything here is pure: no I/O, no clock reads unless ``today`` is omitted.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGE_CAP = 100

# Label publish threshold for moment / crisis / strategy scores
PUBLISH_THRESHOLD = 0.55

BEHAVIOR_SCORE_RANGE = (
    "Behavior scores range from 1 (very challenging day) to 4 (excellent day). Higher scores indicate better behavior."
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def _two_places(value: float) -> Decimal:
    # Exact binary value, so 2.125 rounds up and 1.005 (really 1.00499...) down
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def round_2dp(value: float) -> float:
    """Round to two decimals, ties away from zero."""
    return float(_two_places(value))


def format_number(value: Any) -> str:
    """Render a number without a trailing ``.0`` for whole floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def average_score(values: Iterable[float]) -> float | None:
    """Mean rounded to two decimals; ``None`` for an empty input."""
    items = list(values)
    if not items:
        return None
    return round_2dp(sum(items) / len(items))


def today_utc() -> date:
    return datetime.now(UTC).date()


def parse_date(value: Any) -> date | None:
    """Parse the date part of ``YYYY-MM-DD`` or an ISO timestamp."""
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.split("T")[0].strip())
    except ValueError:
        return None


def days_ago(date_str: Any, today: date | None = None) -> int | None:
    """Whole days between ``date_str`` and today, both at midnight UTC.

    Future dates clamp to 0. Missing or unparseable input yields ``None``.
    """
    entry_date = parse_date(date_str)
    if entry_date is None:
        if date_str:
            logger.debug(f"Unparseable date: {date_str!r}")
        return None
    today = today or today_utc()
    return max(0, (today - entry_date).days)


def days_behind(end_date: Any, today: date | None = None) -> int:
    """Like :func:`days_ago` but 0 when there is no end date."""
    offset = days_ago(end_date, today)
    return 0 if offset is None else offset


def freshness_label(days: int) -> str:
    if days <= 0:
        return "current"
    return f"{days} day{'' if days == 1 else 's'} behind"


def format_display_date(value: Any) -> str | None:
    """Render a date or timestamp as ``M/D/YYYY``.

    Unparseable input is returned unchanged.
    """
    if not value:
        return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return value
    else:
        parsed = value
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def display_date_range(raw: Any) -> dict[str, Any] | None:
    """``analysisMeta.dateRange`` as display dates, or None when absent."""
    date_range = ((raw or {}).get("analysisMeta") or {}).get("dateRange")
    if not date_range:
        return None
    return {
        "startDate": format_display_date(date_range.get("startDate")),
        "endDate": format_display_date(date_range.get("endDate")),
    }


def signed_percent(value: float | None, scale: bool = False) -> str | None:
    """Impact string such as ``+12%`` or ``-5%``.

    With ``scale`` the value is a fraction and is multiplied by 100 and
    rounded; otherwise it is already a percentage and rendered as-is.
    """
    if value is None:
        return None
    if scale:
        value = round_half_up(value * 100)
    sign = "+" if value >= 0 else ""
    return f"{sign}{format_number(value)}%"


# ==========================================================================
# Score labels
# ==========================================================================


def format_score_label(label: str, score: float) -> str:
    return f"{label} ({_two_places(score)}/1.0)"


def _is_score(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _tiered_label(score: Any, tiers: tuple[str, str, str]) -> str | None:
    if not _is_score(score) or score < PUBLISH_THRESHOLD:
        return None
    if score >= 0.75:
        label = tiers[0]
    elif score >= 0.65:
        label = tiers[1]
    else:
        label = tiers[2]
    return format_score_label(label, score)


def detail_level(score: Any) -> str | None:
    """Always published for a score in [0, 1]."""
    if not _is_score(score) or score < 0 or score > 1:
        return None
    if score >= 0.75:
        label = "High detail"
    elif score >= 0.45:
        label = "Moderate detail"
    else:
        label = "Brief detail"
    return format_score_label(label, score)


def moment_significance(score: Any) -> str | None:
    return _tiered_label(score, ("Major key moment", "Notable key moment", "Minor key moment"))


def crisis_level(score: Any) -> str | None:
    return _tiered_label(score, ("Crisis situation", "High intensity", "Elevated situation"))


def effective_strategies(score: Any) -> str | None:
    return _tiered_label(score, ("Highly effective strategies", "Good strategies", "Helpful strategies"))


# ==========================================================================
# Page cap
# ==========================================================================


def cap_results(items: Sequence[T] | None, cap: int = PAGE_CAP) -> tuple[list[T], bool, int]:
    """Return ``(first cap items, truncated, total found)``."""
    items = list(items or [])
    total = len(items)
    if total > cap:
        return items[:cap], True, total
    return items, False, total
