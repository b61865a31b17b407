# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Generic recursive truncation of nested payloads.

Arrays longer than their limit keep their first ``limit`` items and gain one
marker element describing what was dropped. Arrays shorter than the floor are
never truncated. Dict keys give the key context for the arrays beneath them.

Usage:
    condense({"hashtags": list(range(5))})
    # {"hashtags": [0, 1, 2, {"_truncated": "2 more items (5 total)", ...}]}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

DEFAULT_LIMITS: Mapping[str, int] = MappingProxyType(
    {
        "dailyBehaviorScores": 3,
        "contributingUsers": 2,
        "village": 2,
        "topCaregivers": 2,
        "bottomCaregivers": 2,
        "enhancers": 2,
        "triggers": 2,
        "medicationChanges": 2,
        "journalEntries": 3,
        "hashtags": 3,
        "keyMoments": 2,
        "hashtagsByType": 3,
        "behaviorGoals": 3,
        "medications": 3,
        "exampleJournalEntries": 3,
    }
)


@dataclass(frozen=True)
class CondenseRules:
    """Per-field array limits.

    Attributes:
        limits: Field name -> max items kept.
        default_limit: Limit for arrays under a field not in ``limits``.
        min_size: Arrays shorter than this are never truncated.
    """

    limits: Mapping[str, int] = field(default_factory=lambda: DEFAULT_LIMITS)
    default_limit: int = 3
    min_size: int = 4

    def limit_for(self, key: str) -> int:
        return self.limits.get(key, self.default_limit)


DEFAULT_RULES = CondenseRules()


def truncation_marker(total: int, limit: int) -> dict[str, Any]:
    omitted = total - limit
    return {
        "_truncated": f"{omitted} more items ({total} total)",
        "_omitted": omitted,
        "_total": total,
        "_note": f"Original array had {total} items, showing first {limit}",
    }


def condense(value: Any, rules: CondenseRules = DEFAULT_RULES, key: str = "") -> Any:
    """Return a condensed copy of ``value``; the input is not modified."""
    if isinstance(value, list):
        return _condense_list(value, rules, key)
    if isinstance(value, dict):
        return {k: condense(v, rules, k) for k, v in value.items()}
    return value


def _condense_list(items: list[Any], rules: CondenseRules, key: str) -> list[Any]:
    limit = rules.limit_for(key)
    if len(items) < rules.min_size or len(items) <= limit:
        # Elements inherit the array's key context
        return [condense(item, rules, key) for item in items]

    kept = [condense(item, rules, key) for item in items[:limit]]
    kept.append(truncation_marker(len(items), limit))
    return kept
