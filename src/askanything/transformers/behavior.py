# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Daily behavior score reshaping."""

from __future__ import annotations

import json
import logging
from typing import Any

from ._utils import average_score

logger = logging.getLogger(__name__)

SCORING_GUIDE = {
    "1": "Not at all",
    "2": "A little",
    "3": "Mostly",
    "4": "Completely",
}


def transform_behavior_data(raw: dict[str, Any] | None, child_name: str | None) -> dict[str, Any]:
    """Reduce one day of tracking data to per-goal scores and their average.

    Goal values are kept exactly as reported (1.0 - 4.0); each goal means
    something different, so no overall interpretation is added.
    """
    if not raw:
        return {
            "date": None,
            "childName": child_name,
            "hasData": False,
            "message": "No behavior data available",
        }

    scores: dict[str, float] = {}
    for goal in raw.get("goals") or []:
        if goal.get("name") and goal.get("value") is not None:
            scores[goal["name"]] = goal["value"]

    transformed = {
        "date": raw.get("date"),
        "childName": child_name,
        "journalEntriesThisDate": len(raw.get("journalEntries") or []),
        "individualBehaviorGoalScores": scores,
        "averageBehaviorScoreAcrossAllGoals": average_score(scores.values()),
        "behaviorGoalScoringGuide": SCORING_GUIDE,
        "note": "Scores represent daily averages across all caregivers for each behavior goal",
    }

    logger.debug(
        f"Behavior data transformed: {raw.get('date')} "
        f"({len(json.dumps(raw, default=str))} -> {len(json.dumps(transformed, default=str))} chars)"
    )
    return transformed
