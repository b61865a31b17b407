# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Reshapers for precomputed analyses.

The analysis service returns large nested payloads (daily score series,
per-caregiver breakdowns, asset links). Each function here keeps only what
an agent needs to answer questions about one analysis category.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date
from typing import Any

from ._utils import (
    BEHAVIOR_SCORE_RANGE,
    display_date_range,
    format_display_date,
    format_number,
    parse_date,
    round_half_up,
    signed_percent,
    today_utc,
)
from .condense import condense

logger = logging.getLogger(__name__)

ANALYSIS_TIME_RANGES = ["last_7_days", "last_30_days", "last_90_days", "last_180_days", "last_365_days"]

HASHTAG_TYPES = [
    "BehaviorConcept",
    "Incident",
    "Activity",
    "Emotion",
    "Person",
    "Place",
    "RootCause",
    "Outcome",
    "BehaviorMethod",
    "Food",
    "Time",
    "Object",
    "Event",
    "Action",
    "HealthSymptom",
    "EnvironmentalFactor",
    "CommunicationMode",
]

# Badge name -> score field; an entry earns a badge above BADGE_THRESHOLD
BADGE_FIELDS = {
    "keyMoment": "keyMomentScore",
    "heartfelt": "heartfeltScore",
    "funny": "funnyStoryScore",
    "cute": "cutenessScore",
    "turnaround": "turnaroundScore",
    "effectiveStrategies": "effectiveStrategiesScore",
    "crazy": "crazyStoryScore",
}
BADGE_THRESHOLD = 0.7
MAX_NOTABLE_ENTRIES = 20

BADGE_SCORE_RANGE = (
    "Badge scores range from 0 to 1, with 0.7+ required to earn a badge. "
    "Higher scores indicate stronger confidence in that category."
)

CURRENTLY_TAKING = "Currently taking"


def _log_compression(name: str, raw: Any, result: dict[str, Any]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    original = len(json.dumps(raw, default=str))
    condensed = len(json.dumps(result, default=str))
    ratio = (original - condensed) / original * 100 if original else 0.0
    logger.debug(f"{name} transformed: {original} -> {condensed} chars ({ratio:.1f}% smaller)")


def _header(time_range: str | None, child_name: str | None, raw: Any) -> dict[str, Any]:
    result: dict[str, Any] = {"timeRange": time_range, "childName": child_name}
    date_range = display_date_range(raw)
    if date_range:
        result["dateRange"] = date_range
    return result


def _overall_behavior(behavior: dict[str, Any]) -> dict[str, Any]:
    return {
        "averageScore": behavior.get("averageScore"),
        "previousScore": behavior.get("previousPeriodScore"),
        "scoreChange": behavior.get("scoreChange"),
        "daysWithData": behavior.get("daysWithData"),
        "_scoreRange": BEHAVIOR_SCORE_RANGE,
    }


def _hashtag_impact(item: dict[str, Any]) -> dict[str, Any]:
    return {
        "hashtag": item.get("hashtag"),
        "averageScore": item.get("averageScore"),
        "occurrences": item.get("occurrences"),
        "impactVsAverage": signed_percent(item.get("percentageImpact")),
    }


def _sort_key_date(value: Any) -> date:
    return parse_date(value) or date.min


# ==========================================================================
# Overview
# ==========================================================================


def transform_overview_analysis(raw: dict[str, Any] | None, child_name: str | None, time_range: str) -> dict[str, Any]:
    """Overall trend, weekday pattern, caregivers, enhancers and triggers.

    Top and bottom caregiver lists are merged into one list ranked by
    behaviorScore, highest first.
    """
    if not raw:
        return {
            "timeRange": time_range,
            "childName": child_name,
            "message": f"No overview analysis data available for {child_name} in the {time_range} period.",
        }

    result = _header(time_range, child_name, raw)
    data = raw.get("analysisData") or {}

    if data.get("overallBehavior"):
        result["overallBehavior"] = _overall_behavior(data["overallBehavior"])

    if data.get("behaviorByDayOfWeek"):
        result["behaviorByDayOfWeek"] = [
            {"day": day.get("day"), "score": day.get("score")} for day in data["behaviorByDayOfWeek"]
        ]

    effectiveness = data.get("caregiverEffectiveness")
    if effectiveness:
        caregivers = [*(effectiveness.get("topCaregivers") or []), *(effectiveness.get("bottomCaregivers") or [])]
        if caregivers:
            result["caregiverEffectiveness"] = sorted(
                (
                    {
                        "name": c.get("name"),
                        "role": c.get("role"),
                        "daysPresent": c.get("daysPresent"),
                        "behaviorScore": c.get("behaviorScore"),
                    }
                    for c in caregivers
                ),
                key=lambda c: c["behaviorScore"] if c["behaviorScore"] is not None else -math.inf,
                reverse=True,
            )

    if data.get("behaviorEnhancers") is not None:
        result["behaviorEnhancers"] = [_hashtag_impact(e) for e in data["behaviorEnhancers"]]
    if data.get("behaviorTriggers") is not None:
        result["behaviorTriggers"] = [_hashtag_impact(t) for t in data["behaviorTriggers"]]

    _log_compression("Overview analysis", raw, result)
    return result


# ==========================================================================
# Behavior goals
# ==========================================================================


def transform_behavior_analysis(
    raw_analysis: dict[str, Any] | None,
    raw_goals: Any,
    child_name: str | None,
    time_range: str,
) -> dict[str, Any]:
    """Per-goal progress with what works and what does not.

    Configured goals are not repeated separately; they appear inside
    ``behaviorGoalAnalysis``.
    """
    if not raw_analysis and not raw_goals:
        return {
            "timeRange": time_range,
            "childName": child_name,
            "message": f"No behavior goals or analysis data available for {child_name} in the {time_range} period.",
        }

    result = _header(time_range, child_name, raw_analysis)
    data = (raw_analysis or {}).get("analysisData") or {}

    if data.get("overallBehavior"):
        result["overallBehavior"] = _overall_behavior(data["overallBehavior"])

    if data.get("behaviorGoals") is not None:
        result["behaviorGoalAnalysis"] = [
            {
                "goalName": goal.get("name"),
                "averageScore": goal.get("averageScore"),
                "previousScore": goal.get("previousPeriodScore"),
                "scoreChange": goal.get("scoreChange"),
                "whatWorks": [_hashtag_impact(i) for i in goal.get("whatWorks") or []],
                "whatNotWorks": [_hashtag_impact(i) for i in goal.get("whatNotWorks") or []],
            }
            for goal in data["behaviorGoals"]
        ]

    _log_compression("Behavior analysis", {"analysis": raw_analysis, "goals": raw_goals}, result)
    return result


# ==========================================================================
# Medication
# ==========================================================================


def medications_list(raw_medications: Any) -> list[dict[str, Any]]:
    """Accept either a bare list or ``{"medications": [...]}``."""
    if isinstance(raw_medications, list):
        return raw_medications
    if isinstance(raw_medications, dict) and isinstance(raw_medications.get("medications"), list):
        return raw_medications["medications"]
    return []


def _is_current(med: dict[str, Any]) -> bool:
    return not med.get("archived") and not med.get("endDate")


def _duration_days(start: Any, end: Any, today: date) -> int | None:
    start_date = parse_date(start)
    if start_date is None:
        return None
    end_date = parse_date(end) or today
    return (end_date - start_date).days


def _medication_only_history(medications: list[dict[str, Any]], today: date) -> list[dict[str, Any]]:
    history = []
    for med in medications:
        dosages = med.get("dosages") or {}
        amounts = [(dosages.get(slot) or {}).get("amount") for slot in ("am", "midday", "pm")]
        amounts = [a for a in amounts if a is not None]
        history.append(
            {
                "name": med.get("name"),
                "totalDosage": sum(amounts) if amounts else None,
                "unit": (dosages.get("am") or {}).get("unit") or (dosages.get("pm") or {}).get("unit"),
                "startDate": med.get("startDate"),
                "endDate": med.get("endDate") or CURRENTLY_TAKING,
                "durationDays": _duration_days(med.get("startDate"), med.get("endDate"), today),
            }
        )
    history.sort(key=lambda m: _sort_key_date(m["startDate"]), reverse=True)
    return history


def _cocktail_summary(combo: dict[str, Any]) -> dict[str, Any]:
    return {
        "cocktailId": combo.get("cocktailId"),
        "durationDays": combo.get("durationDays"),
        "startDate": format_display_date(combo.get("startDate")),
        "endDate": format_display_date(combo.get("endDate")) if combo.get("endDate") else CURRENTLY_TAKING,
        "averageBehaviorScore": combo.get("averageScore"),
        "comparedToPrevious": signed_percent(combo.get("scoreChangePercentage") or 0, scale=True),
        "comparedToAll": signed_percent(combo.get("comparedToAveragePercentage") or 0, scale=True),
        "medications": [
            {"name": m.get("name"), "totalDosage": m.get("totalDosage"), "unit": m.get("unit")}
            for m in combo.get("medications") or []
        ],
        "daysWithObservations": combo.get("daysWithObservations"),
        "dataCoveragePercentage": f"{round_half_up((combo.get('dataCoveragePercentage') or 0) * 100)}%",
    }


def transform_medication_analysis(
    raw_analysis: dict[str, Any] | None,
    raw_medications: Any,
    child_name: str | None,
    time_range: str,
    today: date | None = None,
) -> dict[str, Any]:
    """Medication combination history, newest first.

    Without analysis data, falls back to the plain medication list. The
    newest combination is reported as currently taken when any of its
    medications is still active.
    """
    medications = medications_list(raw_medications)
    today = today or today_utc()

    if not raw_analysis:
        if not medications:
            return {
                "timeRange": time_range,
                "childName": child_name,
                "message": f"No medication data or analysis available for {child_name} in the {time_range} period.",
            }
        current_count = sum(1 for med in medications if _is_current(med))
        return {
            "timeRange": time_range,
            "childName": child_name,
            "medicationHistory": _medication_only_history(medications, today),
            "message": (
                f"Found {current_count} current medications but no analysis data available "
                f"for {child_name} in the {time_range} period."
            ),
        }

    if not raw_analysis.get("analysisData"):
        return {
            "timeRange": time_range,
            "childName": child_name,
            "message": f"Unable to process medication data for {child_name} in the {time_range} period.",
        }

    result = _header(time_range, child_name, raw_analysis)
    result["_scoreRange"] = BEHAVIOR_SCORE_RANGE

    cocktails = (raw_analysis["analysisData"].get("medicationEffectiveness") or {}).get("cocktails")
    if isinstance(cocktails, list):
        ordered = sorted(cocktails, key=lambda c: _sort_key_date(c.get("startDate")), reverse=True)
        history = [_cocktail_summary(combo) for combo in ordered]

        if history and medications:
            current_names = {med.get("name") for med in medications if _is_current(med)}
            newest_names = {m.get("name") for m in ordered[0].get("medications") or []}
            if current_names & newest_names:
                history[0]["endDate"] = CURRENTLY_TAKING

        result["medicationHistory"] = history

    logger.debug(
        f"Medication analysis transformed: {len(result.get('medicationHistory') or [])} combinations, "
        f"{len(medications)} medications"
    )
    return result


def _find_cocktail(raw_analysis: dict[str, Any], cocktail_id: str) -> dict[str, Any] | None:
    effectiveness = (raw_analysis.get("analysisData") or {}).get("medicationEffectiveness") or {}
    candidates = [
        effectiveness.get("currentCocktail"),
        effectiveness.get("previousCocktail"),
        *(effectiveness.get("cocktails") if isinstance(effectiveness.get("cocktails"), list) else []),
    ]
    for combo in candidates:
        if combo and combo.get("cocktailId") == cocktail_id:
            return combo
    return None


def _overlaps(med: dict[str, Any], combo: dict[str, Any]) -> bool:
    start, end = parse_date(med.get("startDate")), parse_date(med.get("endDate"))
    combo_start, combo_end = parse_date(combo.get("startDate")), parse_date(combo.get("endDate"))
    if start and combo_end and start > combo_end:
        return False
    if end and combo_start and end < combo_start:
        return False
    return True


def _dosage_detail(med: dict[str, Any], combo: dict[str, Any], medications: list[dict[str, Any]]) -> dict[str, Any]:
    detailed = next(
        (raw for raw in medications if raw.get("name") == med.get("name") and _overlaps(raw, combo)),
        None,
    )
    change = med.get("change")
    total = med.get("totalDosage") or 0

    if detailed is not None:
        dosages = detailed.get("dosages") or {}
        breakdown: dict[str, Any] = {
            "morning": dosages.get("am") or None,
            "midday": dosages.get("midday") or None,
            "evening": dosages.get("pm") or None,
            "totalDailyDosage": total,
        }
    else:
        breakdown = {
            "totalDailyDosage": total,
            "note": "Detailed AM/midday/PM breakdown not available - showing total only",
        }

    return {
        "name": med.get("name"),
        "totalDosage": med.get("totalDosage"),
        "unit": med.get("unit"),
        "medicationPhase": med.get("medicationPhase") or "Unknown",
        "dosageChange": f"{'+' if change >= 0 else ''}{format_number(change)} {med.get('unit')}" if change else None,
        "dosageBreakdown": breakdown,
    }


def _hashtag_trends(trends: dict[str, Any] | None) -> list[dict[str, Any]]:
    def change(value: Any) -> str:
        return signed_percent(value, scale=True) if value else "N/A"

    return [
        {
            "hashtag": hashtag,
            "occurrenceCount": data.get("occurrenceCount"),
            "ratePerJournalEntry": round_half_up((data.get("ratePerJournalEntry") or 0) * 100),
            "changeFromPrior": change(data.get("changePercentFromPriorCocktail")),
            "changeFromAll": change(data.get("changePercentFromAllCocktails")),
        }
        for hashtag, data in (trends or {}).items()
    ]


def transform_medication_details(
    raw_analysis: dict[str, Any] | None,
    raw_medications: Any,
    child_name: str | None,
    cocktail_id: str,
) -> dict[str, Any]:
    """Everything known about one medication combination."""
    if not raw_analysis:
        return {
            "cocktailId": cocktail_id,
            "childName": child_name,
            "message": f"No medication analysis data available for {child_name} to find cocktail {cocktail_id}.",
        }

    combo = _find_cocktail(raw_analysis, cocktail_id)
    if combo is None:
        return {
            "cocktailId": cocktail_id,
            "childName": child_name,
            "message": (
                f"Medication combination with ID {cocktail_id} not found. "
                "Use get_medication_analysis first to see available medication combinations."
            ),
        }

    medications = medications_list(raw_medications)
    trends = combo.get("hashtagTrends") or {}

    return {
        "cocktailId": cocktail_id,
        "childName": child_name,
        "startDate": format_display_date(combo.get("startDate")),
        "endDate": format_display_date(combo.get("endDate")) if combo.get("endDate") else CURRENTLY_TAKING,
        "durationDays": combo.get("durationDays"),
        "averageBehaviorScore": combo.get("averageScore"),
        "comparedToPrevious": signed_percent(combo.get("scoreChangePercentage") or 0, scale=True),
        "comparedToAll": signed_percent(combo.get("comparedToAveragePercentage") or 0, scale=True),
        "_scoreRange": BEHAVIOR_SCORE_RANGE,
        "medications": [_dosage_detail(med, combo, medications) for med in combo.get("medications") or []],
        "daysWithObservations": combo.get("daysWithObservations"),
        "dataCoveragePercentage": f"{round_half_up((combo.get('dataCoveragePercentage') or 0) * 100)}%",
        "totalBehaviorScores": combo.get("totalBehaviorScoresAllCaregivers") or 0,
        "behaviorConcepts": _hashtag_trends(trends.get("behaviorConcepts")),
        "incidents": _hashtag_trends(trends.get("incidents")),
    }


# ==========================================================================
# Journal analysis / notable entries
# ==========================================================================


def _badges(scores: dict[str, Any]) -> dict[str, float]:
    badges = {}
    for badge, score_field in BADGE_FIELDS.items():
        score = scores.get(score_field)
        if isinstance(score, int | float) and score > BADGE_THRESHOLD:
            badges[badge] = score
    return badges


def collect_notable_entries(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Key moments plus any entry with a badge score above 0.7.

    One record per journal entry id, newest first, at most 20.
    """
    notable: dict[str, dict[str, Any]] = {}

    for moment in data.get("keyMoments") or []:
        entry_id = moment.get("journalEntryId") or f"journal_entry_{moment.get('date')}"
        record = notable.setdefault(
            entry_id,
            {
                "journalEntryId": entry_id,
                "date": moment.get("date"),
                "title": moment.get("title"),
                "summary": moment.get("summary"),
                "behaviorScore": moment.get("behaviorScore"),
                "authorName": moment.get("fullName") or moment.get("preferredName"),
                "badges": {},
            },
        )
        record["badges"]["keyMoment"] = moment.get("keyMomentScore")

    for entry in data.get("journalEntries") or []:
        scores = entry.get("results") or {}
        badges = _badges(scores)
        if not badges:
            continue
        entry_id = entry.get("journalEntryId")
        record = notable.setdefault(
            entry_id,
            {
                "journalEntryId": entry_id,
                "date": entry.get("date"),
                "title": scores.get("shortTitle") or "No title",
                "summary": scores.get("summary") or scores.get("longSummary") or "No summary",
                "behaviorScore": (scores.get("inferredBehaviorScores") or {}).get("overall"),
                "authorName": entry.get("fullName") or entry.get("preferredName"),
                "badges": {},
            },
        )
        record["badges"].update(badges)

    ordered = sorted(notable.values(), key=lambda r: _sort_key_date(r["date"]), reverse=True)
    return ordered[:MAX_NOTABLE_ENTRIES]


def transform_journal_analysis(raw: dict[str, Any] | None, child_name: str | None, time_range: str) -> dict[str, Any]:
    """Journal statistics plus notable entries with their badges."""
    if not raw:
        return {
            "timeRange": time_range,
            "childName": child_name,
            "message": f"No journal analysis data available for {child_name} in the {time_range} period.",
        }

    result = _header(time_range, child_name, raw)
    result["_badgeScoreRange"] = BADGE_SCORE_RANGE
    result["_behaviorScoreRange"] = BEHAVIOR_SCORE_RANGE

    data = raw.get("analysisData") or {}
    if data.get("journalStats"):
        result["journalStats"] = data["journalStats"]

    notable = collect_notable_entries(data)
    if notable:
        result["notableEntries"] = notable

    _log_compression("Journal analysis", raw, result)
    return result


# ==========================================================================
# Hashtags
# ==========================================================================


def _example_entry(entry: dict[str, Any]) -> dict[str, Any]:
    return {
        "journalEntryId": entry.get("id"),
        "date": entry.get("date"),
        "title": entry.get("title"),
        "summary": entry.get("summary"),
        "behaviorScore": entry.get("behaviorScore"),
        "authorName": entry.get("fullName"),
    }


def transform_hashtag_analysis(
    raw: dict[str, Any] | None,
    child_name: str | None,
    time_range: str,
    hashtag_type: str | None,
) -> dict[str, Any]:
    """Hashtags of one type with their behavior impact and example entries."""
    if not raw:
        return {
            "timeRange": time_range,
            "childName": child_name,
            "hashtagType": hashtag_type,
            "message": f"No hashtag analysis data available for {child_name} in the {time_range} period.",
        }

    if not hashtag_type:
        return {
            "timeRange": time_range,
            "childName": child_name,
            "message": f"Hashtag type is required. Please specify one of: {', '.join(HASHTAG_TYPES)}",
        }

    result = _header(time_range, child_name, raw)
    result["hashtagType"] = hashtag_type
    data = raw.get("analysisData") or {}

    if data.get("hashtagsByType") is not None:
        group = next((g for g in data["hashtagsByType"] if g.get("type") == hashtag_type), None)
        if group is None:
            return {
                "timeRange": time_range,
                "childName": child_name,
                "hashtagType": hashtag_type,
                "message": f'No hashtags of type "{hashtag_type}" found for {child_name} in the {time_range} period.',
            }

        full_by_tag = {h.get("tag"): h for h in data.get("hashtags") or []}
        hashtags = []
        for hashtag in group.get("hashtags") or []:
            full = full_by_tag.get(hashtag.get("tag")) or {}
            examples = [_example_entry(e) for e in full.get("exampleEntries") or []]
            hashtags.append(
                {
                    "tag": hashtag.get("tag"),
                    "occurrences": hashtag.get("occurrences"),
                    "averageBehaviorScore": hashtag.get("averageBehaviorScore"),
                    "overallAverageScore": full.get("overallAverageScore"),
                    "percentageImpact": hashtag.get("percentageImpact"),
                    "exampleJournalEntries": condense(examples, key="exampleJournalEntries"),
                }
            )
        result["hashtagsByType"] = [{"type": group.get("type"), "hashtags": hashtags}]

    _log_compression("Hashtag analysis", raw, result)
    return result
