# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Journal reshaping: search hits, chronological listings and single entries.

Search hits and listings share one compact shape meant to help the agent
decide which entries to fetch in full. Score labels are gated: detail level
is always present, the other labels only appear for scores >= 0.55.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from ._utils import (
    cap_results,
    crisis_level,
    days_ago,
    detail_level,
    effective_strategies,
    moment_significance,
    round_half_up,
)

logger = logging.getLogger(__name__)

_MARK_TAG = re.compile(r"</?mark>")

SEARCH_GUIDANCE = (
    "Use journal entry IDs for full details. Scoring fields help you decide which entries to retrieve: "
    "detailLevel (always present: Brief/Moderate/High), "
    "momentSignificance (≥0.55: Minor/Notable/Major key moment), "
    "crisisLevel (≥0.55: Elevated/High intensity/Crisis situation), "
    "effectiveStrategies (≥0.55: Helpful/Good/Highly effective strategies)."
)


def _transform_hit(item: dict[str, Any], today: date | None) -> dict[str, Any]:
    document = item.get("document") or {}
    metadata = item.get("searchMetadata") or {}
    results = document.get("results") or {}

    snippet = metadata.get("snippet")
    matching_chunk = metadata.get("rawSnippet") or (_MARK_TAG.sub("", snippet) if snippet else None)

    hit: dict[str, Any] = {
        "journalEntryId": document.get("journalEntryId"),
        "date": document.get("date"),
        "daysAgo": days_ago(document.get("date"), today),
        "authorName": document.get("userName") or "Unknown",
        "summary": results.get("shortTitle") or results.get("redactedSummary") or "No summary available",
        "matchingChunk": matching_chunk or "No matching content",
        "relevanceScore": round_half_up((metadata.get("searchScore") or 0) * 100),
    }

    labels = {
        "detailLevel": detail_level(results.get("detailScore")),
        "momentSignificance": moment_significance(results.get("keyMomentScore")),
        "crisisLevel": crisis_level(results.get("crisisIntensityScore")),
        "effectiveStrategies": effective_strategies(results.get("effectiveStrategiesScore")),
    }
    hit.update({name: label for name, label in labels.items() if label is not None})
    return hit


def transform_journal_search_results(
    raw: dict[str, Any] | None,
    child_name: str | None,
    today: date | None = None,
) -> dict[str, Any]:
    """Reshape a search (or list) response into compact, labelled hits."""
    if not raw or raw.get("results") is None:
        return {
            "childName": child_name,
            "totalResults": 0,
            "results": [],
            "message": "No journal entries found",
        }

    hits = [_transform_hit(item, today) for item in raw["results"]]
    pagination = raw.get("pagination")

    if hits:
        avg_relevance = sum(h["relevanceScore"] for h in hits) / len(hits)
        logger.debug(f"Journal search transformed: {len(hits)} hits, avg relevance {avg_relevance:.1f}")

    return {
        "childName": child_name,
        "totalResults": (pagination or {}).get("total") or len(hits),
        "results": hits,
        "pagination": pagination,
        "message": f"Found {len(hits)} relevant entries. {SEARCH_GUIDANCE}",
    }


def transform_journal_list(
    raw: dict[str, Any] | None,
    child_name: str | None,
    time_range: str,
    start_date: str,
    end_date: str,
    today: date | None = None,
) -> dict[str, Any]:
    """Chronological listing, hard-capped at 100 entries."""
    capped, truncated, total_found = cap_results((raw or {}).get("results"))

    page = {**raw, "results": capped} if raw and raw.get("results") is not None else raw
    transformed = transform_journal_search_results(page, child_name, today)

    if truncated:
        transformed["truncated"] = True
        transformed["totalFound"] = total_found
        transformed["message"] = (
            f"Found {total_found} entries for {time_range}. Showing first {len(capped)}. "
            "Consider using a shorter timeRange for complete results."
        )
    else:
        transformed["message"] = f"Found {total_found} entries for {time_range}."

    transformed["timeRange"] = time_range
    transformed["dateRange"] = {"startDate": start_date, "endDate": end_date}
    return transformed


def transform_journal_entry(entry: dict[str, Any], child_name: str | None) -> dict[str, Any]:
    """Core information for one entry: text, headline scores, simple hashtags."""
    results = entry.get("results") or {}
    behavior_scores = results.get("inferredBehaviorScores") or {}

    return {
        "childName": child_name,
        "journalEntryId": entry.get("journalEntryId"),
        "date": entry.get("date"),
        "entryType": entry.get("entryType"),
        "shortTitle": results.get("shortTitle") or "",
        "summary": results.get("summary") or "",
        "longSummary": results.get("longSummary") or "",
        "fullText": results.get("cleanVersion") or entry.get("text") or "",
        "sentiment": results.get("sentiment") or 0,
        "keyMomentScore": results.get("keyMomentScore") or 0,
        "effectiveStrategiesScore": results.get("effectiveStrategiesScore") or 0,
        "overallBehaviorScore": behavior_scores.get("overall") or None,
        "hashtags": [
            {
                "tag": h.get("hashtag"),
                "reason": h.get("commentary") or "",
                "type": h.get("type") or "",
            }
            for h in results.get("hashtags") or []
        ],
        "identifiedChallenges": results.get("identifiedChallenges") or [],
        "notableSuccesses": results.get("notableSuccesses") or [],
        "note": (
            "Use get_journal_entry_analysis for behavior score breakdowns, BCBA analysis, "
            "child profile, and detailed hashtag metadata"
        ),
    }


def transform_journal_details(entry: dict[str, Any], child_name: str | None) -> dict[str, Any]:
    """Professional analysis for one entry: reasoning, profile, every score."""
    results = entry.get("results") or {}
    behavior_scores = results.get("inferredBehaviorScores") or {}
    profile = results.get("childProfile") or {}

    return {
        "childName": child_name,
        "journalEntryId": entry.get("journalEntryId"),
        "date": entry.get("date"),
        "analyticalSummaries": {
            "shortTitle": results.get("shortTitle") or "",
            "summary": results.get("summary") or "",
            "longSummary": results.get("longSummary") or "",
        },
        "keyInsights": {
            "identifiedChallenges": results.get("identifiedChallenges") or [],
            "notableSuccesses": results.get("notableSuccesses") or [],
        },
        "professionalAnalysis": {
            "bcbaAnalysis": results.get("bcbaAnalysis") or "",
            "caregiverHypotheses": results.get("caregiverHypotheses") or [],
        },
        "behaviorScoresDetailed": {
            "overall": behavior_scores.get("overall") or None,
            "perGoal": [
                {
                    "goalName": goal.get("name"),
                    "score": goal.get("score"),
                    "reasoning": goal.get("whyThisScore") or "",
                }
                for goal in behavior_scores.get("perGoal") or []
            ],
        },
        "childProfile": {
            name: profile.get(name) or [] for name in ("likes", "dislikes", "strengths", "struggles", "memoryFacts")
        },
        "hashtagsDetailed": [
            {
                "tag": h.get("hashtag"),
                "reasoning": h.get("commentary") or "",
                "type": h.get("type") or "",
                "confidence": h.get("confidence") or 0,
                "impact": h.get("impact") or 0,
                "occurrences": h.get("occurrences") or 0,
                "intensity": h.get("intensity") or 0,
                "prominence": h.get("prominence") or 0,
            }
            for h in results.get("hashtags") or []
        ],
        "detailedScores": {
            "sentiment": results.get("sentiment") or 0,
            "detailScore": results.get("detailScore") or 0,
            "keyMomentScore": results.get("keyMomentScore") or 0,
            "dayCompleteness": results.get("dayCompleteness") or 0,
            "singleDayFocusScore": results.get("singleDayFocusScore") or 0,
            "effectiveStrategiesScore": results.get("effectiveStrategiesScore") or 0,
            "turnaroundScore": results.get("turnaroundScore") or None,
            "cutenessScore": results.get("cutenessScore") or 0,
            "funnyStoryScore": results.get("funnyStoryScore") or 0,
            "heartfeltScore": results.get("heartfeltScore") or 0,
            "crazyStoryScore": results.get("crazyStoryScore") or 0,
        },
        "empathyResponse": results.get("empathyResponse") or "",
        "productFeedback": results.get("productFeedback") or "",
    }
