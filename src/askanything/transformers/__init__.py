# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Condensation of Village Metrics payloads for LLM consumption.

All functions are pure. Absent payloads produce an explanatory "no data"
object rather than an exception.
"""

from .analysis import (
    ANALYSIS_TIME_RANGES,
    HASHTAG_TYPES,
    transform_behavior_analysis,
    transform_hashtag_analysis,
    transform_journal_analysis,
    transform_medication_analysis,
    transform_medication_details,
    transform_overview_analysis,
)
from .behavior import transform_behavior_data
from .condense import DEFAULT_RULES, CondenseRules, condense
from .date_range import transform_date_range_metadata
from .journal import (
    transform_journal_details,
    transform_journal_entry,
    transform_journal_list,
    transform_journal_search_results,
)
from .village import transform_village_members

__all__ = [
    "ANALYSIS_TIME_RANGES",
    "CondenseRules",
    "DEFAULT_RULES",
    "HASHTAG_TYPES",
    "condense",
    "transform_behavior_analysis",
    "transform_behavior_data",
    "transform_date_range_metadata",
    "transform_hashtag_analysis",
    "transform_journal_analysis",
    "transform_journal_details",
    "transform_journal_entry",
    "transform_journal_list",
    "transform_journal_search_results",
    "transform_medication_analysis",
    "transform_medication_details",
    "transform_overview_analysis",
    "transform_village_members",
]
