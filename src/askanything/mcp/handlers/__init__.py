# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""MCP tool handlers, one module per tool family.

Every handler has the signature ``handler(ctx, args, session)``; the tool
manifest binds ``ctx`` before registration.
"""

from .analysis import (
    get_behavior_analysis,
    get_hashtag_analysis,
    get_journal_analysis,
    get_medication_analysis,
    get_medication_detailed_analysis,
    get_overview_analysis,
    list_notable_journal_entries,
)
from .context import ToolContext
from .feedback import FEEDBACK_SOURCES, submit_product_feedback
from .help import HELP_SECTIONS, DocsMappingCache, get_product_help
from .journal import (
    LIST_TIME_RANGES,
    get_journal_entry,
    get_journal_entry_analysis,
    list_journal_entries,
    search_journal_entries,
)
from .session import list_children, select_child
from .tracking import get_behavior_scores, get_date_range_metadata
from .village import list_village_members

__all__ = [
    "DocsMappingCache",
    "FEEDBACK_SOURCES",
    "HELP_SECTIONS",
    "LIST_TIME_RANGES",
    "ToolContext",
    "get_behavior_analysis",
    "get_behavior_scores",
    "get_date_range_metadata",
    "get_hashtag_analysis",
    "get_journal_analysis",
    "get_journal_entry",
    "get_journal_entry_analysis",
    "get_medication_analysis",
    "get_medication_detailed_analysis",
    "get_overview_analysis",
    "get_product_help",
    "list_children",
    "list_journal_entries",
    "list_notable_journal_entries",
    "list_village_members",
    "search_journal_entries",
    "select_child",
    "submit_product_feedback",
]
