# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ask Anything tool definitions.

Contains ASK_ANYTHING_TOOLS, the MCP tool definitions, and TOOL_HANDLERS,
the handler bound to each of them.

Tool list:
    list_children                     Children the caller can see
    select_child                      Set the active child (switching mode only)
    list_village_members              Caregivers and invitation status
    get_behavior_scores               Per-goal scores for one date
    get_date_range_metadata           Data coverage and freshness
    search_journal_entries            Semantic journal search
    list_journal_entries              Recent entries, newest first
    get_journal_entry                 One entry, core information
    get_journal_entry_analysis        One entry, professional analysis
    get_overview_analysis             Trends, patterns, caregivers
    get_behavior_analysis             Behavior goal progress
    get_medication_analysis           Medication combinations
    get_medication_detailed_analysis  One medication combination in depth
    get_journal_analysis              Notable moments and journal statistics
    list_notable_journal_entries      Curated high-scoring entries
    get_hashtag_analysis              One hashtag category
    submit_product_feedback           Feedback to the Village Metrics team
    get_product_help                  Product documentation
"""

from __future__ import annotations

from functools import partial
from typing import Any

from mcp.types import Tool

from askanything.core.client import DataServiceProtocol
from askanything.core.sessions import SessionStore
from askanything.transformers import ANALYSIS_TIME_RANGES, HASHTAG_TYPES

from .handlers import (
    FEEDBACK_SOURCES,
    HELP_SECTIONS,
    LIST_TIME_RANGES,
    ToolContext,
    get_behavior_analysis,
    get_behavior_scores,
    get_date_range_metadata,
    get_hashtag_analysis,
    get_journal_analysis,
    get_journal_entry,
    get_journal_entry_analysis,
    get_medication_analysis,
    get_medication_detailed_analysis,
    get_overview_analysis,
    get_product_help,
    list_children,
    list_journal_entries,
    list_notable_journal_entries,
    list_village_members,
    search_journal_entries,
    select_child,
    submit_product_feedback,
)
from .registry import ToolDefinition, ToolRegistry, UpdateNotifier

_TIME_RANGE_PROPERTY = {
    "type": "string",
    "enum": ANALYSIS_TIME_RANGES,
    "description": "Analysis time period",
}

_JOURNAL_ENTRY_ID_PROPERTY = {
    "type": "string",
    "description": "The journal entry ID (e.g., journal_entry_39c6888b-e7cb-4a93-a797-56a6ebb48db5)",
}

_EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


def _time_range_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"timeRange": dict(_TIME_RANGE_PROPERTY)},
        "required": ["timeRange"],
    }


ASK_ANYTHING_TOOLS = [
    # =========================================================================
    # Children and village
    # =========================================================================
    Tool(
        name="list_children",
        description=(
            "List all children you have access to, showing names and relationship type "
            "(parent vs caregiver). Returns structured JSON for child selection."
        ),
        inputSchema=_EMPTY_SCHEMA,
    ),
    Tool(
        name="select_child",
        description=(
            "Select a child to work with by name. This sets the active child for all "
            "subsequent tool calls in this session."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "childName": {
                    "type": "string",
                    "description": "Name of the child (full name, preferred name, or nickname)",
                },
            },
            "required": ["childName"],
        },
    ),
    Tool(
        name="list_village_members",
        description=(
            "List all caregivers and village members for the selected child. Shows caregiver "
            "names, roles, invitation status, and journal contribution statistics."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "includeInvitationDetails": {
                    "type": "boolean",
                    "description": "Include invitation status details (pending, expired, accepted)",
                    "default": True,
                },
            },
        },
    ),
    # =========================================================================
    # Tracking
    # =========================================================================
    Tool(
        name="get_behavior_scores",
        description="Get behavior tracking scores for the selected child on a specific date",
        inputSchema={
            "type": "object",
            "properties": {
                "date": {
                    "type": "string",
                    "description": "Date to retrieve scores for (YYYY-MM-DD)",
                },
            },
            "required": ["date"],
        },
    ),
    Tool(
        name="get_date_range_metadata",
        description=(
            "Get metadata about available tracking data date ranges and recent daily journal "
            "activity. Shows data coverage and recency to help determine what questions can be answered."
        ),
        inputSchema=_EMPTY_SCHEMA,
    ),
    # =========================================================================
    # Journal
    # =========================================================================
    Tool(
        name="search_journal_entries",
        description=(
            "Search journal entries using semantic (meaning-based) search. Finds content related "
            "to the overall meaning of your query, not just exact keyword matches. Works best with "
            "natural language descriptions of what you're looking for. Results include scoring to "
            "help you decide which entries warrant full retrieval with get_journal_entry."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": (
                        "Describe what you're looking for in natural language. Examples: "
                        '"tantrum at bedtime", "successful strategies for transitions", '
                        '"funny moments with siblings". Use separate searches for unrelated topics.'
                    ),
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results to return (default: 10)",
                    "minimum": 1,
                    "maximum": 50,
                    "default": 10,
                },
                "offset": {
                    "type": "integer",
                    "description": "Offset for pagination (default: 0)",
                    "minimum": 0,
                    "default": 0,
                },
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="list_journal_entries",
        description=(
            "List recent journal entries chronologically. Returns summary information to help "
            "decide which entries need full retrieval with get_journal_entry."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "timeRange": {
                    "type": "string",
                    "enum": list(LIST_TIME_RANGES),
                    "description": "Time period to retrieve entries from",
                    "default": "last_30_days",
                },
            },
        },
    ),
    Tool(
        name="get_journal_entry",
        description=(
            "Get a journal entry by ID. Returns core information: text content (title, summaries, "
            "full text), overall behavior score, sentiment, key insights (challenges/successes), and "
            "simplified hashtags. Use get_journal_entry_analysis for professional analysis and detailed scores."
        ),
        inputSchema={
            "type": "object",
            "properties": {"journalEntryId": dict(_JOURNAL_ENTRY_ID_PROPERTY)},
            "required": ["journalEntryId"],
        },
    ),
    Tool(
        name="get_journal_entry_analysis",
        description=(
            "Get detailed professional analysis of a journal entry. Returns DIFFERENT data than "
            "get_journal_entry: BCBA analysis, per-goal behavior scores with reasoning, child profile "
            "insights, detailed hashtag metadata with reasoning, identified challenges/successes, "
            "all scoring metrics, and professional insights."
        ),
        inputSchema={
            "type": "object",
            "properties": {"journalEntryId": dict(_JOURNAL_ENTRY_ID_PROPERTY)},
            "required": ["journalEntryId"],
        },
    ),
    # =========================================================================
    # Analysis
    # =========================================================================
    Tool(
        name="get_overview_analysis",
        description=(
            "Get comprehensive behavior analysis including overall trends, daily patterns, caregiver "
            "effectiveness, and temporal analysis for the selected child."
        ),
        inputSchema=_time_range_schema(),
    ),
    Tool(
        name="get_behavior_analysis",
        description=(
            "Get detailed behavior goals progress analysis including individual goal consistency, "
            "achievement patterns and goal-specific insights for the selected child. Analyzes behavior "
            "scores (1-4 scale) and includes the configured behavior goals."
        ),
        inputSchema=_time_range_schema(),
    ),
    Tool(
        name="get_medication_analysis",
        description=(
            "Get medication effectiveness analysis including current and past medication combinations, "
            "duration tracking, dosage and behavioral impact for the selected child. Includes both the "
            "medication list and their effectiveness analysis."
        ),
        inputSchema=_time_range_schema(),
    ),
    Tool(
        name="get_medication_detailed_analysis",
        description=(
            "Get detailed analysis for one medication combination including full dosage breakdowns "
            "(AM/midday/PM), hashtag trends and behavior concepts. Use a combination ID found with "
            "get_medication_analysis."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "cocktailId": {
                    "type": "string",
                    "description": "The medication combination ID to analyze in detail (from medication analysis results)",
                },
                "timeRange": {
                    **_TIME_RANGE_PROPERTY,
                    "description": "Analysis time period (optional, defaults to last_365_days)",
                },
            },
            "required": ["cocktailId"],
        },
    ),
    Tool(
        name="get_journal_analysis",
        description=(
            "Get qualitative insights from journal entries including key moments, significant events, "
            "behavioral milestones, and journal statistics for the selected child."
        ),
        inputSchema=_time_range_schema(),
    ),
    Tool(
        name="list_notable_journal_entries",
        description=(
            "List journal entries that stand out as particularly noteworthy. Returns a curated list of "
            "entries that scored highly (0.7+) in special categories like key moments, heartfelt stories, "
            "funny moments, effective strategies and turnarounds, plus journal statistics for the period."
        ),
        inputSchema=_time_range_schema(),
    ),
    Tool(
        name="get_hashtag_analysis",
        description=(
            "Get hashtag analysis for a specific category of hashtags, showing patterns, frequency, "
            "and impact on behavior scores with example journal entries."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "hashtagType": {
                    "type": "string",
                    "enum": HASHTAG_TYPES,
                    "description": "The specific hashtag type to analyze",
                },
                "timeRange": dict(_TIME_RANGE_PROPERTY),
            },
            "required": ["hashtagType", "timeRange"],
        },
    ),
    # =========================================================================
    # Product
    # =========================================================================
    Tool(
        name="submit_product_feedback",
        description=(
            "Submit feedback about Village Metrics features, functionality, or user experience. "
            "Use this to share suggestions, report issues, or provide general feedback about the application."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "feedbackText": {
                    "type": "string",
                    "description": (
                        "Your feedback about the product: feature requests, bug reports, suggestions "
                        "for improvement, or general comments."
                    ),
                    "minLength": 1,
                    "maxLength": 10000,
                },
                "source": {
                    "type": "string",
                    "enum": FEEDBACK_SOURCES,
                    "description": (
                        'Use "ask-anything" for feedback about this assistant, "journal-entry" for '
                        'journal features, or "general" for anything else.'
                    ),
                    "default": "ask-anything",
                },
            },
            "required": ["feedbackText"],
        },
    ),
    Tool(
        name="get_product_help",
        description="Get VillageMetrics product documentation for feature usage, troubleshooting, and technical details",
        inputSchema={
            "type": "object",
            "properties": {
                "section": {
                    "type": "string",
                    "enum": HELP_SECTIONS,
                    "description": "Help topic area",
                },
            },
            "required": ["section"],
        },
    ),
]


TOOL_HANDLERS: dict[str, Any] = {
    # Children and village
    "list_children": list_children,
    "select_child": select_child,
    "list_village_members": list_village_members,
    # Tracking
    "get_behavior_scores": get_behavior_scores,
    "get_date_range_metadata": get_date_range_metadata,
    # Journal
    "search_journal_entries": search_journal_entries,
    "list_journal_entries": list_journal_entries,
    "get_journal_entry": get_journal_entry,
    "get_journal_entry_analysis": get_journal_entry_analysis,
    # Analysis
    "get_overview_analysis": get_overview_analysis,
    "get_behavior_analysis": get_behavior_analysis,
    "get_medication_analysis": get_medication_analysis,
    "get_medication_detailed_analysis": get_medication_detailed_analysis,
    "get_journal_analysis": get_journal_analysis,
    "list_notable_journal_entries": list_notable_journal_entries,
    "get_hashtag_analysis": get_hashtag_analysis,
    # Product
    "submit_product_feedback": submit_product_feedback,
    "get_product_help": get_product_help,
}


def build_tool_definitions(ctx: ToolContext) -> list[ToolDefinition]:
    """Bind every tool in ASK_ANYTHING_TOOLS to its handler and ``ctx``."""
    return [
        ToolDefinition(
            name=tool.name,
            description=tool.description or "",
            input_schema=tool.inputSchema,
            handler=partial(TOOL_HANDLERS[tool.name], ctx),
        )
        for tool in ASK_ANYTHING_TOOLS
    ]


def create_registry(
    store: SessionStore,
    client: DataServiceProtocol,
    *,
    allow_child_switching: bool = True,
    update_notifier: UpdateNotifier | None = None,
) -> ToolRegistry:
    """Registry of all Ask Anything tools against ``store`` and ``client``."""
    ctx = ToolContext(store=store, client=client, allow_child_switching=allow_child_switching)
    return ToolRegistry(
        store,
        build_tool_definitions(ctx),
        allow_child_switching=allow_child_switching,
        update_notifier=update_notifier,
    )
