# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Product help tool handler.

Documentation lives on the docs site as raw markdown. A mapping file lists
the main and supplemental files of each help section; it is cached for
five minutes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from askanything.core.client import DataServiceProtocol
from askanything.core.exceptions import DataServiceError
from askanything.core.sessions import Session

from ._utils import require_string, validate_enum

if TYPE_CHECKING:
    from .context import ToolContext

logger = logging.getLogger(__name__)

HELP_SECTIONS = [
    "getting-started-setup",
    "journal-recording-processing",
    "behavior-tracking-goals",
    "village-invitations-management",
    "analysis-insights-troubleshooting",
    "medication-tracking-analysis",
    "search-ask-anything-features",
    "data-export-sharing-permissions",
    "account-settings-privacy",
    "hashtag-organization-system",
    "ai-tools-integration",
    "subscription-billing-access",
    "troubleshooting-technical-issues",
]

MAPPING_TTL_SECONDS = 300.0
SUPPLEMENTAL_PREFIX = "ai-supplemental/"


class DocsMappingCache:
    """Time-bounded cache of the section -> files mapping."""

    def __init__(self, ttl_seconds: float = MAPPING_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._mapping: dict[str, Any] | None = None
        self._fetched_at: float | None = None

    def clear(self) -> None:
        self._mapping = None
        self._fetched_at = None

    async def get(self, client: DataServiceProtocol) -> dict[str, Any]:
        if self._mapping is not None and self._fetched_at is not None:
            age = time.monotonic() - self._fetched_at
            if age < self.ttl_seconds:
                logger.debug(f"Using cached docs mapping ({age:.0f}s old)")
                return self._mapping

        mapping = await client.get_docs_mapping()
        if not isinstance(mapping, dict) or not isinstance(mapping.get("sections"), dict):
            raise DataServiceError("Invalid mapping structure: missing sections object")

        self._mapping = mapping
        self._fetched_at = time.monotonic()
        logger.debug(f"Docs mapping fetched: {len(mapping['sections'])} sections (version {mapping.get('version')})")
        return mapping

    async def section_files(self, client: DataServiceProtocol, section: str) -> tuple[list[str], list[str]]:
        """Return ``(main, supplemental)`` file lists; empty when the section is unknown."""
        mapping = await self.get(client)
        section_data = mapping["sections"].get(section)
        if not section_data:
            logger.warning(f"Section not in docs mapping: {section}")
            return [], []
        return list(section_data.get("main") or []), list(section_data.get("supplemental") or [])


async def get_product_help(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """Fetch every documentation file of a help section."""
    section = require_string(args, "section", "Section is required")
    validate_enum(section, HELP_SECTIONS, "section")

    main, supplemental = await ctx.docs_cache.section_files(ctx.client, section)
    files = main + supplemental
    if not files:
        raise DataServiceError(f"No documentation files configured for section: {section}")

    logger.debug(f"Fetching product help: {section} ({len(files)} files)")
    try:
        contents = await asyncio.gather(*(ctx.client.get_docs_file(path) for path in files))
    except DataServiceError as e:
        raise DataServiceError(f"Failed to get product help for {section}: {e.message}") from e

    main_docs = []
    supplemental_docs = []
    failed = []
    for path, content in zip(files, contents, strict=True):
        if not content:
            failed.append(path)
        elif path.startswith(SUPPLEMENTAL_PREFIX):
            supplemental_docs.append({"file": path, "content": content})
        else:
            main_docs.append({"file": path, "content": content})

    source_url = f"{ctx.client.docs_raw_url}/"
    fetched = len(main_docs) + len(supplemental_docs)

    if fetched == 0:
        return {
            "section": section,
            "error": (
                f"No documentation files could be accessed for section '{section}'. "
                "This may be due to a temporary issue with the documentation service."
            ),
            "mainDocumentation": [],
            "supplementalDocumentation": [],
            "hasMainDocs": False,
            "hasSupplementalDocs": False,
            "totalFiles": 0,
            "totalExpected": len(files),
            "sourceUrl": source_url,
            "failedFiles": failed,
        }

    result: dict[str, Any] = {
        "section": section,
        "mainDocumentation": main_docs,
        "supplementalDocumentation": supplemental_docs,
        "hasMainDocs": bool(main_docs),
        "hasSupplementalDocs": bool(supplemental_docs),
        "totalFiles": fetched,
        "totalExpected": len(files),
        "sourceUrl": source_url,
    }
    if failed:
        result["warnings"] = [f"{len(failed)} documentation file(s) could not be accessed: {', '.join(failed)}"]
        result["accessibleFiles"] = fetched
        result["inaccessibleFiles"] = len(failed)
    return result
