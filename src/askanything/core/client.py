# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Async HTTP client for the Village Metrics API.

Every tool handler reaches the remote service through this module.

Status handling:
    404          -> ``None`` (no data, not an error)
    403          -> :class:`PermissionDeniedError`
    other >= 400 -> :class:`DataServiceError`
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol
from urllib.parse import quote, urlparse

import httpx

from .config import CoreSettings, get_config
from .exceptions import ConfigException, DataServiceError, PermissionDeniedError

logger = logging.getLogger(__name__)


class DataServiceProtocol(Protocol):
    """What tool handlers need from the data service."""

    async def get_children(self, user_id: str) -> list[dict[str, Any]]: ...

    async def get_behavior_data(self, child_id: str, date: str) -> dict[str, Any] | None: ...

    async def get_date_range_metadata(self, child_id: str) -> dict[str, Any] | None: ...

    async def get_analysis_data(self, child_id: str, time_range: str, analysis_type: str) -> dict[str, Any] | None: ...

    async def get_journal_entry(self, child_id: str, entry_id: str) -> dict[str, Any] | None: ...

    async def search_journals(self, child_id: str, query: str, limit: int = 10, offset: int = 0) -> dict[str, Any] | None: ...

    async def list_journal_entries(self, child_id: str, start_date: str, end_date: str, limit: int = 200) -> dict[str, Any] | None: ...

    async def get_behavior_goals(self, child_id: str) -> Any: ...

    async def get_medications(self, child_id: str) -> Any: ...

    async def get_village_members(self, child_id: str, include_invitation_details: bool = True) -> dict[str, Any] | None: ...

    async def submit_product_feedback(self, feedback_text: str, source: str) -> dict[str, Any] | None: ...

    @property
    def docs_raw_url(self) -> str: ...

    async def get_docs_mapping(self) -> dict[str, Any]: ...

    async def get_docs_file(self, path: str) -> str | None: ...


class VillageMetricsClient:
    """Thin async client for the Village Metrics REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        docs_base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: CoreSettings | None = None,
    ):
        config = settings or get_config()
        self.base_url = (base_url if base_url is not None else config.api_base_url).rstrip("/")
        self.token = token if token is not None else config.api_token
        self.timeout = timeout if timeout is not None else config.api_timeout
        self.docs_base_url = (docs_base_url if docs_base_url is not None else config.docs_base_url).rstrip("/")

        if not self.token:
            raise ConfigException("VM_API_TOKEN is required", missing_vars=["VM_API_TOKEN"])

        parsed = urlparse(self.base_url)
        if parsed.scheme != "https":
            raise ConfigException(f"HTTPS required for API connections. Got: {parsed.scheme}://{parsed.hostname}")

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=transport,
        )
        self._docs_client = httpx.AsyncClient(timeout=self.timeout, transport=transport)
        logger.info(f"API client initialized: {self.base_url}")

    @property
    def docs_raw_url(self) -> str:
        """Base URL of raw markdown documentation files."""
        return f"{self.docs_base_url}/raw"

    @property
    def docs_mapping_url(self) -> str:
        return f"{self.docs_base_url}/mcp-file-mapping.json"

    async def aclose(self) -> None:
        await self._client.aclose()
        await self._docs_client.aclose()

    async def __aenter__(self) -> VillageMetricsClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute a request; returns parsed JSON, or None on 404."""
        try:
            resp = await self._client.request(method, path, params=params, json=body)
        except httpx.TimeoutException as e:
            logger.error(f"API request timed out: {method} {path}")
            raise DataServiceError(f"Request timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            logger.error(f"API request failed: {method} {path}: {e}")
            raise DataServiceError(f"Cannot reach Village Metrics API at {self.base_url}: {e}") from e

        if resp.status_code == 404:
            logger.debug(f"No data: {method} {path}")
            return None
        if resp.status_code == 403:
            logger.warning(f"API access denied: {method} {path}")
            raise PermissionDeniedError(f"Access denied: {method} {path}")
        if resp.status_code >= 400:
            logger.error(f"API request failed: {method} {path} -> {resp.status_code}")
            raise DataServiceError(f"API error {resp.status_code}: {resp.text[:200]}", status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise DataServiceError(f"Invalid JSON from {method} {path}", status_code=resp.status_code) from e

    @staticmethod
    def _child_path(child_id: str) -> str:
        return f"/v1/children/{quote(child_id, safe='')}"

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    async def get_children(self, user_id: str) -> list[dict[str, Any]]:
        """Return every child the caller can see, tagged with ``relationship``."""
        data = await self._request("GET", "/v1/children/me/all") or {}

        parent_children = [{**child, "relationship": "parent"} for child in data.get("parentChildren") or []]
        caregiver_children = [{**child, "relationship": "caregiver"} for child in data.get("caregiverChildren") or []]

        logger.debug(
            f"Retrieved children for {user_id}: {len(parent_children)} as parent, {len(caregiver_children)} as caregiver"
        )
        return parent_children + caregiver_children

    async def get_village_members(self, child_id: str, include_invitation_details: bool = True) -> dict[str, Any] | None:
        return await self._request(
            "GET",
            f"{self._child_path(child_id)}/village-members",
            params={"includeInvitationDetails": str(include_invitation_details).lower()},
        )

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    async def get_behavior_data(self, child_id: str, date: str) -> dict[str, Any] | None:
        return await self._request("GET", f"{self._child_path(child_id)}/track-data/{quote(date, safe='')}")

    async def get_date_range_metadata(self, child_id: str) -> dict[str, Any] | None:
        return await self._request("GET", f"{self._child_path(child_id)}/analysis/date-range-metadata")

    async def get_behavior_goals(self, child_id: str) -> Any:
        return await self._request("GET", f"{self._child_path(child_id)}/behavior-goals")

    async def get_medications(self, child_id: str) -> Any:
        return await self._request("GET", f"{self._child_path(child_id)}/medications")

    async def get_analysis_data(self, child_id: str, time_range: str, analysis_type: str) -> dict[str, Any] | None:
        """Fetch one precomputed analysis (overview, behaviorGoals, medication, journal)."""
        return await self._request(
            "GET",
            f"{self._child_path(child_id)}/analysis/{quote(analysis_type, safe='')}",
            params={"timeRange": time_range},
        )

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------

    async def get_journal_entry(self, child_id: str, entry_id: str) -> dict[str, Any] | None:
        return await self._request("GET", f"{self._child_path(child_id)}/journal/entries/{quote(entry_id, safe='')}")

    async def search_journals(self, child_id: str, query: str, limit: int = 10, offset: int = 0) -> dict[str, Any] | None:
        """Semantic journal search."""
        return await self._request(
            "POST",
            f"{self._child_path(child_id)}/journal/search",
            body={"q": query, "limit": limit, "offset": offset},
        )

    async def list_journal_entries(
        self, child_id: str, start_date: str, end_date: str, limit: int = 200
    ) -> dict[str, Any] | None:
        """Journal entries in a date window, most recent first."""
        return await self._request(
            "POST",
            f"{self._child_path(child_id)}/journal/list",
            body={"startDate": start_date, "endDate": end_date, "sortOrder": "desc", "limit": limit},
        )

    # ------------------------------------------------------------------
    # Product
    # ------------------------------------------------------------------

    async def submit_product_feedback(self, feedback_text: str, source: str) -> dict[str, Any] | None:
        return await self._request("POST", "/v1/feedback/product", body={"feedbackText": feedback_text, "source": source})

    async def get_docs_mapping(self) -> dict[str, Any]:
        """Fetch the documentation section → file mapping."""
        url = self.docs_mapping_url
        try:
            resp = await self._docs_client.get(url)
        except httpx.HTTPError as e:
            raise DataServiceError(f"Failed to fetch file mapping: {e}") from e
        if resp.status_code >= 400:
            raise DataServiceError(f"Failed to fetch file mapping: HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise DataServiceError("Invalid file mapping JSON") from e

    async def get_docs_file(self, path: str) -> str | None:
        """Fetch one raw markdown file; None when missing or not markdown."""
        url = f"{self.docs_raw_url}/{path}"
        try:
            resp = await self._docs_client.get(url)
        except httpx.HTTPError as e:
            raise DataServiceError(f"Failed to fetch {path}: {e}") from e
        if resp.status_code == 404:
            logger.warning(f"Documentation file not found: {path}")
            return None
        if resp.status_code >= 400:
            raise DataServiceError(f"Failed to fetch {path}: HTTP {resp.status_code}", status_code=resp.status_code)

        content = resp.text
        if "<!doctype html" in content.lower() or "<html" in content.lower():
            logger.warning(f"Received HTML instead of markdown: {path}")
            return None
        return content
