"""Tests for behavior tracking MCP handlers."""

from __future__ import annotations

import pytest

from askanything.core.exceptions import NoChildSelectedError, ValidationException
from askanything.mcp.handlers.tracking import get_behavior_scores, get_date_range_metadata


class TestGetBehaviorScores:
    """Tests for get_behavior_scores handler."""

    async def test_scores(self, ctx, selected_session, mock_client):
        mock_client.get_behavior_data.return_value = {
            "date": "2026-03-09",
            "goals": [{"name": "Listening", "value": 3}, {"name": "Kindness", "value": 4}],
        }

        result = await get_behavior_scores(ctx, {"date": "2026-03-09"}, selected_session)

        assert result["childName"] == "Emma Smith"
        assert result["averageBehaviorScoreAcrossAllGoals"] == 3.5
        mock_client.get_behavior_data.assert_awaited_once_with("c1", "2026-03-09")

    async def test_no_data(self, ctx, selected_session, mock_client):
        result = await get_behavior_scores(ctx, {"date": "2026-03-09"}, selected_session)

        assert result["hasData"] is False
        assert result["scores"] == {}
        assert result["message"].startswith("No behavior data found for Emma Smith on 2026-03-09.")

    @pytest.mark.parametrize(
        "value",
        [None, "", "March 9", "2026-13-01", "2026-02-30", "2026-03-09T10:00:00Z", "20260309", "2026-W11-1", " 2026-03-09"],
    )
    async def test_invalid_date(self, ctx, selected_session, mock_client, value):
        with pytest.raises(ValidationException):
            await get_behavior_scores(ctx, {"date": value}, selected_session)
        mock_client.get_behavior_data.assert_not_awaited()

    async def test_requires_child(self, ctx, session):
        with pytest.raises(NoChildSelectedError):
            await get_behavior_scores(ctx, {"date": "2026-03-09"}, session)


class TestGetDateRangeMetadata:
    async def test_no_data(self, ctx, selected_session):
        result = await get_date_range_metadata(ctx, {}, selected_session)
        assert result["hasData"] is False

    async def test_metadata(self, ctx, selected_session, mock_client):
        mock_client.get_date_range_metadata.return_value = {"dataSpanDays": 10, "dateRanges": {}}

        result = await get_date_range_metadata(ctx, {}, selected_session)

        assert result["hasData"] is True
        assert result["allTimeDataCoverage"]["timeSpanDays"] == 10
        mock_client.get_date_range_metadata.assert_awaited_once_with("c1")
