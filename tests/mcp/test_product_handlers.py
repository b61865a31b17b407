"""Tests for product feedback and product help MCP handlers."""

from __future__ import annotations

import time

import pytest

from askanything.core.exceptions import DataServiceError, ValidationException
from askanything.mcp.handlers.feedback import THANK_YOU_MESSAGE, submit_product_feedback
from askanything.mcp.handlers.help import DocsMappingCache, get_product_help


class TestSubmitProductFeedback:
    """Tests for submit_product_feedback handler."""

    async def test_submit_without_child(self, ctx, session, mock_client):
        result = await submit_product_feedback(ctx, {"feedbackText": "  Love the search  "}, session)

        mock_client.submit_product_feedback.assert_awaited_once_with("Love the search", "ask-anything")
        assert result["success"] is True
        assert result["message"] == THANK_YOU_MESSAGE
        assert result["submissionDetails"]["source"] == "ask-anything"
        assert result["submissionDetails"]["feedbackLength"] == 15

    async def test_source(self, ctx, session, mock_client):
        await submit_product_feedback(ctx, {"feedbackText": "hi", "source": "journal-entry"}, session)
        mock_client.submit_product_feedback.assert_awaited_once_with("hi", "journal-entry")

    @pytest.mark.parametrize("text", [None, "", "   "])
    async def test_empty(self, ctx, session, text):
        with pytest.raises(ValidationException, match="Feedback text is required and cannot be empty"):
            await submit_product_feedback(ctx, {"feedbackText": text}, session)

    async def test_too_long(self, ctx, session):
        with pytest.raises(ValidationException, match="less than 10,000 characters"):
            await submit_product_feedback(ctx, {"feedbackText": "x" * 10_001}, session)

    async def test_invalid_source(self, ctx, session):
        with pytest.raises(ValidationException, match="Invalid source"):
            await submit_product_feedback(ctx, {"feedbackText": "hi", "source": "email"}, session)

    async def test_status_messages(self, ctx, session, mock_client):
        mock_client.submit_product_feedback.side_effect = DataServiceError("API error 401: no", status_code=401)

        with pytest.raises(DataServiceError, match="Authentication failed"):
            await submit_product_feedback(ctx, {"feedbackText": "hi"}, session)

    async def test_other_status(self, ctx, session, mock_client):
        mock_client.submit_product_feedback.side_effect = DataServiceError("Cannot reach Village Metrics API")

        with pytest.raises(DataServiceError, match="Failed to submit feedback: Cannot reach"):
            await submit_product_feedback(ctx, {"feedbackText": "hi"}, session)


MAPPING = {
    "version": "3",
    "sections": {
        "getting-started-setup": {
            "main": ["getting-started/setup.md", "getting-started/first-steps.md"],
            "supplemental": ["ai-supplemental/setup-notes.md"],
        },
        "account-settings-privacy": {"main": [], "supplemental": []},
    },
}


class TestGetProductHelp:
    """Tests for get_product_help handler."""

    @pytest.fixture(autouse=True)
    def docs(self, mock_client):
        mock_client.get_docs_mapping.return_value = MAPPING
        mock_client.get_docs_file.side_effect = lambda path: f"# {path}"

    async def test_all_files(self, ctx, session):
        result = await get_product_help(ctx, {"section": "getting-started-setup"}, session)

        assert [d["file"] for d in result["mainDocumentation"]] == [
            "getting-started/setup.md",
            "getting-started/first-steps.md",
        ]
        assert result["supplementalDocumentation"] == [
            {"file": "ai-supplemental/setup-notes.md", "content": "# ai-supplemental/setup-notes.md"}
        ]
        assert result["totalFiles"] == 3
        assert result["sourceUrl"] == "https://docs.test.villagemetrics.com/raw/"
        assert "warnings" not in result

    async def test_partial_failure(self, ctx, session, mock_client):
        mock_client.get_docs_file.side_effect = lambda path: None if path.endswith("first-steps.md") else "# doc"

        result = await get_product_help(ctx, {"section": "getting-started-setup"}, session)

        assert result["totalFiles"] == 2
        assert result["inaccessibleFiles"] == 1
        assert "getting-started/first-steps.md" in result["warnings"][0]

    async def test_all_failed(self, ctx, session, mock_client):
        mock_client.get_docs_file.side_effect = lambda path: None

        result = await get_product_help(ctx, {"section": "getting-started-setup"}, session)

        assert result["totalFiles"] == 0
        assert result["totalExpected"] == 3
        assert "No documentation files could be accessed" in result["error"]

    async def test_no_files_configured(self, ctx, session):
        with pytest.raises(DataServiceError, match="No documentation files configured"):
            await get_product_help(ctx, {"section": "account-settings-privacy"}, session)

    async def test_invalid_section(self, ctx, session, mock_client):
        with pytest.raises(ValidationException, match="Invalid section"):
            await get_product_help(ctx, {"section": "billing"}, session)
        mock_client.get_docs_mapping.assert_not_awaited()

    async def test_mapping_cached(self, ctx, session, mock_client):
        await get_product_help(ctx, {"section": "getting-started-setup"}, session)
        await get_product_help(ctx, {"section": "getting-started-setup"}, session)

        assert mock_client.get_docs_mapping.await_count == 1


class TestDocsMappingCache:
    async def test_expires(self, mock_client):
        mock_client.get_docs_mapping.return_value = MAPPING
        cache = DocsMappingCache(ttl_seconds=300)

        await cache.get(mock_client)
        await cache.get(mock_client)
        assert mock_client.get_docs_mapping.await_count == 1

        cache._fetched_at = time.monotonic() - 301
        await cache.get(mock_client)
        assert mock_client.get_docs_mapping.await_count == 2

    async def test_clear(self, mock_client):
        mock_client.get_docs_mapping.return_value = MAPPING
        cache = DocsMappingCache()

        await cache.get(mock_client)
        cache.clear()
        await cache.get(mock_client)

        assert mock_client.get_docs_mapping.await_count == 2

    async def test_invalid_mapping(self, mock_client):
        mock_client.get_docs_mapping.return_value = {"version": "1"}

        with pytest.raises(DataServiceError, match="missing sections"):
            await DocsMappingCache().get(mock_client)

    async def test_unknown_section(self, mock_client):
        mock_client.get_docs_mapping.return_value = MAPPING

        assert await DocsMappingCache().section_files(mock_client, "nope") == ([], [])
