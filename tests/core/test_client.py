"""Tests for askanything.core.client - VillageMetricsClient over httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from askanything.core.client import VillageMetricsClient
from askanything.core.exceptions import ConfigException, DataServiceError, PermissionDeniedError

BASE_URL = "https://api.test.villagemetrics.com"
DOCS_URL = "https://docs.test.villagemetrics.com"


class Recorder:
    """MockTransport handler that records requests and replies from a table."""

    def __init__(self, responses: dict[tuple[str, str], httpx.Response] | None = None):
        self.responses = responses or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.get((request.method, request.url.path), httpx.Response(404))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(recorder: Recorder, **kwargs) -> VillageMetricsClient:
    kwargs.setdefault("docs_base_url", DOCS_URL)
    return VillageMetricsClient(
        base_url=BASE_URL,
        token="test-token",
        transport=httpx.MockTransport(recorder),
        **kwargs,
    )


class TestConstruction:
    """Constructor validation."""

    def test_missing_token(self, clean_env):
        with pytest.raises(ConfigException) as exc_info:
            VillageMetricsClient(base_url=BASE_URL, token="")
        assert exc_info.value.missing_vars == ["VM_API_TOKEN"]

    def test_requires_https(self, clean_env):
        with pytest.raises(ConfigException, match="HTTPS required"):
            VillageMetricsClient(base_url="http://api.villagemetrics.com", token="t")

    def test_settings_from_env(self, env_with_token, monkeypatch):
        monkeypatch.setenv("VM_API_BASE_URL", BASE_URL + "/")
        client = VillageMetricsClient()
        assert client.base_url == BASE_URL
        assert client.token == "test-token"


class TestRequest:
    """Status and transport error mapping."""

    async def test_bearer_token_sent(self):
        recorder = Recorder({("GET", "/v1/children/c1/medications"): httpx.Response(200, json=[])})
        async with make_client(recorder) as client:
            await client.get_medications("c1")

        assert recorder.last.headers["Authorization"] == "Bearer test-token"

    async def test_404_is_none(self):
        async with make_client(Recorder()) as client:
            assert await client.get_behavior_data("c1", "2026-01-15") is None

    async def test_403_is_permission_denied(self):
        recorder = Recorder({("GET", "/v1/children/c1/behavior-goals"): httpx.Response(403)})
        async with make_client(recorder) as client:
            with pytest.raises(PermissionDeniedError):
                await client.get_behavior_goals("c1")

    async def test_500_is_data_service_error(self):
        recorder = Recorder({("GET", "/v1/children/c1/behavior-goals"): httpx.Response(500, text="boom")})
        async with make_client(recorder) as client:
            with pytest.raises(DataServiceError) as exc_info:
                await client.get_behavior_goals("c1")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "API error 500: boom"

    async def test_connection_error(self):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        client = VillageMetricsClient(base_url=BASE_URL, token="t", transport=httpx.MockTransport(fail))
        async with client:
            with pytest.raises(DataServiceError, match="Cannot reach"):
                await client.get_medications("c1")

    async def test_timeout(self):
        def slow(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = VillageMetricsClient(base_url=BASE_URL, token="t", transport=httpx.MockTransport(slow))
        async with client:
            with pytest.raises(DataServiceError, match="timed out"):
                await client.get_medications("c1")

    async def test_invalid_json(self):
        recorder = Recorder({("GET", "/v1/children/c1/medications"): httpx.Response(200, text="not json")})
        async with make_client(recorder) as client:
            with pytest.raises(DataServiceError, match="Invalid JSON"):
                await client.get_medications("c1")

    async def test_empty_body_is_none(self):
        recorder = Recorder({("POST", "/v1/feedback/product"): httpx.Response(204)})
        async with make_client(recorder) as client:
            assert await client.submit_product_feedback("Great app", "general") is None


class TestEndpoints:
    """Endpoint paths, params and bodies."""

    async def test_get_children_merges_relationships(self):
        payload = {
            "parentChildren": [{"childId": "c1", "fullName": "Emma Smith"}],
            "caregiverChildren": [{"childId": "c2", "fullName": "Liam Jones"}],
        }
        recorder = Recorder({("GET", "/v1/children/me/all"): httpx.Response(200, json=payload)})
        async with make_client(recorder) as client:
            children = await client.get_children("user-1")

        assert [(c["childId"], c["relationship"]) for c in children] == [("c1", "parent"), ("c2", "caregiver")]

    async def test_get_children_missing_lists(self):
        recorder = Recorder({("GET", "/v1/children/me/all"): httpx.Response(200, json={})})
        async with make_client(recorder) as client:
            assert await client.get_children("user-1") == []

    async def test_analysis_time_range_param(self):
        recorder = Recorder({("GET", "/v1/children/c1/analysis/overview"): httpx.Response(200, json={"ok": 1})})
        async with make_client(recorder) as client:
            assert await client.get_analysis_data("c1", "last_30_days", "overview") == {"ok": 1}

        assert recorder.last.url.params["timeRange"] == "last_30_days"

    async def test_village_members_param(self):
        recorder = Recorder({("GET", "/v1/children/c1/village-members"): httpx.Response(200, json={"members": []})})
        async with make_client(recorder) as client:
            await client.get_village_members("c1", include_invitation_details=False)

        assert recorder.last.url.params["includeInvitationDetails"] == "false"

    async def test_search_body(self):
        recorder = Recorder({("POST", "/v1/children/c1/journal/search"): httpx.Response(200, json={"results": []})})
        async with make_client(recorder) as client:
            await client.search_journals("c1", "bedtime", limit=5, offset=10)

        assert json.loads(recorder.last.content) == {"q": "bedtime", "limit": 5, "offset": 10}

    async def test_list_body(self):
        recorder = Recorder({("POST", "/v1/children/c1/journal/list"): httpx.Response(200, json={"results": []})})
        async with make_client(recorder) as client:
            await client.list_journal_entries("c1", "2026-01-01", "2026-01-31")

        assert json.loads(recorder.last.content) == {
            "startDate": "2026-01-01",
            "endDate": "2026-01-31",
            "sortOrder": "desc",
            "limit": 200,
        }

    async def test_child_id_is_quoted(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.get_journal_entry("c/1", "e1")

        assert recorder.last.url.raw_path.startswith(b"/v1/children/c%2F1/journal/entries/e1")

    async def test_feedback_body(self):
        recorder = Recorder({("POST", "/v1/feedback/product"): httpx.Response(201, json={"id": "f1"})})
        async with make_client(recorder) as client:
            await client.submit_product_feedback("Love it", "ask-anything")

        assert json.loads(recorder.last.content) == {"feedbackText": "Love it", "source": "ask-anything"}


class TestDocs:
    """Documentation site fetches."""

    async def test_urls_from_override(self):
        async with make_client(Recorder(), docs_base_url="https://docs.example.com/") as client:
            assert client.docs_raw_url == "https://docs.example.com/raw"
            assert client.docs_mapping_url == "https://docs.example.com/mcp-file-mapping.json"

    async def test_mapping(self):
        mapping = {"version": "1", "sections": {}}
        recorder = Recorder({("GET", "/mcp-file-mapping.json"): httpx.Response(200, json=mapping)})
        async with make_client(recorder) as client:
            assert await client.get_docs_mapping() == mapping

        assert str(recorder.last.url) == f"{DOCS_URL}/mcp-file-mapping.json"
        assert "Authorization" not in recorder.last.headers

    async def test_mapping_error(self):
        recorder = Recorder({("GET", "/mcp-file-mapping.json"): httpx.Response(503)})
        async with make_client(recorder) as client:
            with pytest.raises(DataServiceError):
                await client.get_docs_mapping()

    async def test_file(self):
        recorder = Recorder({("GET", "/raw/guide/start.md"): httpx.Response(200, text="# Start")})
        async with make_client(recorder) as client:
            assert await client.get_docs_file("guide/start.md") == "# Start"

    async def test_missing_file(self):
        async with make_client(Recorder()) as client:
            assert await client.get_docs_file("guide/missing.md") is None

    async def test_html_is_rejected(self):
        recorder = Recorder({("GET", "/raw/guide/start.md"): httpx.Response(200, text="<!DOCTYPE html><html></html>")})
        async with make_client(recorder) as client:
            assert await client.get_docs_file("guide/start.md") is None
