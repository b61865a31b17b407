"""Tests for the MCP server bootstrap and protocol handlers."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from askanything.core.config import CoreSettings
from askanything.core.exceptions import ConfigException
from askanything.mcp import server
from askanything.mcp.server import (
    ToolCallError,
    bind_runtime,
    call_tool,
    create_runtime,
    get_runtime,
    list_tools,
    read_user_id,
    render_result,
)


def make_token(**claims) -> str:
    return jwt.encode(claims, "test-secret-key-with-enough-bytes", algorithm="HS256")


@pytest.fixture
def settings(clean_env, monkeypatch):
    """Settings factory reading VM_ variables set by the test."""

    def _settings(**env: str) -> CoreSettings:
        monkeypatch.setenv("VM_API_TOKEN", make_token(sub="user-1"))
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return CoreSettings()

    return _settings


@pytest.fixture
def runtime(settings, mock_client):
    rt = create_runtime(mock_client, settings())
    bind_runtime(rt)
    yield rt
    bind_runtime(None)


class TestReadUserId:
    """Tests for read_user_id."""

    def test_sub_claim(self):
        assert read_user_id(make_token(sub="u1")) == "u1"

    def test_user_id_claim(self):
        assert read_user_id(make_token(userId=42)) == "42"

    def test_missing_token(self):
        with pytest.raises(ConfigException) as exc_info:
            read_user_id("")
        assert exc_info.value.details["missing_vars"] == ["VM_API_TOKEN"]

    def test_not_a_jwt(self):
        with pytest.raises(ConfigException, match="not a valid JWT"):
            read_user_id("not-a-token")

    def test_no_user_claim(self):
        with pytest.raises(ConfigException, match="no sub or userId claim"):
            read_user_id(make_token(role="parent"))


class TestRenderResult:
    def test_string_verbatim(self):
        assert render_result("Selected child: Emma") == "Selected child: Emma"

    def test_json(self):
        assert json.loads(render_result({"a": [1, 2]})) == {"a": [1, 2]}
        assert render_result({"a": 1}) == '{\n  "a": 1\n}'


class TestRuntime:
    """Tests for create_runtime and the bound runtime."""

    def test_not_bound(self):
        bind_runtime(None)
        with pytest.raises(ConfigException, match="Server not initialized"):
            get_runtime()

    def test_create(self, runtime):
        assert runtime.user_id == "user-1"
        assert runtime.session_id in runtime.store
        assert "select_child" in runtime.registry

    def test_preselected_child(self, settings, mock_client):
        config = settings(VM_PRESELECTED_CHILD_ID="c9", VM_PRESELECTED_CHILD_NAME="Ava")

        rt = create_runtime(mock_client, config)

        assert rt.store.get_selected_child(rt.session_id) == ("c9", "Ava")

    def test_switching_from_config(self, settings, mock_client):
        rt = create_runtime(mock_client, settings(VM_ALLOW_CHILD_SWITCHING="false"))
        assert "select_child" not in rt.registry

    def test_switching_override(self, settings, mock_client):
        rt = create_runtime(mock_client, settings(), allow_child_switching=False)
        assert "select_child" not in rt.registry

    def test_expired_session_recreated(self, settings, mock_client):
        rt = create_runtime(mock_client, settings(VM_PRESELECTED_CHILD_ID="c9"))
        old_id = rt.session_id
        rt.store.get_session(old_id, touch=False).last_activity = datetime.now(UTC) - timedelta(hours=25)

        new_id = rt.active_session()

        assert new_id != old_id
        assert old_id not in rt.store
        assert rt.store.get_selected_child(new_id).child_id == "c9"

    def test_active_session_kept(self, runtime):
        assert runtime.active_session() == runtime.session_id


class TestProtocolHandlers:
    """Tests for list_tools / call_tool."""

    async def test_list_tools(self, runtime):
        tools = await list_tools()
        assert len(tools) == 18

    async def test_call_tool_text(self, runtime, mock_client):
        mock_client.get_children.return_value = []

        content = await call_tool("list_children", {})

        assert content[0].type == "text"
        assert json.loads(content[0].text)["totalCount"] == 0

    async def test_string_result_verbatim(self, runtime, mock_client, make_child):
        mock_client.get_children.return_value = [make_child("c1", "Emma Smith", "Emma")]

        content = await call_tool("select_child", {"childName": "Emma"})

        assert content[0].text.startswith("Selected child: Emma Smith (Emma).")

    async def test_validation_error(self, runtime):
        with pytest.raises(ToolCallError, match="^Error: Child name is required"):
            await call_tool("select_child", {})

    async def test_unknown_tool(self, runtime):
        with pytest.raises(ToolCallError, match="^Error: Tool not found: nope$"):
            await call_tool("nope", {})

    async def test_unexpected_error(self, runtime, mock_client):
        mock_client.get_children.side_effect = RuntimeError("boom")

        with pytest.raises(ToolCallError, match="^Error: boom$"):
            await call_tool("list_children", {})

    async def test_module_server_name(self):
        assert server.server.name == "askanything"
