"""Tests for askanything.mcp.tools - the static tool manifest."""

from __future__ import annotations

from askanything.mcp.tools import ASK_ANYTHING_TOOLS, TOOL_HANDLERS, create_registry


class TestManifest:
    def test_every_tool_has_a_handler(self):
        names = [tool.name for tool in ASK_ANYTHING_TOOLS]

        assert len(names) == len(set(names)) == 18
        assert set(names) == set(TOOL_HANDLERS)

    def test_schemas_are_objects(self):
        for tool in ASK_ANYTHING_TOOLS:
            assert tool.inputSchema["type"] == "object"
            for required in tool.inputSchema.get("required", []):
                assert required in tool.inputSchema["properties"]

    def test_analysis_time_ranges(self):
        schema = next(t for t in ASK_ANYTHING_TOOLS if t.name == "get_overview_analysis").inputSchema
        assert schema["properties"]["timeRange"]["enum"] == [
            "last_7_days",
            "last_30_days",
            "last_90_days",
            "last_180_days",
            "last_365_days",
        ]


class TestCreateRegistry:
    """Registry built from the manifest."""

    def test_switching_enabled(self, store, mock_client):
        registry = create_registry(store, mock_client, allow_child_switching=True)

        assert len(registry) == 18
        assert "select_child" in registry

    def test_switching_disabled(self, store, mock_client):
        registry = create_registry(store, mock_client, allow_child_switching=False)

        assert len(registry) == 17
        assert "select_child" not in registry
        assert "list_children" in registry

    async def test_handlers_bound_to_client(self, store, session_id, mock_client, make_child):
        mock_client.get_children.return_value = [make_child("c1", "Emma Smith", "Emma")]
        registry = create_registry(store, mock_client)

        envelope = await registry.execute("list_children", {}, session_id)

        assert envelope["result"]["totalCount"] == 1
        mock_client.get_children.assert_awaited_once_with("user-1")
