"""Global test fixtures for the Ask Anything test suite."""

from __future__ import annotations

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from askanything.core.config import clear_config_cache
from askanything.core.sessions import SessionStore
from askanything.mcp.handlers.context import ToolContext

# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all VM_ environment variables and reset the config singleton."""
    for key in list(os.environ.keys()):
        if key.startswith("VM_"):
            monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the settings under test
    monkeypatch.chdir(os.path.dirname(__file__))
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def env_with_token(clean_env, monkeypatch):
    """Set an API token."""
    monkeypatch.setenv("VM_API_TOKEN", "test-token")


# ============================================================================
# Session / Client Fixtures
# ============================================================================


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def session_id(store) -> str:
    return store.create_session("user-1")


@pytest.fixture
def session(store, session_id):
    return store.get_session(session_id)


@pytest.fixture
def selected_session(store, session_id):
    """A session with child c1 ("Emma Smith") selected."""
    store.set_selected_child(session_id, "c1", "Emma Smith")
    return store.get_session(session_id)


@pytest.fixture
def mock_client() -> MagicMock:
    """Data-service client whose every method is an AsyncMock returning None."""
    client = MagicMock()
    for name in (
        "get_children",
        "get_behavior_data",
        "get_date_range_metadata",
        "get_analysis_data",
        "get_journal_entry",
        "search_journals",
        "list_journal_entries",
        "get_behavior_goals",
        "get_medications",
        "get_village_members",
        "submit_product_feedback",
        "get_docs_mapping",
        "get_docs_file",
    ):
        setattr(client, name, AsyncMock(return_value=None))
    client.docs_raw_url = "https://docs.test.villagemetrics.com/raw"
    return client


@pytest.fixture
def ctx(store, mock_client) -> ToolContext:
    return ToolContext(store=store, client=mock_client)


# ============================================================================
# Helper Functions
# ============================================================================


def _make_child(child_id: str, full_name: str, preferred: str | None = None, **kwargs: Any) -> dict[str, Any]:
    """Build a child record as returned by ``get_children``."""
    return {
        "childId": child_id,
        "fullName": full_name,
        "preferredName": preferred,
        "nicknames": kwargs.pop("nicknames", []),
        "relationship": kwargs.pop("relationship", "parent"),
        **kwargs,
    }


@pytest.fixture
def make_child():
    return _make_child
