# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ask Anything MCP server.

Serves the Ask Anything tools over stdio for a single caller. The caller id
is read from the API token; one session is created at startup and reused for
every tool call.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import jwt
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from askanything.core.client import VillageMetricsClient
from askanything.core.config import CoreSettings, get_config
from askanything.core.exceptions import AskAnythingException, ConfigException
from askanything.core.logging import configure_logging
from askanything.core.sessions import SessionStore

from .registry import ToolRegistry
from .tools import create_registry

logger = logging.getLogger(__name__)

server = Server("askanything")


class ToolCallError(Exception):
    """Raised from ``call_tool``; the MCP layer reports it as an error result."""


@dataclass
class ServerRuntime:
    """The registry and the single session a stdio server works with."""

    registry: ToolRegistry
    user_id: str
    session_id: str
    session_max_age_hours: float = 24.0
    preselected_child_id: str | None = None
    preselected_child_name: str | None = None

    @property
    def store(self) -> SessionStore:
        return self.registry.store

    def active_session(self) -> str:
        """Sweep idle sessions and return the caller's session id, recreating it if it expired."""
        self.store.sweep_expired(self.session_max_age_hours)
        if self.session_id not in self.store:
            logger.info("Session expired, starting a new one")
            self.session_id = start_session(
                self.store, self.user_id, self.preselected_child_id, self.preselected_child_name
            )
        return self.session_id


_runtime: ServerRuntime | None = None


def bind_runtime(runtime: ServerRuntime | None) -> None:
    global _runtime
    _runtime = runtime


def get_runtime() -> ServerRuntime:
    if _runtime is None:
        raise ConfigException("Server not initialized")
    return _runtime


# ============================================================================
# Bootstrap
# ============================================================================


def read_user_id(token: str | None) -> str:
    """Caller id from the ``sub`` or ``userId`` claim of the API token.

    The signature is not verified; the API does that on every request.
    """
    if not token:
        raise ConfigException("VM_API_TOKEN is required", missing_vars=["VM_API_TOKEN"])
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        raise ConfigException(f"VM_API_TOKEN is not a valid JWT: {e}") from e

    user_id = claims.get("sub") or claims.get("userId")
    if not user_id:
        raise ConfigException("VM_API_TOKEN has no sub or userId claim")
    return str(user_id)


def start_session(
    store: SessionStore,
    user_id: str,
    preselected_child_id: str | None = None,
    preselected_child_name: str | None = None,
) -> str:
    session_id = store.create_session(user_id)
    if preselected_child_id:
        store.set_selected_child(session_id, preselected_child_id, preselected_child_name)
        logger.info(f"Child preselected: {preselected_child_id}")
    return session_id


def create_runtime(
    client: Any,
    config: CoreSettings,
    *,
    allow_child_switching: bool | None = None,
) -> ServerRuntime:
    """Build the registry and caller session for ``client``."""
    if allow_child_switching is None:
        allow_child_switching = config.allow_child_switching

    user_id = read_user_id(config.api_token)
    store = SessionStore()
    session_id = start_session(store, user_id, config.preselected_child_id, config.preselected_child_name)
    registry = create_registry(store, client, allow_child_switching=allow_child_switching)

    logger.info(f"Ask Anything ready: {len(registry)} tools, child switching {'on' if allow_child_switching else 'off'}")
    return ServerRuntime(
        registry=registry,
        user_id=user_id,
        session_id=session_id,
        session_max_age_hours=config.session_max_age_hours,
        preselected_child_id=config.preselected_child_id,
        preselected_child_name=config.preselected_child_name,
    )


# ============================================================================
# MCP Server Protocol Implementation
# ============================================================================


def render_result(result: Any) -> str:
    """Strings pass through verbatim; everything else becomes indented JSON."""
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List the tools registered for this server."""
    return get_runtime().registry.list_tools()


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Route a tool call through the registry."""
    runtime = get_runtime()
    try:
        envelope = await runtime.registry.execute(name, arguments, runtime.active_session())
    except AskAnythingException as e:
        logger.warning(f"Tool {name} failed: {e.message}")
        raise ToolCallError(f"Error: {e.message}") from e
    except Exception as e:
        logger.exception(f"Unexpected error in tool {name}")
        raise ToolCallError(f"Error: {e}") from e

    return [TextContent(type="text", text=render_result(envelope["result"]))]


# ============================================================================
# Server Entry Point
# ============================================================================


async def serve(allow_child_switching: bool | None = None) -> None:
    config = get_config()
    async with VillageMetricsClient(settings=config) as client:
        bind_runtime(create_runtime(client, config, allow_child_switching=allow_child_switching))
        try:
            async with stdio_server() as (read_stream, write_stream):
                await server.run(read_stream, write_stream, server.create_initialization_options())
        finally:
            bind_runtime(None)


def run() -> None:
    """Run the Ask Anything MCP server over stdio."""
    parser = argparse.ArgumentParser(description="Ask Anything MCP Server")
    parser.add_argument(
        "--no-child-switching",
        action="store_true",
        help="Withhold select_child; the child comes from VM_PRESELECTED_CHILD_ID",
    )
    parser.add_argument("--log-level", default=None, help="Override VM_LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(level=args.log_level)
    logger.info("Ask Anything MCP server starting...")

    asyncio.run(serve(allow_child_switching=False if args.no_child_switching else None))


if __name__ == "__main__":
    run()
