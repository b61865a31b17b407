# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Tool dispatch registry.

Binds tool definitions to the session store and gives every call the same
envelope::

    {"result": <handler result>, "timing": {"duration_ms": 12.3}}

Errors from single calls propagate unchanged after being logged.
:meth:`ToolRegistry.execute_batch` instead records each call as a
:class:`ToolOutcome`, so one failing call never aborts the others.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from mcp.types import Tool

from askanything.core.exceptions import ToolNotFoundError, ValidationException
from askanything.core.logging import correlation_context, tool_logger
from askanything.core.sessions import Session, SessionStore

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any], Session], Awaitable[Any]]

# Tools that change the selected child; withheld in embedded mode
CHILD_SWITCHING_TOOLS = frozenset({"select_child"})


class UpdateNotifier(Protocol):
    """Reports a short notice when a newer version is waiting to be used."""

    def pending_update_notice(self) -> str | None: ...


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described tool bound to its handler."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: Handler

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


@dataclass
class ToolOutcome:
    """Result of one call inside a batch."""

    name: str
    success: bool
    result: Any = None
    error: str | None = None
    error_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"name": self.name, "success": True, "result": self.result}
        return {"name": self.name, "success": False, "error": self.error, "errorType": self.error_type}


class ToolRegistry:
    """Registered tools plus the session store they run against."""

    def __init__(
        self,
        store: SessionStore,
        definitions: Iterable[ToolDefinition],
        *,
        allow_child_switching: bool = True,
        update_notifier: UpdateNotifier | None = None,
    ):
        self.store = store
        self.allow_child_switching = allow_child_switching
        self.update_notifier = update_notifier
        self._tools: dict[str, ToolDefinition] = {}

        for definition in definitions:
            if allow_child_switching is False and definition.name in CHILD_SWITCHING_TOOLS:
                logger.debug(f"Tool withheld (child switching disabled): {definition.name}")
                continue
            if definition.name in self._tools:
                raise ValueError(f"Duplicate tool name: {definition.name}")
            self._tools[definition.name] = definition

        logger.info(f"Tools registered: {len(self._tools)}")

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def list(self) -> list[dict[str, Any]]:
        """Public descriptors in registration order, without handlers."""
        return [definition.to_dict() for definition in self._tools.values()]

    def list_tools(self) -> list[Tool]:
        return [definition.to_tool() for definition in self._tools.values()]

    def _with_update_notice(self, result: Any) -> Any:
        if self.update_notifier is None:
            return result
        notice = self.update_notifier.pending_update_notice()
        if not notice:
            return result
        if isinstance(result, str):
            return f"{result}\n\n{notice}"
        if isinstance(result, dict):
            return {**result, "_updateNotice": notice}
        return result

    async def execute(self, name: str, args: Mapping[str, Any] | None, session_id: str) -> dict[str, Any]:
        """Run one tool for a session.

        Raises:
            ToolNotFoundError: If ``name`` is not registered.
            SessionNotFoundError: If the session is unknown.
            Exception: Whatever the handler raised, unchanged.
        """
        definition = self._tools.get(name)
        if definition is None:
            raise ToolNotFoundError(name)

        session = self.store.get_session(session_id)
        arguments = dict(args or {})

        with correlation_context():
            tool_logger.log_call(name, arguments, session_id=session_id)
            start = time.perf_counter()
            try:
                result = await definition.handler(arguments, session)
            except Exception as e:
                duration_ms = (time.perf_counter() - start) * 1000
                tool_logger.log_result(name, success=False, duration_ms=duration_ms, error=e)
                raise
            duration_ms = (time.perf_counter() - start) * 1000
            tool_logger.log_result(name, success=True, duration_ms=duration_ms)

        return {
            "result": self._with_update_notice(result),
            "timing": {"duration_ms": round(duration_ms, 2)},
        }

    async def execute_batch(self, calls: Iterable[Mapping[str, Any]], session_id: str) -> list[ToolOutcome]:
        """Run calls one after another; never raises.

        Each call is ``{"name": ..., "args": {...}}``; ``arguments`` is accepted
        in place of ``args``. A malformed call becomes a failed outcome.
        """
        outcomes = []
        for call in calls:
            name = call.get("name", "") if isinstance(call, Mapping) else ""
            try:
                if not isinstance(call, Mapping) or not isinstance(name, str):
                    raise ValidationException('Invalid batch call: expected {"name": ..., "args": {...}}')
                args = call["args"] if "args" in call else call.get("arguments")
                envelope = await self.execute(name, args, session_id)
            except Exception as e:
                outcomes.append(
                    ToolOutcome(
                        name=name,
                        success=False,
                        error=getattr(e, "message", None) or str(e),
                        error_type=type(e).__name__,
                    )
                )
            else:
                outcomes.append(ToolOutcome(name=name, success=True, result=envelope["result"]))
        return outcomes
