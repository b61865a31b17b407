# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ask Anything MCP server package."""

from .registry import ToolDefinition, ToolOutcome, ToolRegistry
from .server import run
from .tools import ASK_ANYTHING_TOOLS, TOOL_HANDLERS, create_registry

__all__ = [
    "ASK_ANYTHING_TOOLS",
    "TOOL_HANDLERS",
    "ToolDefinition",
    "ToolOutcome",
    "ToolRegistry",
    "create_registry",
    "run",
]
