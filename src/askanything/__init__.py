# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ask Anything - Village Metrics behavior data for LLM agents over MCP.

Exposes a child's behavior scores, journal entries and precomputed analyses
as schema-described tools. Tool output is condensed for LLM consumption.
"""

__version__ = "1.0.0"
