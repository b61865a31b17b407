# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""The dependencies every handler is bound to."""

from __future__ import annotations

from dataclasses import dataclass, field

from askanything.core.client import DataServiceProtocol
from askanything.core.sessions import SelectedChild, Session, SessionStore

from .help import DocsMappingCache


@dataclass
class ToolContext:
    """Session store, data-service client and per-server handler state."""

    store: SessionStore
    client: DataServiceProtocol
    allow_child_switching: bool = True
    docs_cache: DocsMappingCache = field(default_factory=DocsMappingCache)

    def selected_child(self, session: Session) -> SelectedChild:
        """Raises NoChildSelectedError when no child was selected yet."""
        return self.store.get_selected_child(session.session_id)
