# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""In-memory session store.

A session is one caller conversation. It remembers which child is selected
and caches the list of children the caller can see. State lives only in
process memory; nothing survives a restart.

Sliding expiration is explicit: reads that should keep a session alive call
:meth:`SessionStore.touch` (``get_session`` does so unless ``touch=False``),
and :meth:`SessionStore.sweep_expired` evicts idle sessions when a caller
decides to run it.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime, timedelta
from typing import Any, NamedTuple

from .exceptions import NoChildSelectedError, SessionNotFoundError, ValidationException

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_HOURS = 24


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class Session:
    """State for one caller conversation.

    Attributes:
        session_id: Opaque, unique identifier. Never changes.
        user_id: Caller that owns the session.
        selected_child_id: Child the child-scoped tools operate on.
        selected_child_name: Display name of the selected child. Only set
            together with ``selected_child_id``.
        children_cache: Children returned by the last ``list_children`` call.
        created_at: Creation time (UTC).
        last_activity: Last time the session was used (UTC).
    """

    session_id: str
    user_id: str
    selected_child_id: str | None = None
    selected_child_name: str | None = None
    children_cache: list[dict[str, Any]] | None = None
    created_at: datetime = field(default_factory=_utcnow)
    last_activity: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "selected_child_id": self.selected_child_id,
            "selected_child_name": self.selected_child_name,
            "children_cached": len(self.children_cache) if self.children_cache is not None else None,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }


class SelectedChild(NamedTuple):
    child_id: str
    child_name: str | None


# Fields callers may change through update_session
_MUTABLE_FIELDS = frozenset(
    f.name for f in fields(Session) if f.name not in ("session_id", "user_id", "created_at", "last_activity")
)


class SessionStore:
    """Owns every live session, keyed by session id.

    No locking: callers must serialize mutations of one session themselves
    if they allow concurrent entry.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create_session(self, user_id: str) -> str:
        """Create a session for ``user_id`` and return its id."""
        session_id = f"session_{uuid.uuid4().hex}"
        self._sessions[session_id] = Session(session_id=session_id, user_id=user_id)
        logger.info(f"Session created: {session_id} (user {user_id})")
        return session_id

    def _lookup(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def touch(self, session_id: str) -> Session:
        """Refresh ``last_activity`` so the session survives the next sweep."""
        session = self._lookup(session_id)
        session.last_activity = _utcnow()
        return session

    def get_session(self, session_id: str, touch: bool = True) -> Session:
        """Return the session, refreshing its activity time unless ``touch`` is False.

        Raises:
            SessionNotFoundError: If the id is unknown.
        """
        if touch:
            return self.touch(session_id)
        return self._lookup(session_id)

    def update_session(self, session_id: str, **updates: Any) -> Session:
        """Merge ``updates`` into the session and refresh its activity time.

        Raises:
            SessionNotFoundError: If the id is unknown.
            ValidationException: If a field cannot be updated.
        """
        unknown = set(updates) - _MUTABLE_FIELDS
        if unknown:
            raise ValidationException(f"Cannot update session fields: {', '.join(sorted(unknown))}", field="updates")

        session = self._lookup(session_id)
        for name, value in updates.items():
            setattr(session, name, value)
        if session.selected_child_id is None:
            session.selected_child_name = None
        session.last_activity = _utcnow()

        logger.debug(f"Session updated: {session_id} {self._safe_updates(updates)}")
        return session

    @staticmethod
    def _safe_updates(updates: dict[str, Any]) -> dict[str, Any]:
        safe = dict(updates)
        if safe.get("selected_child_name"):
            safe["selected_child_name"] = "[CHILD_NAME_REDACTED]"
        if safe.get("children_cache") is not None:
            safe["children_cache"] = f"[{len(safe['children_cache'])} children cached]"
        return safe

    def set_selected_child(self, session_id: str, child_id: str, child_name: str | None) -> Session:
        return self.update_session(session_id, selected_child_id=child_id, selected_child_name=child_name)

    def get_selected_child(self, session_id: str) -> SelectedChild:
        """Return the selected child of a session.

        Raises:
            SessionNotFoundError: If the id is unknown.
            NoChildSelectedError: If no child was selected yet.
        """
        session = self.get_session(session_id)
        if not session.selected_child_id:
            raise NoChildSelectedError()
        return SelectedChild(session.selected_child_id, session.selected_child_name)

    def remove_session(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info(f"Session removed: {session_id}")

    def sweep_expired(self, max_age_hours: float = DEFAULT_MAX_AGE_HOURS) -> None:
        """Evict every session idle for longer than ``max_age_hours``."""
        cutoff = _utcnow() - timedelta(hours=max_age_hours)
        expired = [sid for sid, s in self._sessions.items() if s.last_activity < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
            logger.info(f"Session expired: {session_id}")
