# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Child listing and selection tool handlers."""

from __future__ import annotations

import logging
from typing import Any

from askanything.core.exceptions import NotFoundError, ValidationException
from askanything.core.sessions import Session

from ._utils import require_string, service_errors
from .context import ToolContext

logger = logging.getLogger(__name__)

SWITCHING_DISABLED_MESSAGE = (
    "Child switching is not available in this mode. "
    "Use the child picker at the top of the app to change the selected child."
)


async def _children(ctx: ToolContext, session: Session, refresh: bool = False) -> list[dict[str, Any]]:
    """Children visible to the caller, cached on the session."""
    if not refresh and session.children_cache is not None:
        return session.children_cache
    with service_errors("list children"):
        children = await ctx.client.get_children(session.user_id)
    ctx.store.update_session(session.session_id, children_cache=children)
    return children


async def list_children(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    """List every child the caller can see and refresh the session cache."""
    children = await _children(ctx, session, refresh=True)

    if not children:
        return {
            "totalCount": 0,
            "children": [],
            "message": "You do not have access to any children.",
        }

    count = len(children)
    return {
        "totalCount": count,
        "parentCount": sum(1 for c in children if c.get("relationship") == "parent"),
        "caregiverCount": sum(1 for c in children if c.get("relationship") == "caregiver"),
        "children": [
            {
                "childId": c.get("childId"),
                "fullName": c.get("fullName"),
                "preferredName": c.get("preferredName"),
                "nicknames": c.get("nicknames") or [],
                "relationship": c.get("relationship"),
            }
            for c in children
        ],
        "message": f"You have access to {count} {'child' if count == 1 else 'children'}. "
        "Use select_child with any name to continue.",
    }


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def match_child(children: list[dict[str, Any]], name: str) -> dict[str, Any] | None:
    """Find a child by name, case-insensitively.

    Exact matches on full name, preferred name or a nickname win over
    substring matches on full or preferred name.
    """
    wanted = name.strip().lower()

    for child in children:
        names = [_lower(child.get("fullName")), _lower(child.get("preferredName"))]
        names.extend(_lower(n) for n in child.get("nicknames") or [])
        if wanted in names:
            return child

    for child in children:
        if wanted in _lower(child.get("fullName")) or wanted in _lower(child.get("preferredName")):
            return child
    return None


async def select_child(ctx: ToolContext, args: dict[str, Any], session: Session) -> str:
    """Set the child every child-scoped tool operates on."""
    if not ctx.allow_child_switching:
        raise ValidationException(SWITCHING_DISABLED_MESSAGE)

    child_name = require_string(args, "childName", "Child name is required")
    children = await _children(ctx, session)

    child = match_child(children, child_name)
    if child is None:
        available = ", ".join(c.get("preferredName") or c.get("fullName") or "?" for c in children)
        raise NotFoundError(
            "Child",
            child_name,
            message=f'Child "{child_name}" not found. Available children: {available}',
        )

    ctx.store.set_selected_child(session.session_id, child["childId"], child.get("fullName"))
    logger.info(f"Child selected: {child['childId']}")

    return (
        f"Selected child: {child.get('fullName')} ({child.get('preferredName')}). "
        "You can now ask questions about this child's behavior, journal entries, medications, and more."
    )
