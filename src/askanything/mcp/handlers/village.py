# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Village (caregiver roster) tool handler."""

from __future__ import annotations

import logging
from typing import Any

from askanything.core.exceptions import ValidationException
from askanything.core.sessions import Session
from askanything.transformers import transform_village_members

from ._utils import service_errors
from .context import ToolContext

logger = logging.getLogger(__name__)


async def list_village_members(ctx: ToolContext, args: dict[str, Any], session: Session) -> dict[str, Any]:
    include_details = args.get("includeInvitationDetails", True)
    if not isinstance(include_details, bool):
        raise ValidationException(
            "includeInvitationDetails must be a boolean", field="includeInvitationDetails", value=include_details
        )

    child = ctx.selected_child(session)
    with service_errors("list village members"):
        raw = await ctx.client.get_village_members(child.child_id, include_invitation_details=include_details)

    return transform_village_members(raw, child.child_name, include_details)
