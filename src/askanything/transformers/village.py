# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Caregiver roster ("village") reshaping."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

logger = logging.getLogger(__name__)

# Lower rank sorts first; any other status ranks last
STATUS_RANK = {"accepted": 0, "pending": 1}


def _member(raw: dict[str, Any], include_invitation_details: bool) -> dict[str, Any]:
    member: dict[str, Any] = {
        "name": raw.get("name") or raw.get("fullName") or "Unknown",
        "role": raw.get("role") or raw.get("caregiverType") or "Caregiver",
        "status": raw.get("inviteStatus") or "active",
        "journalEntryCount": raw.get("journalEntryCount") or 0,
        "joinedDate": raw.get("joinedDate") or raw.get("createdAt"),
    }

    invitation = raw.get("invitationDetails")
    if include_invitation_details and invitation:
        member["invitationDetails"] = {
            "sentDate": invitation.get("sentDate"),
            "expirationDate": invitation.get("expirationDate"),
            "acceptedDate": invitation.get("acceptedDate"),
            "isExpired": invitation.get("isExpired") or False,
        }

    activity = raw.get("activitySummary")
    if activity:
        member["activitySummary"] = {
            "lastActiveDate": activity.get("lastActiveDate"),
            "daysSinceLastActivity": activity.get("daysSinceLastActivity"),
            "totalDaysActive": activity.get("totalDaysActive"),
        }
    return member


def sort_roster(members: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Accepted, then pending, then the rest; most journal entries first within each."""
    return sorted(
        members,
        key=lambda m: (STATUS_RANK.get(m.get("status"), len(STATUS_RANK)), -(m.get("journalEntryCount") or 0)),
    )


def _summary_message(total: int, counts: Counter, child_name: str | None) -> str:
    return (
        f"Found {total} village members for {child_name}. "
        f"{counts['accepted']} accepted, {counts['pending']} pending invitations, "
        f"{counts['expired']} expired invitations."
    )


def transform_village_members(
    raw: dict[str, Any] | None,
    child_name: str | None,
    include_invitation_details: bool = True,
) -> dict[str, Any]:
    raw_members = (raw or {}).get("members") or []
    if not raw_members:
        return {
            "childName": child_name,
            "totalMembers": 0,
            "statusSummary": {"accepted": 0, "pending": 0, "expired": 0},
            "members": [],
            "message": _summary_message(0, Counter(), child_name),
        }

    members = sort_roster([_member(m, include_invitation_details) for m in raw_members])
    counts = Counter(m["status"] for m in members)
    logger.debug(f"Village roster: {len(members)} members {dict(counts)}")

    return {
        "childName": child_name,
        "totalMembers": len(members),
        "statusSummary": dict(counts),
        "members": members,
        "message": _summary_message(len(members), counts, child_name),
    }
