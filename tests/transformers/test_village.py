"""Tests for askanything.transformers.village."""

from __future__ import annotations

from askanything.transformers.village import sort_roster, transform_village_members


def member(name: str, status: str, count: int, **kwargs) -> dict:
    return {"name": name, "inviteStatus": status, "journalEntryCount": count, **kwargs}


class TestSortRoster:
    def test_status_then_entry_count(self):
        roster = [
            {"status": "expired", "journalEntryCount": 10},
            {"status": "pending", "journalEntryCount": 0},
            {"status": "accepted", "journalEntryCount": 5},
            {"status": "accepted", "journalEntryCount": 50},
            {"status": "pending", "journalEntryCount": 2},
        ]

        ordered = [(m["status"], m["journalEntryCount"]) for m in sort_roster(roster)]

        assert ordered == [
            ("accepted", 50),
            ("accepted", 5),
            ("pending", 2),
            ("pending", 0),
            ("expired", 10),
        ]


class TestTransformVillageMembers:
    """Tests for transform_village_members."""

    def test_empty(self):
        result = transform_village_members(None, "Emma")

        assert result["totalMembers"] == 0
        assert result["members"] == []
        assert result["message"] == (
            "Found 0 village members for Emma. 0 accepted, 0 pending invitations, 0 expired invitations."
        )

    def test_roster(self):
        raw = {
            "members": [
                member("Grandma", "pending", 0),
                member(
                    "Dad",
                    "accepted",
                    12,
                    role="Parent",
                    invitationDetails={"sentDate": "2026-01-01", "acceptedDate": "2026-01-02"},
                ),
                member("Sitter", "expired", 1),
            ]
        }

        result = transform_village_members(raw, "Emma")

        assert [m["name"] for m in result["members"]] == ["Dad", "Grandma", "Sitter"]
        assert result["statusSummary"] == {"accepted": 1, "pending": 1, "expired": 1}
        assert result["members"][0]["role"] == "Parent"
        assert result["members"][0]["invitationDetails"]["isExpired"] is False
        assert result["members"][1]["role"] == "Caregiver"

    def test_without_invitation_details(self):
        raw = {"members": [member("Dad", "accepted", 12, invitationDetails={"sentDate": "2026-01-01"})]}

        result = transform_village_members(raw, "Emma", include_invitation_details=False)

        assert "invitationDetails" not in result["members"][0]

    def test_defaults(self):
        result = transform_village_members({"members": [{"fullName": "Pat"}]}, "Emma")

        assert result["members"][0]["name"] == "Pat"
        assert result["members"][0]["status"] == "active"
        assert result["members"][0]["journalEntryCount"] == 0
