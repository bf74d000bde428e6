"""Unit tests for the bounded activity log."""

from datetime import datetime, timedelta

import pytest

from src.db.models.team import ActivityAction, TeamORM
from src.db.models.user import UserORM
from src.teams.activity import append_activity
from src.teams.models import MAX_ACTIVITY_ENTRIES


@pytest.mark.unit
class TestAppendActivity:
    """append_activity keeps insertion order and evicts oldest entries."""

    def test_created_team_has_team_created_entry(self, team: TeamORM, owner: UserORM) -> None:
        assert len(team.activity) == 1
        entry = team.activity[0]
        assert entry.action == ActivityAction.TEAM_CREATED
        assert entry.user_id == owner.id
        assert entry.data == {"team_name": "Platform"}

    def test_append_preserves_order(self, team: TeamORM, owner: UserORM, now: datetime) -> None:
        first = append_activity(team, ActivityAction.TEAM_UPDATED, owner.id, {"n": 1}, now)
        second = append_activity(
            team, ActivityAction.TEAM_UPDATED, owner.id, {"n": 2}, now + timedelta(seconds=1)
        )

        assert team.activity[-2:] == [first, second]
        assert [e.position for e in team.activity] == list(range(len(team.activity)))

    def test_data_is_copied(self, team: TeamORM, owner: UserORM) -> None:
        data = {"team_name": "Platform"}
        entry = append_activity(team, ActivityAction.TEAM_UPDATED, owner.id, data)
        data["team_name"] = "Changed"
        assert entry.data == {"team_name": "Platform"}

    def test_cap_evicts_oldest(self, team: TeamORM, owner: UserORM, now: datetime) -> None:
        """After the 101st entry only the newest 100 remain."""
        team.activity.clear()
        for i in range(MAX_ACTIVITY_ENTRIES):
            append_activity(
                team, ActivityAction.TEAM_UPDATED, owner.id, {"n": i}, now + timedelta(seconds=i)
            )
        assert len(team.activity) == MAX_ACTIVITY_ENTRIES

        newest = append_activity(
            team, ActivityAction.MEMBER_ADDED, owner.id, {"n": MAX_ACTIVITY_ENTRIES}
        )

        assert len(team.activity) == MAX_ACTIVITY_ENTRIES
        assert team.activity[0].data == {"n": 1}
        assert team.activity[-1] is newest
        assert [e.data["n"] for e in team.activity] == list(range(1, MAX_ACTIVITY_ENTRIES + 1))

    def test_cap_applies_to_created_team(self, team: TeamORM, owner: UserORM) -> None:
        for _ in range(MAX_ACTIVITY_ENTRIES + 5):
            append_activity(team, ActivityAction.TEAM_UPDATED, owner.id)
        assert len(team.activity) == MAX_ACTIVITY_ENTRIES
        assert all(e.action == ActivityAction.TEAM_UPDATED for e in team.activity)
