"""Unit tests for team creation, updates, settings, and project links."""

from datetime import datetime
from uuid import uuid4

import pytest

from src.db.models.team import ActivityAction, TeamORM, TeamRole
from src.db.models.user import UserORM
from src.teams.errors import ConflictError, ForbiddenError, NotFoundError, TeamValidationError
from src.teams.lifecycle import (
    link_project,
    merge_settings,
    new_team,
    unlink_project,
    update_settings,
    update_team,
)
from src.teams.membership import find_member
from src.teams.models import TeamSettings


@pytest.mark.unit
class TestNewTeam:
    """new_team builds a team with the owner as sole admin."""

    def test_defaults(self, owner: UserORM, now: datetime) -> None:
        team = new_team(owner.id, "  Platform  ", "Backend crew", now=now)

        assert team.name == "Platform"
        assert team.owner_id == owner.id
        assert team.project_ids == []
        assert team.settings == TeamSettings().model_dump()
        assert team.settings["default_statuses"] == ["To Do", "In Progress", "Review", "Done"]
        assert team.settings["notifications_enabled"] is True
        assert len(team.members) == 1
        assert find_member(team, owner.id).role == TeamRole.ADMIN
        assert find_member(team, owner.id).joined_at == now

    def test_blank_name_rejected(self, owner: UserORM) -> None:
        with pytest.raises(TeamValidationError, match="Team name is required"):
            new_team(owner.id, "   ")


@pytest.mark.unit
class TestMergeSettings:
    """merge_settings overlays known keys only."""

    def test_partial_merge(self) -> None:
        current = TeamSettings().model_dump()
        merged, applied = merge_settings(current, {"member_approval": True, "bogus": 1})

        assert applied == ["member_approval"]
        assert merged["member_approval"] is True
        assert merged["default_issue_priorities"] == ["Low", "Medium", "High", "Critical"]
        assert "bogus" not in merged

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(TeamValidationError) as exc_info:
            merge_settings({}, {"default_issue_labels": "not-a-list"})
        assert exc_info.value.details["errors"]

    def test_missing_current_keys_get_defaults(self) -> None:
        merged, _ = merge_settings({}, {"team_avatar": "a.png"})
        assert merged["team_avatar"] == "a.png"
        assert merged["allow_public_projects"] is False


@pytest.mark.unit
class TestUpdateTeam:
    """update_team applies partial changes and logs updated_fields."""

    def test_admin_updates_fields(
        self, staffed_team: TeamORM, admin_user: UserORM, now: datetime
    ) -> None:
        fields = update_team(
            staffed_team,
            admin_user.id,
            {"name": "Core", "description": "", "settings": {"allow_public_projects": True}},
            now=now,
        )

        assert fields == ["name", "description", "settings"]
        assert staffed_team.name == "Core"
        assert staffed_team.description == ""
        assert staffed_team.settings["allow_public_projects"] is True
        entry = staffed_team.activity[-1]
        assert entry.action == ActivityAction.TEAM_UPDATED
        assert entry.data == {"team_name": "Core", "updated_fields": fields}

    def test_blank_name_is_ignored(self, team: TeamORM, owner: UserORM) -> None:
        update_team(team, owner.id, {"name": ""})
        assert team.name == "Platform"

    def test_whitespace_name_is_ignored(self, team: TeamORM, owner: UserORM) -> None:
        update_team(team, owner.id, {"name": "   "})
        assert team.name == "Platform"

    def test_name_is_stripped(self, team: TeamORM, owner: UserORM) -> None:
        update_team(team, owner.id, {"name": "  Core  "})
        assert team.name == "Core"

    def test_developer_cannot_update(self, staffed_team: TeamORM, developer: UserORM) -> None:
        with pytest.raises(ForbiddenError, match="Only admins can update team details"):
            update_team(staffed_team, developer.id, {"name": "Hijacked"})
        assert staffed_team.name == "Platform"


@pytest.mark.unit
class TestUpdateSettings:
    """update_settings merges and records updated_settings."""

    def test_admin_updates_settings(self, team: TeamORM, owner: UserORM) -> None:
        settings = update_settings(
            team, owner.id, {"notifications_enabled": False, "default_issue_labels": ["bug"]}
        )

        assert settings["notifications_enabled"] is False
        assert settings["default_issue_labels"] == ["bug"]
        assert team.activity[-1].data["updated_settings"] == [
            "notifications_enabled",
            "default_issue_labels",
        ]

    def test_developer_cannot_update_settings(
        self, staffed_team: TeamORM, developer: UserORM
    ) -> None:
        with pytest.raises(ForbiddenError, match="Only admins can update team settings"):
            update_settings(staffed_team, developer.id, {"member_approval": True})


@pytest.mark.unit
class TestProjectLinks:
    """link_project / unlink_project maintain back-references."""

    def test_link_and_unlink(self, team: TeamORM, owner: UserORM) -> None:
        project_id = uuid4()

        link_project(team, owner.id, project_id, "Tracker")
        assert team.project_ids == [project_id]
        assert team.activity[-1].action == ActivityAction.PROJECT_ADDED
        assert team.activity[-1].data == {"project_id": str(project_id), "project_name": "Tracker"}

        unlink_project(team, owner.id, project_id)
        assert team.project_ids == []
        assert team.activity[-1].action == ActivityAction.PROJECT_REMOVED

    def test_duplicate_link_conflicts(self, team: TeamORM, owner: UserORM) -> None:
        project_id = uuid4()
        link_project(team, owner.id, project_id)
        with pytest.raises(ConflictError):
            link_project(team, owner.id, project_id)

    def test_unlink_unknown_is_not_found(self, team: TeamORM, owner: UserORM) -> None:
        with pytest.raises(NotFoundError):
            unlink_project(team, owner.id, uuid4())

    def test_developer_cannot_link(self, staffed_team: TeamORM, developer: UserORM) -> None:
        with pytest.raises(ForbiddenError):
            link_project(staffed_team, developer.id, uuid4())
