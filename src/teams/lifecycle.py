"""Team creation, detail/settings updates, and project back-references."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import ValidationError

from src.db.models.team import ActivityAction, TeamORM, TeamRole
from src.teams.activity import append_activity
from src.teams.errors import ConflictError, NotFoundError, TeamValidationError
from src.teams.membership import admit_member, require_admin
from src.teams.models import TeamSettings

logger = logging.getLogger(__name__)


def new_team(
    owner_id: UUID,
    name: str,
    description: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TeamORM:
    """Build a team owned by ``owner_id``.

    The owner is inserted as the sole ``admin`` member, default settings are
    applied, and ``team_created`` is logged.

    Raises:
        TeamValidationError: If ``name`` is blank.
    """
    now = now or datetime.now(timezone.utc)
    name = (name or "").strip()
    if not name:
        raise TeamValidationError("Team name is required")

    team = TeamORM(
        id=uuid4(),
        name=name,
        description=description.strip() if description else description,
        owner_id=owner_id,
        settings=TeamSettings().model_dump(),
        project_ids=[],
    )
    admit_member(team, owner_id, TeamRole.ADMIN, now)
    append_activity(team, ActivityAction.TEAM_CREATED, owner_id, {"team_name": name}, now)
    return team


def merge_settings(current: dict[str, Any], changes: dict[str, Any]) -> tuple[dict, list[str]]:
    """Overlay the known keys of ``changes`` onto ``current`` settings.

    Keys absent from ``changes`` keep their value; unknown keys are ignored.

    Returns:
        Tuple of (merged settings dict, list of keys that were applied).

    Raises:
        TeamValidationError: If an applied value has the wrong type.
    """
    known = set(TeamSettings.model_fields)
    applied = [key for key in changes if key in known]
    try:
        merged = TeamSettings.model_validate(
            {**(current or {}), **{key: changes[key] for key in applied}}
        )
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise TeamValidationError("Invalid team settings", details={"errors": errors}) from e
    return merged.model_dump(), applied


def update_team(
    team: TeamORM,
    actor_id: UUID,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
) -> list[str]:
    """Apply a partial update of name, description, and settings (admin only).

    ``changes`` holds only the keys the caller sent. A blank name is ignored;
    a present ``description`` (even empty) replaces the current one.

    Returns:
        The top-level keys present in ``changes``, as logged in activity.
    """
    require_admin(team, actor_id, "Only admins can update team details")

    name = (changes.get("name") or "").strip()
    if name:
        team.name = name
    if "description" in changes:
        team.description = changes["description"]
    if changes.get("settings") is not None:
        team.settings, _ = merge_settings(team.settings, changes["settings"])

    updated_fields = list(changes.keys())
    append_activity(
        team,
        ActivityAction.TEAM_UPDATED,
        actor_id,
        {"team_name": team.name, "updated_fields": updated_fields},
        now,
    )
    logger.info(f"team_updated: team_id={team.id}, updated_fields={updated_fields}")
    return updated_fields


def update_settings(
    team: TeamORM,
    actor_id: UUID,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Partially update team settings (admin only).

    Returns:
        The full settings after the update.
    """
    require_admin(team, actor_id, "Only admins can update team settings")

    team.settings, applied = merge_settings(team.settings, changes)
    append_activity(
        team,
        ActivityAction.TEAM_UPDATED,
        actor_id,
        {"team_name": team.name, "updated_settings": applied},
        now,
    )
    logger.info(f"team_settings_updated: team_id={team.id}, updated_settings={applied}")
    return team.settings


def link_project(
    team: TeamORM,
    actor_id: UUID,
    project_id: UUID,
    project_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """Record a back-reference to a project owned by this team (admin only).

    Raises:
        ConflictError: If the project is already linked.
    """
    require_admin(team, actor_id, "Only admins can manage team projects")

    if project_id in (team.project_ids or []):
        raise ConflictError("Project is already linked to this team")

    team.project_ids = [*(team.project_ids or []), project_id]
    append_activity(
        team,
        ActivityAction.PROJECT_ADDED,
        actor_id,
        {"project_id": str(project_id), "project_name": project_name},
        now,
    )


def unlink_project(
    team: TeamORM,
    actor_id: UUID,
    project_id: UUID,
    now: Optional[datetime] = None,
) -> None:
    """Drop a project back-reference (admin only).

    Raises:
        NotFoundError: If the project is not linked.
    """
    require_admin(team, actor_id, "Only admins can manage team projects")

    if project_id not in (team.project_ids or []):
        raise NotFoundError("Project not found in this team")

    team.project_ids = [pid for pid in team.project_ids if pid != project_id]
    append_activity(
        team,
        ActivityAction.PROJECT_REMOVED,
        actor_id,
        {"project_id": str(project_id)},
        now,
    )
