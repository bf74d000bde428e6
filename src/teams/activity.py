"""Bounded, append-only team activity log."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from src.db.models.team import ActivityAction, TeamActivityORM, TeamORM
from src.teams.models import MAX_ACTIVITY_ENTRIES

logger = logging.getLogger(__name__)


def append_activity(
    team: TeamORM,
    action: ActivityAction,
    user_id: UUID,
    data: Optional[dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> TeamActivityORM:
    """Append an entry to the team's activity log.

    This is the only write path for ``team.activity``. After the append the
    log is trimmed from the front so that at most ``MAX_ACTIVITY_ENTRIES``
    remain, in insertion order. Evicted rows are deleted on flush through the
    ``delete-orphan`` cascade.

    Args:
        team: Team aggregate to record against.
        action: Kind of activity.
        user_id: Identity the entry is attributed to.
        data: JSON-serialisable details for display.
        now: Entry timestamp (defaults to the current UTC time).

    Returns:
        The appended entry.
    """
    entry = TeamActivityORM(
        id=uuid4(),
        action=action,
        user_id=user_id,
        timestamp=now or datetime.now(timezone.utc),
        data=dict(data or {}),
    )
    team.activity.append(entry)

    overflow = len(team.activity) - MAX_ACTIVITY_ENTRIES
    if overflow > 0:
        del team.activity[:overflow]
        logger.debug(f"activity_evicted: team_id={team.id}, evicted={overflow}")

    return entry
