"""Activity service — records what a signed-in user is doing in the dashboard."""

import logging

from domain.model.activity import Activity
from port.activity_repository import ActivityRepository
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)


def track_activity(
    user_repo: UserRepository,
    activity_repo: ActivityRepository,
    user_id: str,
    ip: str,
    device: str,
    type: str | None = None,
    page_route: str | None = None,
    duration_ms: int | None = None,
) -> Activity | None:
    """Refresh the user's last-seen fields and, if there is something to log, store an Activity.

    Returns the stored Activity, or None when only the user fields were touched.
    """
    user_repo.touch_activity(user_id, ip=ip, device=device)

    if not (type or page_route):
        return None

    activity = Activity.create(user_id=user_id, type=type, page_route=page_route, duration_ms=duration_ms)
    if not activity_repo.save(activity):
        logger.warning("Activity not stored", extra={"userId": user_id, "type": activity.type})
        return None
    return activity
