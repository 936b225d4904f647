"""Activity domain models (page views, logins reported by the dashboard client)."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class Activity:
    """A single tracked user action."""
    id: str
    user_id: str
    type: str
    page_route: str
    duration_ms: int
    description: str
    timestamp: datetime

    @staticmethod
    def create(
        user_id: str,
        type: str | None = None,
        page_route: str | None = None,
        duration_ms: int | None = None,
    ) -> 'Activity':
        """Factory method — fills the same defaults the dashboard client expects."""
        activity_type = type or 'PAGE_VIEW'
        if activity_type == 'LOGIN':
            description = 'User logged in'
        else:
            description = f"Visited {page_route or 'unknown page'}"
        return Activity(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=activity_type,
            page_route=page_route or 'N/A',
            duration_ms=duration_ms or 0,
            description=description,
            timestamp=datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class PageMetric:
    """Aggregated time spent on one page route."""
    page: str
    views: int
    total_time_ms: int
