from typing import Protocol
from domain.model.activity import Activity, PageMetric


class ActivityRepository(Protocol):
    """Protocol defining the interface for activity log access."""
    def save(self, activity: Activity) -> str | None:
        """Store an activity. Return its ID or None if saving failed."""
        ...

    def find_by_user(self, user_id: str, limit: int = 30) -> list[Activity]:
        """Return the user's most recent activities, newest first."""
        ...

    def top_pages(self, user_id: str, limit: int = 5) -> list[PageMetric]:
        """Aggregate timed activities per page route, most time spent first."""
        ...

    def delete_by_user(self, user_id: str) -> int:
        """Delete every activity of a user. Return the number removed."""
        ...
