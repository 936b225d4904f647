"""In-memory implementation of ActivityRepository for testing."""

from collections import defaultdict

from domain.model.activity import Activity, PageMetric


class FakeActivityRepository:
    def __init__(self):
        self.store: dict[str, Activity] = {}

    def save(self, activity: Activity) -> str | None:
        self.store[activity.id] = activity
        return activity.id

    def find_by_user(self, user_id: str, limit: int = 30) -> list[Activity]:
        items = [a for a in self.store.values() if a.user_id == user_id]
        items.sort(key=lambda a: a.timestamp, reverse=True)
        return items[:limit]

    def top_pages(self, user_id: str, limit: int = 5) -> list[PageMetric]:
        totals: dict[str, list[int]] = defaultdict(lambda: [0, 0])
        for activity in self.store.values():
            if activity.user_id == user_id and activity.duration_ms > 0:
                totals[activity.page_route][0] += 1
                totals[activity.page_route][1] += activity.duration_ms
        metrics = [PageMetric(page=p, views=v, total_time_ms=t) for p, (v, t) in totals.items()]
        metrics.sort(key=lambda m: m.total_time_ms, reverse=True)
        return metrics[:limit]

    def delete_by_user(self, user_id: str) -> int:
        doomed = [aid for aid, a in self.store.items() if a.user_id == user_id]
        for aid in doomed:
            del self.store[aid]
        return len(doomed)
