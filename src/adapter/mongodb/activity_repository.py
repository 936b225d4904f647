"""MongoDB implementation of ActivityRepository."""

from logging import getLogger

from pymongo.database import Database
from pymongo.errors import PyMongoError

from adapter.mongodb import ACTIVITIES_COLLECTION_NAME
from domain.model.activity import Activity, PageMetric

logger = getLogger(__name__)


class MongoActivityRepository:
    def __init__(self, db: Database):
        self.collection = db[ACTIVITIES_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for activities collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('user_id', 1), ('timestamp', -1)], 'idx_activity_user_timestamp')
            return True
        except Exception as e:
            logger.error("Failed to create activities indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> Activity:
        return Activity(
            id=doc['_id'],
            user_id=doc['user_id'],
            type=doc['type'],
            page_route=doc.get('page_route', 'N/A'),
            duration_ms=doc.get('duration_ms', 0),
            description=doc.get('description', ''),
            timestamp=doc['timestamp'],
        )

    def save(self, activity: Activity) -> str | None:
        try:
            self.collection.insert_one({
                '_id': activity.id,
                'user_id': activity.user_id,
                'type': activity.type,
                'page_route': activity.page_route,
                'duration_ms': activity.duration_ms,
                'description': activity.description,
                'timestamp': activity.timestamp,
            })
            return activity.id
        except PyMongoError as e:
            logger.error("Failed to save activity", extra={"userId": activity.user_id, "error": str(e)})
            return None

    def find_by_user(self, user_id: str, limit: int = 30) -> list[Activity]:
        try:
            cursor = self.collection.find({'user_id': user_id}).sort('timestamp', -1).limit(limit)
            return [self._to_domain(doc) for doc in cursor]
        except PyMongoError as e:
            logger.error("Failed to find activities", extra={"userId": user_id, "error": str(e)})
            return []

    def top_pages(self, user_id: str, limit: int = 5) -> list[PageMetric]:
        pipeline = [
            {'$match': {'user_id': user_id, 'duration_ms': {'$gt': 0}}},
            {'$group': {
                '_id': '$page_route',
                'total_time_ms': {'$sum': '$duration_ms'},
                'views': {'$sum': 1},
            }},
            {'$sort': {'total_time_ms': -1}},
            {'$limit': limit},
        ]
        try:
            return [
                PageMetric(page=row['_id'], views=row['views'], total_time_ms=row['total_time_ms'])
                for row in self.collection.aggregate(pipeline)
            ]
        except PyMongoError as e:
            logger.error("Failed to aggregate page metrics", extra={"userId": user_id, "error": str(e)})
            return []

    def delete_by_user(self, user_id: str) -> int:
        try:
            return self.collection.delete_many({'user_id': user_id}).deleted_count
        except PyMongoError as e:
            logger.error("Failed to delete activities", extra={"userId": user_id, "error": str(e)})
            return 0
