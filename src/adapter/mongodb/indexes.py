"""MongoDB index management utilities.

Shared index creation with conflict resolution, used by each MongoXxxRepository.
"""

from logging import getLogger

from pymongo.errors import PyMongoError

logger = getLogger(__name__)

# Server messages for IndexOptionsConflict / IndexKeySpecsConflict
_CONFLICT_MARKERS = ("already exists", "Conflict")


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create an index, replacing an existing one that clashes with it.

    A clash is an index with the same name but different keys, the same keys
    under another name, or the same keys and name but a different ``unique``
    flag (e.g. the users email index becoming unique).
    """
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        if not any(marker in str(e) for marker in _CONFLICT_MARKERS):
            raise
        return _replace_conflicting(collection, keys, name, **kwargs)


def _is_conflict(idx_name: str, idx_info: dict, keys: dict, name: str, unique: bool) -> bool:
    same_name = idx_name == name
    same_keys = dict(idx_info.get('key', [])) == keys
    if same_name != same_keys:
        return True
    return same_name and bool(idx_info.get('unique', False)) != unique


def _replace_conflicting(collection, keys: list, name: str, **kwargs) -> bool:
    wanted = dict(keys)
    unique = bool(kwargs.get('unique', False))

    for idx_name, idx_info in collection.index_information().items():
        if idx_name == '_id_':
            continue
        if _is_conflict(idx_name, idx_info, wanted, name, unique):
            logger.warning("Dropping conflicting index", extra={
                "collection": collection.name, "index": idx_name
            })
            collection.drop_index(idx_name)
            collection.create_index(keys, name=name, **kwargs)
            logger.info("Recreated index", extra={"collection": collection.name, "index": name})
            return True

    logger.error("Failed to resolve index conflict", extra={"index": name})
    return False


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup and by the admin bootstrap script."""
    from adapter.mongodb.activity_repository import MongoActivityRepository
    from adapter.mongodb.user_repository import MongoUserRepository

    results = [
        MongoUserRepository(db).ensure_indexes(),
        MongoActivityRepository(db).ensure_indexes(),
    ]
    return all(results)
