from fastapi import HTTPException

from adapter.mongodb.activity_repository import MongoActivityRepository
from adapter.mongodb.connection import get_database_name, get_mongodb_client
from adapter.mongodb.user_repository import MongoUserRepository
from port.activity_repository import ActivityRepository
from port.user_repository import UserRepository
from utils.settings import Settings, get_settings


def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[get_database_name()]


def get_user_repo() -> UserRepository:
    return MongoUserRepository(_get_db())


def get_activity_repo() -> ActivityRepository:
    return MongoActivityRepository(_get_db())


def get_app_settings() -> Settings:
    return get_settings()
