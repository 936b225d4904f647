"""MongoDB implementation of UserRepository."""

from datetime import datetime, timezone
from logging import getLogger

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateError, RepositoryError
from domain.model.user import DEFAULT_PROFILE_PIC, Role, Session, User

logger = getLogger(__name__)


def _duplicate_field(error: DuplicateKeyError) -> str:
    """Name of the unique field that caused an E11000 error."""
    key_value = (error.details or {}).get('keyValue') or {}
    if key_value:
        return next(iter(key_value))
    message = str(error)
    for candidate in ('username', 'email'):
        if candidate in message:
            return candidate
    return 'field'


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    # ── indexes ────────────────────────────────────────────────

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, [('username', 1)], 'idx_users_username', unique=True)
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except Exception as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── mapping ───────────────────────────────────────────────

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            first_name=doc['first_name'],
            last_name=doc.get('last_name'),
            username=doc['username'],
            email=doc['email'],
            phone=doc.get('phone'),
            role=Role(doc.get('role', Role.USER.value)),
            profile_pic=doc.get('profile_pic', DEFAULT_PROFILE_PIC),
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
            last_activity=doc.get('last_activity'),
            current_device=doc.get('current_device', 'N/A'),
            current_ip=doc.get('current_ip', 'N/A'),
            password_hash=doc.get('password_hash'),
            sessions=[
                Session(
                    session_id=s['session_id'],
                    login_time=s['login_time'],
                    device=s['device'],
                    ip=s['ip'],
                )
                for s in doc.get('sessions', [])
            ],
        )

    @staticmethod
    def _session_doc(session: Session) -> dict:
        return {
            'session_id': session.session_id,
            'login_time': session.login_time,
            'device': session.device,
            'ip': session.ip,
        }

    def _to_document(self, user: User) -> dict:
        return {
            '_id': user.id,
            'first_name': user.first_name,
            'last_name': user.last_name,
            'username': user.username,
            'email': user.email,
            'phone': user.phone,
            'password_hash': user.password_hash,
            'role': user.role.value,
            'profile_pic': user.profile_pic,
            'created_at': user.created_at,
            'updated_at': user.updated_at,
            'last_activity': user.last_activity,
            'current_device': user.current_device,
            'current_ip': user.current_ip,
            'sessions': [self._session_doc(s) for s in user.sessions],
        }

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User | None:
        """Insert a new user and return it."""
        try:
            self.collection.insert_one(self._to_document(user))
            logger.info("User created", extra={"userId": user.id, "email": user.email})
            return user
        except DuplicateKeyError as e:
            field = _duplicate_field(e)
            logger.warning("User creation failed: duplicate key", extra={"field": field, "email": user.email})
            raise DuplicateError(field) from e
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": user.email, "error": str(e)})
            return None

    def add_session(self, user_id: str, session: Session, max_sessions: int) -> bool:
        """Append a session, trimming the array to the newest ``max_sessions`` entries.

        $push with $slice is applied server side in a single update, so two
        concurrent logins cannot drop each other's session.
        """
        try:
            now = datetime.now(timezone.utc)
            result = self.collection.update_one(
                {'_id': user_id},
                {
                    '$push': {
                        'sessions': {
                            '$each': [self._session_doc(session)],
                            '$slice': -max_sessions,
                        }
                    },
                    '$set': {
                        'last_activity': now,
                        'current_device': session.device,
                        'current_ip': session.ip,
                        'updated_at': now,
                    },
                },
            )
            if result.matched_count == 0:
                logger.warning("Session not added: user missing", extra={"userId": user_id})
                return False
            return True
        except PyMongoError as e:
            logger.error("Failed to add session", extra={"userId": user_id, "error": str(e)})
            return False

    def remove_session(self, user_id: str, session_id: str) -> bool:
        try:
            result = self.collection.update_one(
                {'_id': user_id},
                {'$pull': {'sessions': {'session_id': session_id}}},
            )
            return result.modified_count > 0
        except PyMongoError as e:
            logger.error("Failed to remove session", extra={
                "userId": user_id, "sessionId": session_id, "error": str(e)
            })
            return False

    def update_profile(self, user_id: str, fields: dict) -> User | None:
        try:
            doc = self.collection.find_one_and_update(
                {'_id': user_id},
                {'$set': {**fields, 'updated_at': datetime.now(timezone.utc)}},
                return_document=ReturnDocument.AFTER,
            )
            return self._to_domain(doc) if doc else None
        except DuplicateKeyError as e:
            field = _duplicate_field(e)
            raise DuplicateError(field, f"{field.capitalize()} is already taken.") from e
        except PyMongoError as e:
            logger.error("Failed to update profile", extra={"userId": user_id, "error": str(e)})
            return None

    def update_password(self, user_id: str, password_hash: str, keep_session_id: str) -> bool:
        """Set the new hash and prune every other session in the same update."""
        try:
            result = self.collection.update_one(
                {'_id': user_id},
                {
                    '$set': {'password_hash': password_hash, 'updated_at': datetime.now(timezone.utc)},
                    '$pull': {'sessions': {'session_id': {'$ne': keep_session_id}}},
                },
            )
            return result.matched_count > 0
        except PyMongoError as e:
            logger.error("Failed to update password", extra={"userId": user_id, "error": str(e)})
            return False

    def touch_activity(self, user_id: str, ip: str, device: str) -> bool:
        try:
            now = datetime.now(timezone.utc)
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {'last_activity': now, 'current_ip': ip, 'current_device': device}},
            )
            return result.matched_count > 0
        except PyMongoError as e:
            logger.error("Failed to update activity", extra={"userId": user_id, "error": str(e)})
            return False

    def set_role(self, email: str, role: Role) -> User | None:
        try:
            doc = self.collection.find_one_and_update(
                {'email': email},
                {'$set': {'role': role.value, 'updated_at': datetime.now(timezone.utc)}},
                return_document=ReturnDocument.AFTER,
            )
            return self._to_domain(doc) if doc else None
        except PyMongoError as e:
            logger.error("Failed to set role", extra={"email": email, "error": str(e)})
            return None

    def delete(self, user_id: str) -> bool:
        try:
            result = self.collection.delete_one({'_id': user_id})
            return result.deleted_count > 0
        except PyMongoError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            return False

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return None if not found, raise RepositoryError if the read fails."""
        try:
            doc = self.collection.find_one({'_id': user_id})
            return self._to_domain(doc) if doc else None
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise RepositoryError("Failed to load user.") from e

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return None if not found, raise RepositoryError if the read fails."""
        try:
            doc = self.collection.find_one({'email': email})
            return self._to_domain(doc) if doc else None
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            raise RepositoryError("Failed to load user.") from e

    def list_users(self, exclude_role: Role | None = None) -> list[User]:
        query = {'role': {'$ne': exclude_role.value}} if exclude_role else {}
        try:
            cursor = self.collection.find(query).sort('created_at', -1)
            return [self._to_domain(doc) for doc in cursor]
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise RepositoryError("Failed to list users.") from e
