"""In-memory implementation of UserRepository for testing."""

import copy
from datetime import datetime, timezone

from domain.model.errors import DuplicateError
from domain.model.user import Role, Session, User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

    def _clash(self, user_id: str, field: str, value) -> bool:
        return any(
            getattr(u, field) == value for uid, u in self.store.items() if uid != user_id
        )

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User | None:
        for field in ('username', 'email'):
            if self._clash(user.id, field, getattr(user, field)):
                raise DuplicateError(field)
        self.store[user.id] = copy.deepcopy(user)
        return user

    def add_session(self, user_id: str, session: Session, max_sessions: int) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False
        user.add_session(copy.deepcopy(session), limit=max_sessions)
        user.last_activity = datetime.now(timezone.utc)
        user.current_device = session.device
        user.current_ip = session.ip
        return True

    def remove_session(self, user_id: str, session_id: str) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False
        return user.remove_session(session_id)

    def update_profile(self, user_id: str, fields: dict) -> User | None:
        user = self.store.get(user_id)
        if not user:
            return None
        for field in ('username', 'email'):
            if field in fields and self._clash(user_id, field, fields[field]):
                raise DuplicateError(field, f"{field.capitalize()} is already taken.")
        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)
        return copy.deepcopy(user)

    def update_password(self, user_id: str, password_hash: str, keep_session_id: str) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False
        user.password_hash = password_hash
        user.prune_sessions(keep_session_id)
        return True

    def touch_activity(self, user_id: str, ip: str, device: str) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False
        user.last_activity = datetime.now(timezone.utc)
        user.current_ip = ip
        user.current_device = device
        return True

    def set_role(self, email: str, role: Role) -> User | None:
        for user in self.store.values():
            if user.email == email:
                user.role = role
                return copy.deepcopy(user)
        return None

    def delete(self, user_id: str) -> bool:
        return self.store.pop(user_id, None) is not None

    # ── read operations ──────────────────────────────────────
    # Copies are returned so callers cannot mutate "stored" state by accident.

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return copy.deepcopy(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None

    def list_users(self, exclude_role: Role | None = None) -> list[User]:
        users = [u for u in self.store.values() if exclude_role is None or u.role != exclude_role]
        users.sort(key=lambda u: u.created_at, reverse=True)
        return [copy.deepcopy(u) for u in users]
