"""User aggregate with its embedded login sessions."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

MAX_SESSIONS = 5
DEFAULT_PROFILE_PIC = '/images/default_avatar.png'
INACTIVE_AFTER = timedelta(minutes=10)


class Role(str, Enum):
    USER = 'user'
    ADMIN = 'admin'


@dataclass
class Session:
    """One authenticated login instance (device + time + origin)."""
    session_id: str
    login_time: datetime
    device: str
    ip: str

    @staticmethod
    def create(device: str, ip: str) -> 'Session':
        return Session(
            session_id=str(uuid.uuid4()),
            login_time=datetime.now(timezone.utc),
            device=device,
            ip=ip,
        )


@dataclass
class User:
    """Domain model representing a registered user.

    ``sessions`` is kept in insertion order: the front holds the oldest
    login and is the first to go once the list grows past MAX_SESSIONS.
    """
    id: str
    first_name: str
    username: str
    email: str
    created_at: datetime
    updated_at: datetime
    last_name: str | None = None
    phone: str | None = None
    role: Role = Role.USER
    profile_pic: str = DEFAULT_PROFILE_PIC
    last_activity: datetime | None = None
    current_device: str = 'N/A'
    current_ip: str = 'N/A'
    password_hash: str | None = None
    sessions: list[Session] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def find_session(self, session_id: str) -> Session | None:
        for session in self.sessions:
            if session.session_id == session_id:
                return session
        return None

    def has_session(self, session_id: str) -> bool:
        return self.find_session(session_id) is not None

    def add_session(self, session: Session, limit: int = MAX_SESSIONS) -> list[Session]:
        """Append a session and trim from the front. Returns the evicted sessions."""
        self.sessions.append(session)
        overflow = len(self.sessions) - limit
        if overflow <= 0:
            return []
        evicted = self.sessions[:overflow]
        del self.sessions[:overflow]
        return evicted

    def remove_session(self, session_id: str) -> bool:
        before = len(self.sessions)
        self.sessions = [s for s in self.sessions if s.session_id != session_id]
        return len(self.sessions) < before

    def prune_sessions(self, keep_session_id: str) -> int:
        """Drop every session except ``keep_session_id``. Returns how many were removed."""
        before = len(self.sessions)
        self.sessions = [s for s in self.sessions if s.session_id == keep_session_id]
        return before - len(self.sessions)

    def session_status(self, now: datetime | None = None) -> str:
        """'Active' if the user did something in the last 10 minutes."""
        now = now or datetime.now(timezone.utc)
        last_seen = _as_utc(self.last_activity or self.created_at)
        return 'Active' if now - last_seen < INACTIVE_AFTER else 'Inactive'


def _as_utc(value: datetime) -> datetime:
    # pymongo hands back naive datetimes unless tz_aware is set
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
