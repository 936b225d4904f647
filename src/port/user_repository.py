from typing import Protocol
from domain.model.user import Role, Session, User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Session list mutations are single-document updates so that concurrent
    logins for the same user never overwrite each other's entries.
    """
    def create(self, user: User) -> User | None:
        """Insert a new user. Raise DuplicateError on a username/email clash, return None on other failures."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return None if not found; raise RepositoryError when the store fails."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return None if not found; raise RepositoryError when the store fails."""
        ...

    def list_users(self, exclude_role: Role | None = None) -> list[User]:
        """Return users newest first, optionally skipping one role. Raise RepositoryError when the store fails."""
        ...

    def add_session(self, user_id: str, session: Session, max_sessions: int) -> bool:
        """Append a session, keep only the newest ``max_sessions``, and stamp current device/IP."""
        ...

    def remove_session(self, user_id: str, session_id: str) -> bool:
        """Remove one session. Return True only if an entry was actually removed."""
        ...

    def update_profile(self, user_id: str, fields: dict) -> User | None:
        """Set profile fields and return the updated user. Raise DuplicateError on unique clashes."""
        ...

    def update_password(self, user_id: str, password_hash: str, keep_session_id: str) -> bool:
        """Store a new password hash and drop every session except ``keep_session_id``."""
        ...

    def touch_activity(self, user_id: str, ip: str, device: str) -> bool:
        """Update last activity timestamp plus current device/IP."""
        ...

    def set_role(self, email: str, role: Role) -> User | None:
        """Change the role of the user with this email. Return the updated user or None."""
        ...

    def delete(self, user_id: str) -> bool:
        """Delete a user. Return True if a document was removed."""
        ...
