"""Session service — issuing, validating, listing and revoking login sessions.

Each login gets its own Session entry embedded in the user document and a
token bound to that entry. A token is accepted only while its session is
still in the stored list, so removing the entry (logout, remote revocation,
eviction, password change) invalidates the token immediately.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from domain.model.errors import (
    AuthenticationError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
)
from domain.model.user import MAX_SESSIONS, Session, User
from port.user_repository import UserRepository
from services.token_service import create_access_token, decode_access_token
from utils.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionGrant:
    """What a successful login/registration hands back to the caller."""
    token: str
    session: Session
    expires_at: datetime


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller of a request."""
    user: User
    session_id: str


@dataclass(frozen=True)
class SessionView:
    session: Session
    is_current: bool


def open_session(
    repo: UserRepository,
    settings: Settings,
    user: User,
    device: str,
    ip: str,
) -> SessionGrant:
    """Record a new session for ``user`` and mint its token.

    The repository keeps only the newest MAX_SESSIONS entries.

    Raises:
        DomainError: the session could not be persisted
    """
    session = Session.create(device=device, ip=ip)
    if not repo.add_session(user.id, session, MAX_SESSIONS):
        raise DomainError("Failed to create session.")

    token, expires_at = create_access_token(settings, user.id, session.session_id)
    logger.info("Session opened", extra={"userId": user.id, "sessionId": session.session_id, "ip": ip})
    return SessionGrant(token=token, session=session, expires_at=expires_at)


def resolve_session(repo: UserRepository, settings: Settings, token: str | None) -> AuthContext:
    """Turn a raw token into the authenticated user + session.

    Raises:
        AuthenticationError: token missing, invalid/expired, unknown user,
            or the session is no longer in the user's list
        RepositoryError: the user store could not be read (the session is left alone)
    """
    if not token:
        raise AuthenticationError("Not authorized, token missing.")

    claims = decode_access_token(settings, token)
    if claims is None:
        raise AuthenticationError("Token is invalid or expired.")

    user = repo.get_by_id(claims.user_id)
    if user is None:
        raise AuthenticationError("User not found.")

    if not user.has_session(claims.session_id):
        logger.info("Rejected token for revoked session", extra={
            "userId": user.id, "sessionId": claims.session_id
        })
        raise AuthenticationError("Invalid session. Please log in again.")

    return AuthContext(user=user, session_id=claims.session_id)


def list_sessions(user: User, current_session_id: str) -> list[SessionView]:
    """All sessions of ``user``, newest first, flagging the caller's own."""
    ordered = sorted(user.sessions, key=lambda s: s.login_time, reverse=True)
    return [SessionView(session=s, is_current=s.session_id == current_session_id) for s in ordered]


def revoke_session(
    repo: UserRepository,
    user: User,
    current_session_id: str,
    session_id: str,
) -> None:
    """Log out another device.

    Raises:
        PermissionDeniedError: ``session_id`` is the caller's own session
        NotFoundError: no such session for this user
    """
    if session_id == current_session_id:
        raise PermissionDeniedError(
            "Cannot log out the current session via this endpoint. "
            "Please use the main Log Out button."
        )
    if not repo.remove_session(user.id, session_id):
        raise NotFoundError("Session not found for this user.")
    logger.info("Session revoked", extra={"userId": user.id, "sessionId": session_id})


def close_session(repo: UserRepository, user: User, session_id: str) -> None:
    """Logout: drop the caller's own session entry."""
    removed = repo.remove_session(user.id, session_id)
    logger.info("Session closed", extra={"userId": user.id, "sessionId": session_id, "removed": removed})
