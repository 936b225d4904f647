"""JWT encode/decode for session-bound access tokens.

A token carries ``{"id": <userId>, "sessionId": <sessionId>}``. Signature and
expiry are checked here; whether the session still exists is checked by
session_service.resolve_session against the stored session list.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from utils.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    session_id: str


def create_access_token(settings: Settings, user_id: str, session_id: str) -> tuple[str, datetime]:
    """Create a signed token for one session. Returns (token, expires_at)."""
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(days=settings.jwt_expire_days)
    payload = {
        "id": user_id,
        "sessionId": session_id,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(settings: Settings, token: str) -> TokenClaims | None:
    """Verify signature and expiry. Returns None on any failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"JWT verification failed: {e}")
        return None

    user_id = payload.get("id")
    session_id = payload.get("sessionId")
    if not isinstance(user_id, str) or not isinstance(session_id, str):
        return None
    return TokenClaims(user_id=user_id, session_id=session_id)
