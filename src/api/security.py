"""Authentication dependencies for protected routes.

Token lookup order:
  1. ``authToken`` cookie (browser dashboard).
  2. ``Authorization: Bearer <token>`` header (API clients, scripts).

The token must verify AND its session must still be listed on the user;
see session_service.resolve_session.
"""

import logging

from fastapi import Depends, Request

from api.cookies import AUTH_COOKIE, CLEARED_VALUE
from api.dependencies import get_app_settings, get_user_repo
from domain.model.errors import PermissionDeniedError
from port.user_repository import UserRepository
from services.session_service import AuthContext, resolve_session
from utils.settings import Settings

logger = logging.getLogger(__name__)


def extract_token(request: Request) -> str | None:
    token = request.cookies.get(AUTH_COOKIE)
    # "none" is the placeholder left behind by a logout until it expires
    if token and token != CLEARED_VALUE:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "N/A"


def client_device(request: Request) -> str:
    return request.headers.get("User-Agent") or "Unknown Device"


def get_auth_context(
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_app_settings),
) -> AuthContext:
    """Require a live session. Raises AuthenticationError (401, cookies cleared) otherwise."""
    ctx = resolve_session(repo, settings, extract_token(request))
    request.state.user = ctx.user
    request.state.session_id = ctx.session_id
    return ctx


def require_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Require an admin session. 401 if unauthenticated, 403 if not admin."""
    if not ctx.user.is_admin:
        logger.warning("Admin route denied", extra={"userId": ctx.user.id})
        raise PermissionDeniedError("Forbidden: You do not have permission to perform this action.")
    return ctx
