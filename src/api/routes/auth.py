"""Authentication routes (register, login, logout).

Register and login open a new session: a Session entry on the user plus a
token bound to it, delivered in the body and as the authToken/loggedIn
cookie pair.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from api.cookies import cleared_cookies, session_cookies
from api.dependencies import get_app_settings, get_user_repo
from api.models import AuthResponse, ForgotPasswordRequest, LoginRequest, MessageResponse, RegisterRequest
from api.security import client_device, client_ip, get_auth_context
from domain.model.errors import ValidationError
from domain.model.user import User
from port.user_repository import UserRepository
from services import auth_service, session_service
from services.session_service import AuthContext, SessionGrant
from utils.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(user: User, grant: SessionGrant, settings: Settings, status_code: int) -> JSONResponse:
    body = AuthResponse.from_domain(user, grant.token)
    response = JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
    session_cookies(grant.token, settings).apply(response)
    response.headers["Cache-Control"] = "no-store"
    return response


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new user and sign them in on this device.

    Raises:
        409 if username or email is taken, 400 if validation fails
    """
    user = auth_service.register(repo, auth_service.Registration(
        first_name=body.first_name,
        last_name=body.last_name,
        username=body.username,
        email=body.email,
        phone=body.phone,
        password=body.password,
    ))
    grant = session_service.open_session(repo, settings, user, device=client_device(request), ip=client_ip(request))

    logger.info("User registered", extra={"userId": user.id, "email": user.email})
    return _session_response(user, grant, settings, status.HTTP_201_CREATED)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_app_settings),
):
    """Login with email and password. Wrong credentials never create a session."""
    if not body.email or not body.password:
        raise ValidationError("Please provide email and password.")

    user = auth_service.authenticate(repo, body.email, body.password)
    grant = session_service.open_session(repo, settings, user, device=client_device(request), ip=client_ip(request))

    logger.info("User logged in", extra={"userId": user.id, "sessionId": grant.session.session_id})
    return _session_response(user, grant, settings, status.HTTP_200_OK)


@router.post("/logout")
async def logout(
    ctx: AuthContext = Depends(get_auth_context),
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_app_settings),
):
    """Remove the current session and clear both cookies."""
    session_service.close_session(repo, ctx.user, ctx.session_id)
    response = JSONResponse(content={"success": True, "data": {}})
    cleared_cookies(secure=settings.secure_cookies).apply(response)
    return response


@router.post("/forgotpassword", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest):
    """Acknowledge a reset request without revealing whether the account exists.

    No reset email/SMS is sent yet; the response is the same either way.
    """
    if not body.email and not body.phone:
        raise ValidationError("Please provide email or phone number.")
    return MessageResponse(message="If your account details are correct, a reset link/code has been sent.")
