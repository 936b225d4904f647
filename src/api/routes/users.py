"""User routes: own profile, device sessions, activity tracking, admin user management.

Endpoints:
- GET/PUT/DELETE /users/me
- GET /users/sessions, DELETE /users/sessions/{session_id}
- POST /users/activity
- Admin only: GET /users, POST /users/make-admin, GET/DELETE /users/{user_id}
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.cookies import cleared_cookies
from api.dependencies import get_activity_repo, get_app_settings, get_user_repo
from api.models import (
    ActivityRequest,
    ActivityResponse,
    AdminProfile,
    MakeAdminRequest,
    MakeAdminResponse,
    MeProfile,
    MeResponse,
    MessageResponse,
    PageMetricResponse,
    ProfileResponse,
    PromotedUser,
    SessionListResponse,
    SessionResponse,
    UpdateMeRequest,
    UserDetailsData,
    UserDetailsResponse,
    UserListResponse,
    UserLogs,
    UserMetrics,
    UserProfile,
    UserSummary,
)
from api.security import client_device, client_ip, get_auth_context, require_admin
from domain.model.errors import ValidationError
from port.activity_repository import ActivityRepository
from port.user_repository import UserRepository
from services import activity_service, session_service, user_service
from services.session_service import AuthContext
from utils.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _sessions(ctx: AuthContext) -> list[SessionResponse]:
    return [SessionResponse.from_view(v) for v in session_service.list_sessions(ctx.user, ctx.session_id)]


# ── own account ───────────────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def get_me(ctx: AuthContext = Depends(get_auth_context)):
    """Current profile plus the device session list."""
    return MeResponse(data=MeProfile.from_domain(ctx.user, sessions=_sessions(ctx)))


@router.put("/me", response_model=ProfileResponse)
async def update_me(
    body: UpdateMeRequest,
    ctx: AuthContext = Depends(get_auth_context),
    repo: UserRepository = Depends(get_user_repo),
):
    """Update profile fields or change the password (current password required).

    Changing the password signs out every other device.
    """
    if not body.password or body.update_fields is None:
        raise ValidationError("Current password and update fields are required.")

    user = user_service.update_profile(
        repo,
        user_id=ctx.user.id,
        current_session_id=ctx.session_id,
        current_password=body.password,
        updates=body.update_fields.model_dump(exclude_none=True),
    )
    logger.info("Profile updated", extra={"userId": user.id})
    return ProfileResponse(data=UserProfile.from_domain(user))


@router.delete("/me", response_model=MessageResponse)
async def delete_me(
    ctx: AuthContext = Depends(get_auth_context),
    user_repo: UserRepository = Depends(get_user_repo),
    activity_repo: ActivityRepository = Depends(get_activity_repo),
    settings: Settings = Depends(get_app_settings),
):
    """Permanently delete the caller's account and activity log."""
    user_service.delete_account(user_repo, activity_repo, ctx.user.id)
    body = MessageResponse(message="Your account and all related data have been permanently deleted.")
    response = JSONResponse(content=body.model_dump())
    cleared_cookies(secure=settings.secure_cookies).apply(response)
    return response


# ── device sessions ───────────────────────────────────────────

@router.get("/sessions", response_model=SessionListResponse)
async def get_sessions(ctx: AuthContext = Depends(get_auth_context)):
    """All active sessions, newest first, with the caller's own flagged."""
    sessions = _sessions(ctx)
    return SessionListResponse(count=len(sessions), data=sessions)


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
async def logout_session(
    session_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    repo: UserRepository = Depends(get_user_repo),
):
    """Log out another device. The caller's own session must use /auth/logout."""
    session_service.revoke_session(repo, ctx.user, ctx.session_id, session_id)
    return MessageResponse(message="Device logged out successfully.")


# ── activity ──────────────────────────────────────────────────

@router.post("/activity", response_model=MessageResponse)
async def track_activity(
    body: ActivityRequest,
    request: Request,
    ctx: AuthContext = Depends(get_auth_context),
    user_repo: UserRepository = Depends(get_user_repo),
    activity_repo: ActivityRepository = Depends(get_activity_repo),
):
    activity_service.track_activity(
        user_repo,
        activity_repo,
        user_id=ctx.user.id,
        ip=body.ip or client_ip(request),
        device=body.device or client_device(request),
        type=body.type,
        page_route=body.page_route,
        duration_ms=body.duration_ms,
    )
    return MessageResponse(message="Activity logged and user profile updated.")


# ── admin ─────────────────────────────────────────────────────

@router.get("", response_model=UserListResponse)
async def list_users(
    ctx: AuthContext = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    users = user_service.list_customers(repo)
    data = [
        UserSummary(
            id=u.id,
            first_name=u.first_name,
            last_name=u.last_name,
            email=u.email,
            profile_pic=u.profile_pic,
            current_device=u.current_device,
            created_at=u.created_at,
            last_activity=u.last_activity,
            session_status=u.session_status(),
        )
        for u in users
    ]
    return UserListResponse(count=len(data), data=data)


@router.post("/make-admin", response_model=MakeAdminResponse)
async def make_admin(
    body: MakeAdminRequest,
    ctx: AuthContext = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    user = user_service.make_admin(repo, body.email or "")
    return MakeAdminResponse(
        message=f"{user.email} is now an ADMIN!",
        user=PromotedUser(
            id=user.id,
            name=" ".join(p for p in (user.first_name, user.last_name) if p),
            email=user.email,
            role=user.role.value,
        ),
    )


@router.get("/{user_id}", response_model=UserDetailsResponse)
async def get_user_details(
    user_id: str,
    ctx: AuthContext = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repo),
    activity_repo: ActivityRepository = Depends(get_activity_repo),
):
    details = user_service.get_user_details(user_repo, activity_repo, user_id)
    return UserDetailsResponse(data=UserDetailsData(
        profile=AdminProfile.from_domain(details.user, session_status=details.status),
        metrics=UserMetrics(top_pages=[PageMetricResponse.from_domain(m) for m in details.top_pages]),
        logs=UserLogs(activities=[ActivityResponse.from_domain(a) for a in details.activities]),
    ))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    ctx: AuthContext = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repo),
    activity_repo: ActivityRepository = Depends(get_activity_repo),
):
    user = user_service.delete_user(user_repo, activity_repo, user_id)
    logger.info("Admin deleted user", extra={"adminId": ctx.user.id, "userId": user_id})
    return MessageResponse(message=f"User {user.email} and related data deleted successfully.")
