"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field

from domain.model.activity import Activity, PageMetric
from domain.model.user import User
from services.session_service import SessionView


RoleName = Literal["user", "admin"]


# ── auth ──────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    """Request model for user registration."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    password: str = Field(..., max_length=72, description="Also limited to 72 UTF-8 bytes by auth_service")


class LoginRequest(BaseModel):
    """Request model for user login. Presence is checked by the route to return a friendly message."""
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class AuthUser(BaseModel):
    id: str
    email: str
    first_name: str
    role: RoleName


class AuthResponse(BaseModel):
    """Response model for register/login. The token is also set as the authToken cookie."""
    success: bool = True
    token: str
    user: AuthUser

    @classmethod
    def from_domain(cls, user: User, token: str) -> "AuthResponse":
        return cls(
            token=token,
            user=AuthUser(id=user.id, email=user.email, first_name=user.first_name, role=user.role.value),
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ── sessions ──────────────────────────────────────────────────

class SessionResponse(BaseModel):
    """One login session as shown in the device management list."""
    id: str = Field(..., description="Session ID")
    login_time: datetime
    device_name: str = Field(..., description="User-Agent of the device")
    location: str = Field(..., description="Origin IP address")
    is_current: bool = Field(..., description="True for the session making this request")

    @classmethod
    def from_view(cls, view: SessionView) -> "SessionResponse":
        return cls(
            id=view.session.session_id,
            login_time=view.session.login_time,
            device_name=view.session.device,
            location=view.session.ip,
            is_current=view.is_current,
        )


class SessionListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[SessionResponse]


# ── profile ───────────────────────────────────────────────────

class UserProfile(BaseModel):
    """Public view of a user. Never carries the password hash."""
    id: str
    first_name: str
    last_name: Optional[str] = None
    username: str
    email: str
    phone: Optional[str] = None
    role: RoleName
    profile_pic: str
    created_at: datetime
    updated_at: datetime
    last_activity: Optional[datetime] = None
    current_device: str
    current_ip: str

    @classmethod
    def from_domain(cls, user: User, **extra) -> "UserProfile":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            username=user.username,
            email=user.email,
            phone=user.phone,
            role=user.role.value,
            profile_pic=user.profile_pic,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_activity=user.last_activity,
            current_device=user.current_device,
            current_ip=user.current_ip,
            **extra,
        )


class MeProfile(UserProfile):
    sessions: list[SessionResponse] = Field(default_factory=list)


class MeResponse(BaseModel):
    success: bool = True
    data: MeProfile


class ProfileResponse(BaseModel):
    success: bool = True
    data: UserProfile


class UpdateFields(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    new_password: Optional[str] = Field(None, max_length=72)


class UpdateMeRequest(BaseModel):
    """Profile update. ``password`` is the current password and is always required."""
    password: Optional[str] = None
    update_fields: Optional[UpdateFields] = None


# ── activity ──────────────────────────────────────────────────

class ActivityRequest(BaseModel):
    type: Optional[str] = Field(None, max_length=50)
    page_route: Optional[str] = Field(None, max_length=500)
    duration_ms: Optional[int] = Field(None, ge=0)
    ip: Optional[str] = Field(None, max_length=100, description="Overrides the request's origin IP")
    device: Optional[str] = Field(None, max_length=500, description="Overrides the request's User-Agent")


class ActivityResponse(BaseModel):
    id: str
    description: str
    type: str
    time: datetime
    page: str
    duration_ms: int

    @classmethod
    def from_domain(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            description=activity.description,
            type=activity.type,
            time=activity.timestamp,
            page=activity.page_route,
            duration_ms=activity.duration_ms,
        )


# ── admin ─────────────────────────────────────────────────────

class UserSummary(BaseModel):
    """Row of the admin user table."""
    id: str
    first_name: str
    last_name: Optional[str] = None
    email: str
    profile_pic: str
    current_device: str
    created_at: datetime
    last_activity: Optional[datetime] = None
    session_status: Literal["Active", "Inactive"]


class UserListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[UserSummary]


class AdminProfile(UserProfile):
    session_status: Literal["Active", "Inactive"]


class PageMetricResponse(BaseModel):
    page: str
    views: int
    time_spent_ms: int

    @classmethod
    def from_domain(cls, metric: PageMetric) -> "PageMetricResponse":
        return cls(page=metric.page, views=metric.views, time_spent_ms=metric.total_time_ms)


class UserMetrics(BaseModel):
    top_pages: list[PageMetricResponse]


class UserLogs(BaseModel):
    activities: list[ActivityResponse]


class UserDetailsData(BaseModel):
    profile: AdminProfile
    metrics: UserMetrics
    logs: UserLogs


class UserDetailsResponse(BaseModel):
    success: bool = True
    data: UserDetailsData


class MakeAdminRequest(BaseModel):
    email: Optional[str] = None


class PromotedUser(BaseModel):
    id: str
    name: str
    email: str
    role: RoleName


class MakeAdminResponse(BaseModel):
    success: bool = True
    message: str
    user: PromotedUser
