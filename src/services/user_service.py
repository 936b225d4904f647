"""User service — profile changes, account deletion and admin user management."""

import logging
from dataclasses import dataclass

from domain.model.activity import Activity, PageMetric
from domain.model.errors import (
    AuthenticationError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from domain.model.user import Role, User
from port.activity_repository import ActivityRepository
from port.user_repository import UserRepository
from services.auth_service import hash_password, normalize_username, validate_password, verify_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('first_name', 'last_name', 'username', 'phone', 'email')


@dataclass(frozen=True)
class UserDetails:
    """Admin view of one user."""
    user: User
    status: str
    activities: list[Activity]
    top_pages: list[PageMetric]


def update_profile(
    repo: UserRepository,
    user_id: str,
    current_session_id: str,
    current_password: str,
    updates: dict,
) -> User:
    """Update profile fields and/or the password after re-checking the current password.

    A password change keeps only the caller's session: every other device's
    token stops validating on its next request.

    Raises:
        NotFoundError: user vanished
        AuthenticationError: current password does not match
        ValidationError: nothing to update, or the new password is too short
        DuplicateError: new username/email already taken
    """
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    if not user.password_hash or not verify_password(current_password, user.password_hash):
        raise AuthenticationError("Incorrect current password.", clear_cookies=False)

    fields = {k: updates[k] for k in PROFILE_FIELDS if updates.get(k)}
    if 'username' in fields:
        fields['username'] = normalize_username(fields['username'])
    if 'email' in fields:
        fields['email'] = fields['email'].strip().lower()

    new_password = updates.get('new_password')
    if new_password:
        validate_password(new_password)
    elif not fields:
        raise ValidationError("No valid fields provided for update.")

    if fields:
        if repo.update_profile(user_id, fields) is None:
            raise DomainError("Server error during profile update.")

    if new_password:
        if not repo.update_password(user_id, hash_password(new_password), keep_session_id=current_session_id):
            raise DomainError("Server error during profile update.")
        logger.info("Password changed, other sessions pruned", extra={
            "userId": user_id, "sessionId": current_session_id
        })

    refreshed = repo.get_by_id(user_id)
    if refreshed is None:
        raise DomainError("Server error during profile update.")
    return refreshed


def delete_account(user_repo: UserRepository, activity_repo: ActivityRepository, user_id: str) -> None:
    """Delete a user together with their activity log."""
    removed = activity_repo.delete_by_user(user_id)
    if not user_repo.delete(user_id):
        raise DomainError("Server error during account deletion.")
    logger.info("Account deleted", extra={"userId": user_id, "activitiesRemoved": removed})


def list_customers(repo: UserRepository) -> list[User]:
    """All non-admin users, newest first."""
    return repo.list_users(exclude_role=Role.ADMIN)


def get_user_details(
    user_repo: UserRepository,
    activity_repo: ActivityRepository,
    user_id: str,
) -> UserDetails:
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return UserDetails(
        user=user,
        status=user.session_status(),
        activities=activity_repo.find_by_user(user_id, limit=30),
        top_pages=activity_repo.top_pages(user_id, limit=5),
    )


def delete_user(user_repo: UserRepository, activity_repo: ActivityRepository, user_id: str) -> User:
    """Admin deletion of a regular user. Returns the deleted user.

    Raises:
        NotFoundError: no such user
        PermissionDeniedError: target is an admin
    """
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    if user.is_admin:
        raise PermissionDeniedError("Admin users cannot be deleted via this API.")

    activity_repo.delete_by_user(user_id)
    if not user_repo.delete(user_id):
        raise DomainError("User found but failed to delete the main record.")
    logger.info("User deleted by admin", extra={"userId": user_id, "email": user.email})
    return user


def make_admin(repo: UserRepository, email: str) -> User:
    if not email or not email.strip():
        raise ValidationError("Email is required.")
    user = repo.set_role(email.strip().lower(), Role.ADMIN)
    if user is None:
        raise NotFoundError("User not found with this email.")
    logger.info("User promoted to admin", extra={"userId": user.id, "email": user.email})
    return user
