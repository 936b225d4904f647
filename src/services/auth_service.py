"""Auth service — registration and credential checks.

Pure business logic with no HTTP dependencies.
Raises domain errors that the API layer maps to HTTP status codes.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import bcrypt

from domain.model.errors import AuthenticationError, DomainError, RepositoryError, ValidationError
from domain.model.user import Role, User
from port.user_repository import UserRepository

BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6
# bcrypt refuses longer input
MAX_PASSWORD_BYTES = 72

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+$")


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


# Checked against when the email is unknown so both failure paths cost one bcrypt round.
_DUMMY_HASH = hash_password("storefront_timing_dummy")


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.")


def normalize_username(username: str) -> str:
    username = username.strip().lower()
    if not _USERNAME_RE.match(username):
        raise ValidationError("Username must be alphanumeric")
    return username


@dataclass(frozen=True)
class Registration:
    """Validated-at-the-edge registration input."""
    first_name: str
    username: str
    email: str
    password: str
    last_name: str | None = None
    phone: str | None = None


def register(repo: UserRepository, data: Registration, role: Role = Role.USER) -> User:
    """Create a new user.

    Raises:
        ValidationError: username or password rules violated
        DuplicateError: username or email already registered (raised by the repository)
        DomainError: the store failed to persist the user
    """
    if not data.first_name.strip():
        raise ValidationError("First name is required")
    username = normalize_username(data.username)
    validate_password(data.password)

    now = datetime.now(timezone.utc)
    user = User(
        id=uuid.uuid4().hex,
        first_name=data.first_name.strip(),
        last_name=data.last_name,
        username=username,
        email=data.email.strip().lower(),
        phone=data.phone,
        role=role,
        created_at=now,
        updated_at=now,
        last_activity=now,
        password_hash=hash_password(data.password),
    )

    created = repo.create(user)
    if not created:
        raise DomainError("Registration failed due to server error.")
    return created


def authenticate(repo: UserRepository, email: str, password: str) -> User:
    """Check email + password.

    Always runs bcrypt, whether or not the email exists, so response time
    does not reveal registered addresses.

    Raises:
        AuthenticationError: invalid credentials (deliberately vague)
        DomainError: the user store could not be read
    """
    try:
        user = repo.get_by_email(email.strip().lower())
    except RepositoryError as e:
        raise DomainError("Login failed due to a server error.") from e
    if user is None or not user.password_hash:
        verify_password(password, _DUMMY_HASH)
        raise AuthenticationError("Invalid credentials.")
    if not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials.")
    return user
