"""The two cookies that accompany a session.

``authToken`` carries the signed token and is HttpOnly. ``loggedIn`` is a
plain flag the frontend reads to know whether to show the signed-in UI.
Both are built here, as a pair, and applied to the response by the routes.
"""

from dataclasses import dataclass

from starlette.responses import Response

from utils.settings import Settings

AUTH_COOKIE = "authToken"
STATUS_COOKIE = "loggedIn"

# Cleared cookies hold this placeholder and linger briefly before the browser drops them.
CLEARED_VALUE = "none"
CLEAR_AFTER_SECONDS = 10


@dataclass(frozen=True)
class CookieSpec:
    name: str
    value: str
    max_age: int
    httponly: bool
    secure: bool = False
    samesite: str = "lax"
    path: str = "/"

    def apply(self, response: Response) -> None:
        response.set_cookie(
            key=self.name,
            value=self.value,
            max_age=self.max_age,
            expires=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )


@dataclass(frozen=True)
class AuthCookies:
    auth: CookieSpec
    status: CookieSpec

    def apply(self, response: Response) -> None:
        self.auth.apply(response)
        self.status.apply(response)


def session_cookies(token: str, settings: Settings) -> AuthCookies:
    """Cookies for a freshly issued token, both expiring after cookie_expire_days."""
    max_age = settings.cookie_expire_days * 24 * 60 * 60
    secure = settings.secure_cookies
    return AuthCookies(
        auth=CookieSpec(AUTH_COOKIE, token, max_age=max_age, httponly=True, secure=secure),
        status=CookieSpec(STATUS_COOKIE, "true", max_age=max_age, httponly=False, secure=secure),
    )


def cleared_cookies(secure: bool = False) -> AuthCookies:
    """Overwrite both cookies with a placeholder that expires almost immediately."""
    return AuthCookies(
        auth=CookieSpec(AUTH_COOKIE, CLEARED_VALUE, max_age=CLEAR_AFTER_SECONDS, httponly=True, secure=secure),
        status=CookieSpec(STATUS_COOKIE, CLEARED_VALUE, max_age=CLEAR_AFTER_SECONDS, httponly=False, secure=secure),
    )
