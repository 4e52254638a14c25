"""Common FastAPI dependencies for collaborators, authentication and authorization."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from wildway.core.config import Settings
from wildway.core.exceptions import ForbiddenError, InvalidTokenError, NotAuthenticatedError
from wildway.core.security import TokenService
from wildway.models.enums import UserRole
from wildway.models.user import User
from wildway.services.email import Mailer
from wildway.services.users import UserStore

logger = logging.getLogger(__name__)

# Value written into the session cookie on logout.
LOGGED_OUT_SENTINEL = "loggedout"


@dataclass(frozen=True)
class AuthContext:
    user: User
    token_issued_at: int


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_user_store(db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def _extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    cleaned = token.strip()
    return cleaned or None


def extract_session_token(request: Request, cookie_name: str) -> str | None:
    token = _extract_bearer_token(request)
    if token:
        return token
    cookie = (request.cookies.get(cookie_name) or "").strip()
    if not cookie or cookie == LOGGED_OUT_SENTINEL:
        return None
    return cookie


def protect(
    request: Request,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    token = extract_session_token(request, settings.COOKIE_NAME)
    if not token:
        raise NotAuthenticatedError()

    try:
        claims = tokens.verify(token)
    except InvalidTokenError as exc:
        logger.info("Rejected session token: %s", exc.message)
        raise NotAuthenticatedError("Invalid or expired session. Please log in again.", error_code="INVALID_TOKEN")

    user = store.find_by_id(claims.user_id)
    if user is None:
        raise NotAuthenticatedError(
            "The user belonging to this token no longer exists.",
            error_code="USER_NOT_FOUND",
        )

    if user.changed_password_after(claims.issued_at):
        logger.info("Rejected stale session token for %s", user.email)
        raise NotAuthenticatedError(
            "User recently changed password. Please log in again.",
            error_code="PASSWORD_CHANGED",
        )

    return AuthContext(user=user, token_issued_at=claims.issued_at)


def restrict_to(*roles: UserRole):
    allowed = set(roles)

    def _checker(auth: AuthContext = Depends(protect)) -> AuthContext:
        if auth.user.role not in allowed:
            logger.warning("Forbidden: %s (%s) not in %s", auth.user.email, auth.user.role.value, sorted(r.value for r in allowed))
            raise ForbiddenError()
        return auth

    return _checker
