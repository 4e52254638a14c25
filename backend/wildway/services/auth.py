"""Authentication flows: signup, login, password reset and password update."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from wildway.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    EmailDeliveryError,
    InvalidOrExpiredTokenError,
    NotAuthenticatedError,
    NotFoundError,
)
from wildway.core.security import TokenService, dummy_verify, verify_password
from wildway.models.user import User
from wildway.schemas.user import SignupRequest
from wildway.services.email import Mailer, build_password_reset_email
from wildway.services.users import UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Incorrect email or password."


@dataclass(frozen=True)
class AuthSession:
    token: str
    user: User


def issue_session(tokens: TokenService, user: User) -> AuthSession:
    return AuthSession(token=tokens.issue(user.id), user=user)


def signup(store: UserStore, tokens: TokenService, payload: SignupRequest) -> AuthSession:
    if store.find_by_email(payload.email):
        raise ConflictError("Email is already in use.", details={"email": payload.email})
    user = store.create(name=payload.name, email=payload.email, password=payload.password)
    return issue_session(tokens, user)


def login(store: UserStore, tokens: TokenService, email: str | None, password: str | None) -> AuthSession:
    if not email or not password:
        raise BadRequestError("Please provide email and password!")

    user = store.find_by_email(email, with_password=True)
    if user is None:
        dummy_verify()
        logger.warning("Login failed: user not found (%s)", email)
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE, error_code="INVALID_CREDENTIALS")
    if not verify_password(password, user.password_hash):
        logger.warning("Login failed: invalid password (%s)", email)
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE, error_code="INVALID_CREDENTIALS")

    logger.info("User authenticated: %s", user.email)
    return issue_session(tokens, user)


def request_password_reset(
    store: UserStore,
    tokens: TokenService,
    mailer: Mailer,
    *,
    email: str,
    build_reset_url: Callable[[str], str],
    reveal_unknown_email: bool = True,
) -> bool:
    """Email a reset link. Returns False when the address is unknown and not revealed."""
    user = store.find_by_email(email)
    if user is None:
        logger.warning("Password reset requested for unknown email (%s)", email)
        if reveal_unknown_email:
            raise NotFoundError("There is no user with this email address.")
        return False

    secret = tokens.generate_reset_secret()
    store.set_reset_token(user, secret)

    expires_minutes = int(tokens.reset_expires_delta.total_seconds() // 60)
    subject, body, html_body = build_password_reset_email(user.name, build_reset_url(secret.raw), expires_minutes)
    try:
        sent = mailer.send(user.email, subject, body, html_body=html_body)
    except Exception:
        logger.exception("Password reset email raised: %s", user.email)
        sent = False

    if not sent:
        # A token the user never received must not stay usable.
        store.clear_reset_token(user)
        logger.warning("Password reset token discarded after send failure: %s", user.email)
        raise EmailDeliveryError()

    logger.info("Password reset token issued: %s", user.email)
    return True


def reset_password(store: UserStore, tokens: TokenService, raw_token: str, new_password: str) -> AuthSession:
    user = store.find_by_reset_token(tokens.hash_reset_secret(raw_token))
    if user is None:
        logger.warning("Password reset failed: invalid or expired token")
        raise InvalidOrExpiredTokenError()

    store.set_password(user, new_password)
    logger.info("Password reset success: %s", user.email)
    return issue_session(tokens, user)


def update_password(
    store: UserStore,
    tokens: TokenService,
    user: User,
    current_password: str,
    new_password: str,
) -> AuthSession:
    account = store.find_by_id(user.id, with_password=True)
    if account is None:
        raise NotAuthenticatedError("The user belonging to this token no longer exists.", error_code="USER_NOT_FOUND")
    if not verify_password(current_password, account.password_hash):
        logger.warning("Password update failed: wrong current password (%s)", account.email)
        raise AuthenticationError("Your current password is wrong.", error_code="WRONG_PASSWORD")

    store.set_password(account, new_password)
    logger.info("Password updated: %s", account.email)
    return issue_session(tokens, account)
