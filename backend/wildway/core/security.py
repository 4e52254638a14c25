"""Security helpers for hashing passwords, issuing session JWTs and reset secrets."""

from __future__ import annotations

import datetime as dt
import hashlib
import secrets
from dataclasses import dataclass
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from wildway.core.config import Settings
from wildway.core.exceptions import InvalidTokenError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

RESET_SECRET_BYTES = 32


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def dummy_verify() -> None:
    """Burn the same time as a real verification when no user matched."""
    pwd_context.dummy_verify()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    issued_at: int


@dataclass(frozen=True)
class ResetSecret:
    raw: str
    hashed: str
    expires_at: dt.datetime


class TokenService:
    """Issues and verifies session tokens and password reset secrets."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expires_minutes: int,
        reset_expires_minutes: int = 10,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self.expires_delta = dt.timedelta(minutes=expires_minutes)
        self.reset_expires_delta = dt.timedelta(minutes=reset_expires_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            expires_minutes=settings.JWT_EXPIRES_MINUTES,
            reset_expires_minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES,
        )

    def issue(self, user_id: Any, *, issued_at: dt.datetime | None = None) -> str:
        now = issued_at or _utcnow()
        claims = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        if not isinstance(token, str) or not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise InvalidTokenError("Your session has expired. Please log in again.") from exc
        except JWTError as exc:
            raise InvalidTokenError() from exc

        user_id = payload.get("sub")
        issued_at = payload.get("iat")
        if not user_id or not isinstance(issued_at, int):
            raise InvalidTokenError()
        return TokenClaims(user_id=str(user_id), issued_at=issued_at)

    @staticmethod
    def hash_reset_secret(raw: str) -> str:
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def generate_reset_secret(self) -> ResetSecret:
        raw = secrets.token_hex(RESET_SECRET_BYTES)
        return ResetSecret(
            raw=raw,
            hashed=self.hash_reset_secret(raw),
            expires_at=_utcnow() + self.reset_expires_delta,
        )
