"""Credential store: persistence of user records and their password metadata."""

from __future__ import annotations

import datetime as dt
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from wildway.core.exceptions import ConflictError
from wildway.core.security import ResetSecret, hash_password
from wildway.models.enums import UserRole
from wildway.models.user import User

logger = logging.getLogger(__name__)

def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class UserStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str, *, with_password: bool = False) -> User | None:
        query = self.db.query(User).filter(User.email == email.strip().lower())
        if with_password:
            query = query.options(undefer(User.password_hash))
        return query.first()

    def find_by_id(self, user_id: str | UUID, *, with_password: bool = False) -> User | None:
        try:
            user_uuid = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
        except ValueError:
            return None
        options = [undefer(User.password_hash)] if with_password else []
        return self.db.get(User, user_uuid, options=options)

    def find_by_reset_token(self, hashed_token: str, *, now: dt.datetime | None = None) -> User | None:
        now = now or _utcnow()
        return (
            self.db.query(User)
            .filter(
                User.password_reset_token == hashed_token,
                User.password_reset_expires.is_not(None),
                User.password_reset_expires > now,
            )
            .first()
        )

    def create(self, *, name: str, email: str, password: str, role: UserRole = UserRole.user) -> User:
        user = User(
            email=email.strip().lower(),
            name=name.strip(),
            role=role,
            password_hash=hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Email is already in use.", details={"email": user.email}) from exc
        self.db.refresh(user)
        logger.info("User created: %s", user.email)
        return user

    def set_password(self, user: User, password: str) -> User:
        user.password_hash = hash_password(password)
        user.password_changed_at = _utcnow()
        user.password_reset_token = None
        user.password_reset_expires = None
        return self.save(user)

    def set_reset_token(self, user: User, secret: ResetSecret) -> User:
        user.password_reset_token = secret.hashed
        user.password_reset_expires = secret.expires_at
        return self.save(user)

    def clear_reset_token(self, user: User) -> User:
        user.password_reset_token = None
        user.password_reset_expires = None
        return self.save(user)

    def save(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        return user
