"""Pydantic schemas for user payloads and responses."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from wildway.core.sanitize import clean_email, clean_single_line, contains_control_chars
from wildway.models.enums import UserRole

MAX_NAME_LEN = 80
MIN_PASSWORD_LEN = 8
MAX_PASSWORD_LEN = 128


def validate_password_value(value: str) -> str:
    if contains_control_chars(value):
        raise ValueError("password_contains_control_chars")
    if not value.strip():
        raise ValueError("password_required")
    return value


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=2, max_length=MAX_NAME_LEN)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LEN, max_length=MAX_PASSWORD_LEN)
    confirm_password: str = Field(alias="confirmPassword", max_length=MAX_PASSWORD_LEN)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return clean_email(value)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return clean_single_line(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return validate_password_value(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords are not the same!")
        return self


class LoginRequest(BaseModel):
    # Both fields are optional at the schema level so a missing one is
    # reported as a plain 400 by the login flow.
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=MAX_PASSWORD_LEN)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return clean_email(value)


class UpdatePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password_current: str = Field(alias="passwordCurrent", min_length=1, max_length=MAX_PASSWORD_LEN)
    password: str = Field(min_length=MIN_PASSWORD_LEN, max_length=MAX_PASSWORD_LEN)
    password_confirm: str = Field(alias="passwordConfirm", max_length=MAX_PASSWORD_LEN)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return validate_password_value(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "UpdatePasswordRequest":
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same!")
        return self


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: EmailStr
    role: UserRole
    created_at: dt.datetime


class UserData(BaseModel):
    user: UserOut


class UserResponse(BaseModel):
    status: str = "success"
    data: UserData
