"""Auth-related schemas (session responses, password reset)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from wildway.core.sanitize import clean_email
from wildway.schemas.user import MAX_PASSWORD_LEN, MIN_PASSWORD_LEN, UserData, validate_password_value


class AuthResponse(BaseModel):
    status: str = "success"
    token: str
    data: UserData


class StatusResponse(BaseModel):
    status: str = "success"


class MessageResponse(BaseModel):
    status: str = "success"
    message: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return clean_email(value)


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(min_length=MIN_PASSWORD_LEN, max_length=MAX_PASSWORD_LEN)
    confirm_password: str = Field(alias="confirmPassword", max_length=MAX_PASSWORD_LEN)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return validate_password_value(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords are not the same!")
        return self
