"""
Auth Schemas
============

Request schemas for signup, login and account security updates.
"""

import re
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt only hashes the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def _normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Invalid email address")
    return email


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fullname: str = Field(
        ...,
        min_length=1,
        max_length=120,
        validation_alias=AliasChoices("fullname", "name", "fullName"),
    )
    email: str
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_BYTES)

    @field_validator("fullname")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, v: str) -> str:
        return _check_password_bytes(v)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class SecurityUpdateRequest(BaseModel):
    """Change email and/or password; the current password is always required."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("currentPassword", "current_password")
    )
    email: Optional[str] = None
    new_password: Optional[str] = Field(
        default=None,
        min_length=6,
        max_length=MAX_PASSWORD_BYTES,
        validation_alias=AliasChoices("newPassword", "new_password"),
    )

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _normalize_email(v)

    @field_validator("new_password")
    @classmethod
    def check_new_password_length(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_password_bytes(v)

    @model_validator(mode="after")
    def require_change(self):
        if self.email is None and self.new_password is None:
            raise ValueError("Provide a new email or a new password")
        return self
