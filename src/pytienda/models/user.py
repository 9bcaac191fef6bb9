"""Authenticated user model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class UserRole(StrEnum):
    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    """The current user record held by the auth store."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
