# storefront/schemas/admin.py
from datetime import datetime

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from storefront.core.notifications import Notification


class AdminSignIn(SQLModel):
    """
    Admin login form.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6)
    remember_me: bool = False
    auto_login: bool = True

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class AdminSession(SQLModel):
    """
    Admin session kept in the client's local storage.

    Expires once `last_activity` is older than the session TTL (24h).
    `auto_login` tells the client whether to resume the session on its
    next visit without showing the login form.
    """

    email: str
    role: str = "admin"
    auto_login: bool = True
    last_activity: datetime


class AdminSessionRead(SQLModel):
    session: AdminSession | None
    notifications: list[Notification] = Field(default_factory=list)


class RememberedEmail(SQLModel):
    email: str | None
