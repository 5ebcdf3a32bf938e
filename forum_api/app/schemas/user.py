"""
Pydantic models for user data.

``User`` is the stored record, including the password digest.  It is
never returned to clients as is; ``UserRead`` is the public view.
"""

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    USER = "USER"


class User(BaseModel):
    """Stored user record keyed by ``username``."""

    username: str = Field(..., examples=["alice"])
    # Snapshot files keep the field name ``password``; the value is
    # always a digest produced by ``core.security.hash_password``.
    password_digest: str = Field(..., alias="password")
    role: Role = Role.USER

    model_config = {
        "populate_by_name": True,
    }


class UserRead(BaseModel):
    """Schema for returning a user to a client."""

    username: str
    role: Role

    model_config = {
        "from_attributes": True,
    }
