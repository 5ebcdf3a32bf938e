"""
Pydantic models for request and response envelopes.

Every request is ``{"action": "<resource>/<verb>", "body": {...}}``.
The body is validated once, against the model registered for its
action, before any service is called.  Field aliases are the camelCase
names clients send.

Identifier fields go through ``to_id``, which accepts an int, an
integral float (some JSON encoders emit ``3.0``) or a numeric string.
"""

from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from ..core.errors import ClientError
from .user import Role


class InvalidIdError(ClientError, ValueError):
    """Raised by ``to_id``; a ``ValueError`` so pydantic reports it."""


def to_id(value: Any) -> int:
    """Coerce a wire value to an entity id or raise ``InvalidIdError``."""
    if isinstance(value, bool):
        raise InvalidIdError(f"Invalid id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in {"+", "-"} else text
        if digits.isdigit():
            return int(text)
    raise InvalidIdError(f"Invalid id: {value!r}")


EntityId = Annotated[int, BeforeValidator(to_id)]


class RequestBody(BaseModel):
    model_config = {
        "populate_by_name": True,
    }


class EmptyBody(RequestBody):
    pass


# ---------------------------------------------------------------------------
# user/*
# ---------------------------------------------------------------------------

def _parse_role(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class UserCreateBody(RequestBody):
    username: str = Field(..., alias="userName")
    password: str
    role: Role = Role.USER

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        return _parse_role(v)


class UserEditBody(RequestBody):
    editor_name: str = Field(..., alias="editorName")
    username: str = Field(..., alias="userName")
    old_password: str = Field(..., alias="oldPassword")
    new_password: str = Field(..., alias="newPassword")
    new_role: Role = Field(..., alias="newRole")

    @field_validator("new_role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        return _parse_role(v)


class UserRemoveBody(RequestBody):
    remover_name: str = Field(..., alias="removerName")
    username: str = Field(..., alias="userName")
    password: str


class UserCredentialsBody(RequestBody):
    """Used by ``user/authenticate`` and ``user/get``."""

    username: str = Field(..., alias="userName")
    password: str


# ---------------------------------------------------------------------------
# post/*
# ---------------------------------------------------------------------------

class PostCreateBody(RequestBody):
    title: str
    username: str = Field(..., alias="userName")
    content: str


class PostEditBody(RequestBody):
    post_id: EntityId = Field(..., alias="postId")
    title: str
    username: str = Field(..., alias="userName")
    content: str


class PostRemoveBody(RequestBody):
    post_id: EntityId = Field(..., alias="postId")
    username: str = Field(..., alias="userName")


class PostIdBody(RequestBody):
    post_id: EntityId = Field(..., alias="postId")


class SearchBody(RequestBody):
    search_pattern: str = Field(..., alias="searchPattern")


# ---------------------------------------------------------------------------
# comment/*
# ---------------------------------------------------------------------------

class CommentCreateBody(RequestBody):
    post_id: EntityId = Field(..., alias="postId")
    username: str = Field(..., alias="userName")
    content: str


class CommentEditBody(RequestBody):
    comment_id: EntityId = Field(..., alias="commentId")
    username: str = Field(..., alias="userName")
    content: str


class CommentRemoveBody(RequestBody):
    comment_id: EntityId = Field(..., alias="commentId")
    username: str = Field(..., alias="userName")


class CommentIdBody(RequestBody):
    comment_id: EntityId = Field(..., alias="commentId")


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class RequestEnvelope(BaseModel):
    action: str
    body: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("body", mode="before")
    @classmethod
    def default_body(cls, v):
        # ``"body": null`` is treated like a missing body.
        return {} if v is None else v


class Response(BaseModel):
    status: int
    body: Dict[str, Any]

    @classmethod
    def ok(cls, result: Any, **extra: Any) -> "Response":
        return cls(status=200, body={"result": result, **extra})

    @classmethod
    def error(cls, status: int, message: str, details: Optional[Any] = None) -> "Response":
        body: Dict[str, Any] = {"error": message}
        if details is not None:
            body["details"] = details
        return cls(status=status, body=body)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
