"""
Pydantic models for posts.

Python attribute names are snake_case; the aliases are the names used
both on the wire and in the ``posts.json`` snapshot.  Always dump with
``by_alias=True``.
"""

from pydantic import BaseModel, Field


class Post(BaseModel):
    id: int
    title: str
    author_username: str = Field(..., alias="userName")
    content: str
    # Epoch milliseconds.
    created_at: int = Field(..., alias="timestamp")
    edited: bool = Field(False, alias="isEdited")

    model_config = {
        "populate_by_name": True,
    }
