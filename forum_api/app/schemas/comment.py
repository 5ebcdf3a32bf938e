"""
Pydantic models for comments.

``post_id`` refers to a post by value only; nothing in the store
enforces that the post exists.
"""

from pydantic import BaseModel, Field


class Comment(BaseModel):
    id: int
    post_id: int = Field(..., alias="postId")
    author_username: str = Field(..., alias="userName")
    content: str
    created_at: int = Field(..., alias="timestamp")
    edited: bool = Field(False, alias="isEdited")

    model_config = {
        "populate_by_name": True,
    }
