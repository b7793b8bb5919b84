"""Comment schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from ._validators import clean_text


class CommentCreate(BaseModel):
    content: str
    parent_comment_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return clean_text(v)


class CommentUpdate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return clean_text(v)


class CommentResponse(BaseModel):
    """A comment with its replies nested underneath (listing only)."""
    id: str
    document_id: str
    parent_comment_id: Optional[str] = None
    content: str
    author_id: str
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    is_edited: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    replies: List["CommentResponse"] = []
