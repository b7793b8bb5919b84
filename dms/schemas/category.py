"""Category and access-grant schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ._validators import clean_name


class CategoryCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class CategoryUpdate(CategoryCreate):
    pass


class CategoryResponse(BaseModel):
    """Category as seen by the caller.

    access_level is the caller's grant; admins always see ``full``.
    """
    id: str
    name: str
    created_by: str
    created_at: Optional[datetime] = None
    access_level: Optional[str] = None

    model_config = {"from_attributes": True}


class GrantRequest(BaseModel):
    access_level: Literal["full", "read"]


class GrantResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    access_level: str
    granted_by: Optional[str] = None
    granted_at: Optional[datetime] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None

    model_config = {"from_attributes": True}
