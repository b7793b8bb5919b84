"""Folder schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ._validators import clean_name


class FolderCreate(BaseModel):
    """Create a folder.

    is_personal defaults to True for regular users and False for admins
    when omitted.
    """
    name: str
    category_id: str
    is_personal: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class FolderUpdate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class FolderResponse(BaseModel):
    id: str
    name: str
    category_id: str
    created_by: str
    is_personal: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PersonalFolderResponse(FolderResponse):
    """Personal folder listed as a clone target."""
    category_name: str
