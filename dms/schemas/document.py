"""Document schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ._validators import clean_file_ref, clean_name


class DocumentCreate(BaseModel):
    """Register an uploaded file as a new document (version 1).

    file_url and public_id are the values returned by ``POST /api/files/upload``.
    """
    name: str
    folder_id: str
    file_url: str
    public_id: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("file_url", "public_id")
    @classmethod
    def validate_file_ref(cls, v: str) -> str:
        return clean_file_ref(v)


class DocumentUpdate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class DocumentClone(BaseModel):
    target_folder_id: str
    new_name: Optional[str] = None

    @field_validator("new_name")
    @classmethod
    def validate_new_name(cls, v: Optional[str]) -> Optional[str]:
        return clean_name(v) if v is not None else None


class DocumentResponse(BaseModel):
    id: str
    name: str
    folder_id: str
    created_by: str
    current_version_id: Optional[str] = None
    file_url: str
    public_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
