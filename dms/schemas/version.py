"""Version schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ._validators import clean_file_ref


class VersionCreate(BaseModel):
    """Attach a file returned by ``POST /api/files/upload`` as the next version."""
    file_url: str
    public_id: str

    @field_validator("file_url", "public_id")
    @classmethod
    def validate_file_ref(cls, v: str) -> str:
        return clean_file_ref(v)


class VersionResponse(BaseModel):
    id: str
    document_id: str
    version_number: int
    file_url: str
    public_id: Optional[str] = None
    uploaded_by: str
    uploaded_by_name: Optional[str] = None
    uploaded_by_email: Optional[str] = None
    created_at: Optional[datetime] = None
    is_current: bool = False
