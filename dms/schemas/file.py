"""Upload and download schemas."""

from datetime import datetime

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
    public_id: str
    original_name: str
    size: int
    content_type: str
    uploaded_at: datetime


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int
    signed: bool
