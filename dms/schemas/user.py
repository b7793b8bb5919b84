"""User and session schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ._validators import clean_name


class UserCreate(BaseModel):
    """Admin request to create an account."""
    name: str
    email: str
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    role: Literal["system_admin", "user"] = "user"

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Valid email address required")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"name": "Alice", "email": "alice@company.com", "password": "s3cret!", "role": "user"}
            ]
        }
    }


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: str
    password: str


class CategoryAccess(BaseModel):
    """A category the caller can see, with the level it holds."""
    category_id: str
    category_name: str
    access_level: str


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class MeResponse(BaseModel):
    user: UserResponse
    access: List[CategoryAccess] = []
