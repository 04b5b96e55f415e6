from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class Profile(BaseModel):
    id: str  # same as the auth uid
    email: str
    full_name: str
    phone_number: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(..., min_length=1, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=20)


class SignupRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    role: str


class PasswordResetRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
