from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContactStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    CLOSED = "closed"


class ContactSubmissionCreate(BaseModel):
    """Advertising enquiry sent from the public contact form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., min_length=10, max_length=20)
    what_to_advertise: str = Field(..., min_length=1, max_length=500)
    products_or_services: str = Field(..., min_length=1, max_length=1000)
    additional_details: str = Field("", max_length=1000)


class ContactSubmission(ContactSubmissionCreate):
    id: str
    status: ContactStatus = ContactStatus.PENDING
    created_at: datetime


class ContactStatusUpdate(BaseModel):
    status: ContactStatus
