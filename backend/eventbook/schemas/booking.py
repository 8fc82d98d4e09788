"""
Pydantic schemas for booking validation and the persisted record shape.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

from eventbook.models.booking import EMAIL_MAX_LENGTH

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Field-level messages surfaced to callers
FIELD_MESSAGES = {
    "event_id": {
        "missing": "Event ID is required",
        "invalid": "Event ID must be an integer",
    },
    "email": {
        "missing": "Email is required",
        "invalid": "Please provide a valid email address",
    },
}


def normalize_email(value: str) -> str:
    return value.strip().lower()


class BookingCreate(BaseModel):
    event_id: int
    email: str

    @field_validator("event_id", mode="before")
    @classmethod
    def event_id_present(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("missing")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def email_present(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("missing")
        return value

    @field_validator("email")
    @classmethod
    def email_normalized(cls, value: str) -> str:
        value = normalize_email(value)
        if len(value) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(value):
            raise ValueError("invalid")
        return value


class BookingRead(BaseModel):
    id: int
    event_id: int
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
