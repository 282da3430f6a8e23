# listing_api/schemas/visits.py

import re
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..services.visit_states import VisitStatus

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class VisitCreate(CamelModel):
    """Request body for booking a visit."""
    visit_date: date = Field(description="Date in YYYY-MM-DD format")
    visit_time: str = Field(description="Time in HH:MM format")
    duration_minutes: int = Field(alias="duration", ge=15, le=180)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("visit_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time format."""
        v = v.strip()
        if not _TIME_RE.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def strip_notes(cls, v):
        return _strip_or_none(v) if isinstance(v, str) else v


class VisitStatusUpdate(CamelModel):
    """Agent decision on a pending visit."""
    status: Literal["approved", "rejected", "cancelled"]
    cancellation_reason: Optional[str] = Field(None, max_length=500)

    @field_validator("cancellation_reason", mode="before")
    @classmethod
    def strip_reason(cls, v):
        return _strip_or_none(v) if isinstance(v, str) else v


class VisitCancel(CamelModel):
    """Visitor cancellation."""
    cancellation_reason: Optional[str] = Field(None, max_length=500)

    @field_validator("cancellation_reason", mode="before")
    @classmethod
    def strip_reason(cls, v):
        return _strip_or_none(v) if isinstance(v, str) else v


class PropertySummary(CamelModel):
    id: int
    title: str


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class VisitRead(CamelModel):
    id: int

    property_id: int
    agent_id: int
    visitor_id: int

    visit_date: date
    visit_time: str
    duration_minutes: int = Field(alias="duration")

    status: VisitStatus
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    property: Optional[PropertySummary] = None
    visitor: Optional[UserSummary] = None
    agent: Optional[UserSummary] = None


class VisitEnvelope(CamelModel):
    visit: VisitRead


class VisitCreatedResponse(CamelModel):
    visit: VisitRead
    agent_notified: bool


class VisitListResponse(CamelModel):
    count: int
    visits: list[VisitRead]


class AvailableSlotsResponse(CamelModel):
    property_id: int
    date: date
    slots: list[str]
