# backend/tutorbook/schemas/session.py
"""Tutoring session schemas."""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, field_validator

from ._strict_base import StrictModel, StrictRequestModel


class UpdateSessionStatusRequest(StrictRequestModel):
    # Kept as free text; unknown values are rejected by the service with the allowed list.
    status: str = Field(..., min_length=1, max_length=32)


class UpdateSessionTutorRequest(StrictRequestModel):
    new_tutor_id: str = Field(..., min_length=1)

    @field_validator("new_tutor_id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        return v.strip()


class SessionResponse(StrictModel):
    """Session as returned to parents, tutors and staff."""

    id: str
    contract_id: str
    tutor_id: str
    session_date: date
    start_time: time
    end_time: time
    status: str
    is_online: bool
    video_call_platform: Optional[str] = None
    offline_address: Optional[str] = None
    rescheduled_from_session_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReplacementTutor(StrictModel):
    tutor_id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_substitute: bool
    priority: str


class ReplacementTutorsResponse(StrictModel):
    booking_id: str
    session_date: date
    start_time: time
    end_time: time
    current_tutor_id: str
    replacement_tutors: List[ReplacementTutor]
    total_available: int
    has_substitute: bool


class SessionUpdateResponse(StrictModel):
    success: bool = True
    message: str
    session: SessionResponse
