# backend/tutorbook/schemas/reschedule.py
"""
Reschedule request schemas.

Request bodies only check shape. Slot rules (allowed starts, the 90 minute
window) are enforced by RescheduleService so callers get the same messages
whichever entry point they use.
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.constants import MAX_NOTE_LENGTH, MAX_REASON_LENGTH
from ..core.enums import RescheduleRequestStatus
from ._strict_base import StrictModel, StrictRequestModel
from ._time_fields import parse_wall_clock


class RescheduleRequestCreate(StrictRequestModel):
    """Parent's proposal to move one session."""

    booking_id: str = Field(..., description="Session to move")
    requested_date: date = Field(..., description="New session date")
    start_time: time = Field(..., description="New start (16:00, 17:30, 19:00 or 20:30)")
    end_time: time = Field(..., description="New end, 90 minutes after start")
    requested_tutor_id: Optional[str] = Field(
        None, description="Preferred tutor; defaults to the session's current tutor"
    )
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time_string(cls, v: object) -> object:
        return parse_wall_clock(v)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class ApproveRescheduleRequest(StrictRequestModel):
    new_tutor_id: Optional[str] = Field(
        None, description="Tutor for the new session; defaults to the original session's tutor"
    )
    note: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)

    @field_validator("new_tutor_id", "note")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


class RejectRescheduleRequest(StrictRequestModel):
    reason: str = Field(..., min_length=1, max_length=MAX_REASON_LENGTH)

    @field_validator("reason")
    @classmethod
    def require_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("reason must not be blank")
        return stripped


class RescheduleResponse(StrictModel):
    """Outcome of create/approve/reject."""

    request_id: str
    status: RescheduleRequestStatus
    message: str
    processed_at: Optional[datetime] = None
    new_session_id: Optional[str] = None
    reschedule_count: Optional[int] = Field(
        None, description="Contract reschedules left after an approval"
    )


class RescheduleRequestDetail(StrictModel):
    """Full view of a request including the session it would move."""

    id: str
    booking_id: str
    contract_id: str
    parent_id: str
    requested_date: date
    start_time: time
    end_time: time
    requested_tutor_id: Optional[str] = None
    requested_tutor_name: Optional[str] = None
    reason: Optional[str] = None
    status: RescheduleRequestStatus
    staff_id: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    original_session_date: Optional[date] = None
    original_start_time: Optional[time] = None
    original_end_time: Optional[time] = None
    original_tutor_id: Optional[str] = None
    original_tutor_name: Optional[str] = None

    @classmethod
    def from_request(cls, request: object) -> "RescheduleRequestDetail":
        booking = getattr(request, "booking", None)
        booking_tutor = getattr(booking, "tutor", None) if booking is not None else None
        requested_tutor = getattr(request, "requested_tutor", None)
        return cls(
            id=request.id,
            booking_id=request.booking_id,
            contract_id=request.contract_id,
            parent_id=request.parent_id,
            requested_date=request.requested_date,
            start_time=request.start_time,
            end_time=request.end_time,
            requested_tutor_id=request.requested_tutor_id,
            requested_tutor_name=requested_tutor.full_name if requested_tutor else None,
            reason=request.reason,
            status=request.status,
            staff_id=request.staff_id,
            processed_at=request.processed_at,
            created_at=request.created_at,
            original_session_date=booking.session_date if booking else None,
            original_start_time=booking.start_time if booking else None,
            original_end_time=booking.end_time if booking else None,
            original_tutor_id=booking.tutor_id if booking else None,
            original_tutor_name=booking_tutor.full_name if booking_tutor else None,
        )


class SubTutorInfo(StrictModel):
    tutor_id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    is_available: bool = True


class AvailableSubTutorsResponse(StrictModel):
    request_id: str
    requested_date: date
    start_time: time
    end_time: time
    available_tutors: List[SubTutorInfo]
    total_available: int


class RescheduleLedgerEntryResponse(StrictModel):
    id: str
    contract_id: str
    request_id: str
    original_session_id: str
    new_session_id: str
    staff_id: str
    count_before: int
    count_after: int
    created_at: Optional[datetime] = None
