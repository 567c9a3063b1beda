"""Pydantic request and response schemas for the session engine API."""

from .reschedule import (
    ApproveRescheduleRequest,
    AvailableSubTutorsResponse,
    RejectRescheduleRequest,
    RescheduleLedgerEntryResponse,
    RescheduleRequestCreate,
    RescheduleRequestDetail,
    RescheduleResponse,
    SubTutorInfo,
)
from .session import (
    ReplacementTutor,
    ReplacementTutorsResponse,
    SessionResponse,
    SessionUpdateResponse,
    UpdateSessionStatusRequest,
    UpdateSessionTutorRequest,
)

__all__ = [
    "ApproveRescheduleRequest",
    "AvailableSubTutorsResponse",
    "RejectRescheduleRequest",
    "ReplacementTutor",
    "ReplacementTutorsResponse",
    "RescheduleLedgerEntryResponse",
    "RescheduleRequestCreate",
    "RescheduleRequestDetail",
    "RescheduleResponse",
    "SessionResponse",
    "SessionUpdateResponse",
    "SubTutorInfo",
    "UpdateSessionStatusRequest",
    "UpdateSessionTutorRequest",
]
