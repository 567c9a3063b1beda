# backend/tutorbook/routes/v1/sessions.py
"""
Tutoring session routes - API v1

Versioned endpoints under /api/v1/sessions.
All business logic delegated to SessionService.

Endpoints:
    GET / - Sessions of the calling parent or tutor
    GET /{booking_id} - Session details (role-scoped)
    GET /{booking_id}/replacement-tutors - Suggested replacement tutors (staff)
    PATCH /{booking_id}/status - Tutor updates today's session status
    PATCH /{booking_id}/tutor - Staff reassigns the session's tutor
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Body, Depends, Path

from ...api.dependencies import (
    Principal,
    get_current_principal,
    get_session_service,
    require_roles,
)
from ...core.enums import RoleName
from ...core.exceptions import DomainException, NotFoundException
from ...schemas.session import (
    ReplacementTutorsResponse,
    SessionResponse,
    SessionUpdateResponse,
    UpdateSessionStatusRequest,
    UpdateSessionTutorRequest,
)
from ...services.session_service import SessionService
from ._errors import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

# V1 router - no prefix here, added when mounting in main.py
router = APIRouter(tags=["sessions-v1"])

STAFF_ROLES = (RoleName.STAFF, RoleName.ADMIN)


@router.get("", response_model=List[SessionResponse])
async def list_my_sessions(
    principal: Principal = Depends(require_roles(RoleName.PARENT, RoleName.TUTOR)),
    service: SessionService = Depends(get_session_service),
) -> List[SessionResponse]:
    """Sessions of the caller's contracts (parent) or taught by the caller (tutor)."""
    try:
        if principal.role == RoleName.PARENT:
            sessions = await asyncio.to_thread(
                service.list_sessions_for_parent, principal.user_id
            )
        else:
            sessions = await asyncio.to_thread(service.list_sessions_for_tutor, principal.user_id)
        return [SessionResponse.model_validate(s) for s in sessions]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=SessionResponse)
async def get_session(
    booking_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    principal: Principal = Depends(get_current_principal),
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Get a session the caller is allowed to see."""
    try:
        session = await asyncio.to_thread(
            service.get_session, booking_id, principal.user_id, principal.role
        )
        if session is None:
            raise NotFoundException("Session not found.")
        return SessionResponse.model_validate(session)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}/replacement-tutors", response_model=ReplacementTutorsResponse)
async def get_replacement_tutors(
    booking_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    _: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: SessionService = Depends(get_session_service),
) -> ReplacementTutorsResponse:
    """Substitutes first, then other free tutors."""
    try:
        result = await asyncio.to_thread(service.get_replacement_tutors, booking_id)
        return ReplacementTutorsResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/status", response_model=SessionUpdateResponse)
async def update_session_status(
    booking_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    payload: UpdateSessionStatusRequest = Body(...),
    principal: Principal = Depends(require_roles(RoleName.TUTOR)),
    service: SessionService = Depends(get_session_service),
) -> SessionUpdateResponse:
    """Assigned tutor sets the status of a session held today."""
    try:
        session = await asyncio.to_thread(
            service.update_session_status, booking_id, payload.status, principal.user_id
        )
        return SessionUpdateResponse(
            message=f"Session status updated to '{session.status}'.",
            session=SessionResponse.model_validate(session),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/tutor", response_model=SessionUpdateResponse)
async def update_session_tutor(
    booking_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    payload: UpdateSessionTutorRequest = Body(...),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: SessionService = Depends(get_session_service),
) -> SessionUpdateResponse:
    """Move a session to another tutor on its contract."""
    try:
        session = await asyncio.to_thread(
            service.update_session_tutor, booking_id, payload.new_tutor_id, principal.user_id
        )
        return SessionUpdateResponse(
            message="Session tutor updated successfully.",
            session=SessionResponse.model_validate(session),
        )
    except DomainException as e:
        handle_domain_exception(e)
