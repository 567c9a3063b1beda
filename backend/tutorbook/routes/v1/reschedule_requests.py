# backend/tutorbook/routes/v1/reschedule_requests.py
"""
Reschedule request routes - API v1

Versioned endpoints under /api/v1/reschedule-requests.
All business logic delegated to RescheduleService.

Endpoints:
    POST / - Parent submits a reschedule request
    GET / - List requests (parents see their own)
    GET /{request_id} - Request details
    GET /{request_id}/available-sub-tutors - Free contract substitutes (staff)
    POST /{request_id}/approve - Approve a pending request (staff)
    POST /{request_id}/reject - Reject a pending request (staff)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ...api.dependencies import (
    Principal,
    get_current_principal,
    get_reschedule_service,
    require_roles,
)
from ...core.enums import RescheduleRequestStatus, RoleName
from ...core.exceptions import DomainException
from ...schemas.reschedule import (
    ApproveRescheduleRequest,
    AvailableSubTutorsResponse,
    RejectRescheduleRequest,
    RescheduleRequestCreate,
    RescheduleRequestDetail,
    RescheduleResponse,
)
from ...services.reschedule_service import RescheduleService
from ._errors import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

# V1 router - no prefix here, added when mounting in main.py
router = APIRouter(tags=["reschedule-requests-v1"])

STAFF_ROLES = (RoleName.STAFF, RoleName.ADMIN)


@router.post("", response_model=RescheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_reschedule_request(
    payload: RescheduleRequestCreate = Body(...),
    principal: Principal = Depends(require_roles(RoleName.PARENT)),
    service: RescheduleService = Depends(get_reschedule_service),
) -> RescheduleResponse:
    """Submit a request to move one of the caller's sessions."""
    try:
        return await asyncio.to_thread(service.create_request, principal.user_id, payload)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[RescheduleRequestDetail])
async def list_reschedule_requests(
    status_filter: Optional[RescheduleRequestStatus] = Query(None, alias="status"),
    principal: Principal = Depends(
        require_roles(RoleName.PARENT, RoleName.TUTOR, *STAFF_ROLES)
    ),
    service: RescheduleService = Depends(get_reschedule_service),
) -> List[RescheduleRequestDetail]:
    """
    List reschedule requests, newest first.

    Parents see only their own requests and tutors those touching their
    sessions; staff see all.
    """
    try:
        if principal.role == RoleName.TUTOR:
            requests = await asyncio.to_thread(service.list_requests_for_tutor, principal.user_id)
            if status_filter is not None:
                requests = [r for r in requests if r.status == status_filter.value]
        else:
            parent_id = principal.user_id if principal.role == RoleName.PARENT else None
            requests = await asyncio.to_thread(
                service.list_requests, parent_id=parent_id, status=status_filter
            )
        return [RescheduleRequestDetail.from_request(r) for r in requests]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{request_id}", response_model=RescheduleRequestDetail)
async def get_reschedule_request(
    request_id: str = Path(..., description="Reschedule request ULID", pattern=ULID_PATH_PATTERN),
    principal: Principal = Depends(get_current_principal),
    service: RescheduleService = Depends(get_reschedule_service),
) -> RescheduleRequestDetail:
    """Get one reschedule request with its original session."""
    try:
        request = await asyncio.to_thread(
            service.get_request, request_id, principal.user_id, principal.role
        )
        return RescheduleRequestDetail.from_request(request)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{request_id}/available-sub-tutors", response_model=AvailableSubTutorsResponse)
async def get_available_sub_tutors(
    request_id: str = Path(..., description="Reschedule request ULID", pattern=ULID_PATH_PATTERN),
    _: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: RescheduleService = Depends(get_reschedule_service),
) -> AvailableSubTutorsResponse:
    """Contract substitutes free for the requested window."""
    try:
        result = await asyncio.to_thread(service.get_available_sub_tutors, request_id)
        return AvailableSubTutorsResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{request_id}/approve", response_model=RescheduleResponse)
async def approve_reschedule_request(
    request_id: str = Path(..., description="Reschedule request ULID", pattern=ULID_PATH_PATTERN),
    payload: Optional[ApproveRescheduleRequest] = Body(None),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: RescheduleService = Depends(get_reschedule_service),
) -> RescheduleResponse:
    """Approve a pending request, materialising the new session."""
    try:
        return await asyncio.to_thread(
            service.approve_request,
            principal.user_id,
            request_id,
            payload or ApproveRescheduleRequest(),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{request_id}/reject", response_model=RescheduleResponse)
async def reject_reschedule_request(
    request_id: str = Path(..., description="Reschedule request ULID", pattern=ULID_PATH_PATTERN),
    payload: RejectRescheduleRequest = Body(...),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: RescheduleService = Depends(get_reschedule_service),
) -> RescheduleResponse:
    """Reject a pending request with a reason."""
    try:
        return await asyncio.to_thread(
            service.reject_request, principal.user_id, request_id, payload.reason
        )
    except DomainException as e:
        handle_domain_exception(e)
