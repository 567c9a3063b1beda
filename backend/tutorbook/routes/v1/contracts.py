"""
Contract routes - API v1

Endpoints:
    GET /{contract_id}/reschedule-ledger - Approved reschedules of a contract (staff)
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import Principal, get_contract_quota_service, require_roles
from ...core.enums import RoleName
from ...core.exceptions import DomainException
from ...schemas.reschedule import RescheduleLedgerEntryResponse
from ...services.contract_quota_service import ContractQuotaService
from ._errors import ULID_PATH_PATTERN, handle_domain_exception

router = APIRouter(tags=["contracts-v1"])


@router.get("/{contract_id}/reschedule-ledger", response_model=List[RescheduleLedgerEntryResponse])
async def get_reschedule_ledger(
    contract_id: str = Path(..., description="Contract ULID", pattern=ULID_PATH_PATTERN),
    _: Principal = Depends(require_roles(RoleName.STAFF, RoleName.ADMIN)),
    service: ContractQuotaService = Depends(get_contract_quota_service),
) -> List[RescheduleLedgerEntryResponse]:
    try:
        entries = await asyncio.to_thread(service.get_ledger, contract_id)
        return [RescheduleLedgerEntryResponse.model_validate(e) for e in entries]
    except DomainException as e:
        handle_domain_exception(e)
