# backend/tutorbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.contract_quota_service import ContractQuotaService
from ...services.reschedule_service import RescheduleService
from ...services.session_service import SessionService
from .database import get_db


def get_reschedule_service(db: Session = Depends(get_db)) -> RescheduleService:
    """Get RescheduleService instance bound to the request's session."""
    return RescheduleService(db)


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    """Get SessionService instance bound to the request's session."""
    return SessionService(db)


def get_contract_quota_service(db: Session = Depends(get_db)) -> ContractQuotaService:
    """Get ContractQuotaService instance bound to the request's session."""
    return ContractQuotaService(db)
