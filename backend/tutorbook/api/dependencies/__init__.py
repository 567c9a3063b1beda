# backend/tutorbook/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import Principal, get_current_principal, require_roles
from .database import get_db
from .services import (
    get_contract_quota_service,
    get_reschedule_service,
    get_session_service,
)

__all__ = [
    # Auth
    "Principal",
    "get_current_principal",
    "require_roles",
    # Database
    "get_db",
    # Services
    "get_contract_quota_service",
    "get_reschedule_service",
    "get_session_service",
]
