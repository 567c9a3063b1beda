# backend/tutorbook/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

The caller's identity is the ``sub`` claim of the bearer token and its role
the ``role`` claim, parsed into RoleName here. Role gating lives only in
these dependencies; services receive plain ids.
"""

from dataclasses import dataclass
import logging
from typing import Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError

from ...auth import decode_access_token
from ...core.enums import RoleName

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""

    user_id: str
    role: RoleName


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Resolve the caller from the bearer token.

    Raises:
        HTTPException: 401 when the token is missing, invalid, or carries an unknown role
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_access_token(credentials.credentials)
    except PyJWTError as e:
        logger.info(f"Rejected access token: {type(e).__name__}")
        raise _unauthorized("Could not validate credentials")

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise _unauthorized("Could not validate credentials")

    raw_role = str(payload.get("role") or "").strip().lower()
    try:
        role = RoleName(raw_role)
    except ValueError:
        logger.warning(f"Token for {user_id} carries unknown role '{raw_role}'")
        raise _unauthorized("Unknown role")

    return Principal(user_id=user_id, role=role)


def require_roles(*roles: RoleName) -> Callable[..., Awaitable[Principal]]:
    """
    Dependency factory allowing only the given roles.

    Usage:
        principal: Principal = Depends(require_roles(RoleName.STAFF, RoleName.ADMIN))
    """
    allowed = frozenset(roles)

    async def verify_role(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{principal.role.value}' cannot perform this action",
            )
        return principal

    return verify_role
