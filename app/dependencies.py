"""
FastAPI dependencies for authentication and per-operation authorization.

    @router.post("/events")
    def create(..., principal: Principal = Depends(require("events.create"))):
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.services.auth_service import Principal, decode_access_token, authorize

bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Principal:
    """Any authenticated caller. Raises Unauthorized for missing or bad tokens."""
    token = credentials.credentials if credentials else None
    return decode_access_token(token)


def require(operation: str):
    """Dependency factory: the caller must hold a role allowed for `operation`."""
    def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        return authorize(principal, operation)
    _dependency.__name__ = f"require_{operation.replace('.', '_')}"
    return _dependency
