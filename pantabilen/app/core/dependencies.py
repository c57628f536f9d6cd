"""
Authentication dependency.

Resolves the bearer token into the caller's claims. Role and tenant checks
live in core/guards.py.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pantabilen.app.core.jwt import decode_access_token
from pantabilen.app.models.enums import UserRole

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Claims of the authenticated caller.
    
    Raises:
        HTTPException 401: invalid/expired token, missing user_id or role,
            or a non-super-admin token without tenant_id
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Could not validate credentials")
    
    if not payload.get("user_id") or not payload.get("role"):
        raise _unauthorized("Invalid token payload")
    
    if payload["role"] != UserRole.SUPER_ADMIN.value and payload.get("tenant_id") is None:
        raise _unauthorized("Token is not bound to a tenant")
    
    return payload
