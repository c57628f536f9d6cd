"""
JWT helpers.

Access tokens are issued by the identity provider and signed with the
shared secret (HS256). The API only verifies them; `create_access_token`
mints equivalent tokens for local development, scripts and tests.

Claims used by the API:
    sub        login e-mail, recorded in the audit log
    user_id    numeric user ID
    role       SUPER_ADMIN, TENANT_ADMIN or DRIVER
    tenant_id  tenant the user belongs to (absent for SUPER_ADMIN)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from pantabilen.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign `data` with an `exp` claim (default lifetime from settings)."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for a bad signature, malformed or expired token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
