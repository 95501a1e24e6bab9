from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from garage_iam.config import ApplicationConfig

ALGORITHM = "HS256"


def create_access_token(
    user_id: str, tenant_id: str, role: str, expires_delta: timedelta
) -> str:
    """
    Create JWT access token scoped to one garage

    Args:
        user_id: User UUID as string
        tenant_id: Tenant UUID as string
        role: Membership role (OWNER, MANAGER, MECHANIC, STOREKEEPER, VIEWER)
        expires_delta: Token expiration duration

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": user_id,
        "tenant_id": tenant_id,
        "role": role,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Returns:
        Decoded payload dict or None if invalid or expired
    """
    try:
        return jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
