"""
Authentication dependencies for FastAPI.

The identity collaborator is opaque to this service: a principal is the
decoded JWT payload (``sub``, ``user_id``, ``role``, ``cities``).
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from backend.app.core.jwt import decode_access_token

# HTTP Bearer security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Returns:
        Decoded token payload containing principal information

    Raises:
        HTTPException: 401 if the token is invalid or carries no user
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("user_id") or not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    cities = payload.get("cities") or []
    if not isinstance(cities, list):
        cities = [cities]
    payload["cities"] = [str(city) for city in cities]

    return payload
