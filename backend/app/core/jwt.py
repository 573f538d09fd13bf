"""
JWT token utilities for the identity collaborator.

Tokens are issued by the external auth service; this module only needs to
decode them. ``create_access_token`` exists for seeding, smoke tests and
the test-suite.
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List
from jose import JWTError, jwt
from backend.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload to encode (should include: sub, user_id, role, cities)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example payload:
        {
            "sub": "director_msk",
            "user_id": 7,
            "role": "DIRECTOR",
            "cities": ["Moscow"],
            "exp": 1234567890
        }
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_principal_token(user_id: int, username: str, role: str, cities: Optional[List[str]] = None) -> str:
    """Shortcut for issuing a token for a director or admin principal."""
    return create_access_token(
        data={"sub": username, "user_id": user_id, "role": role, "cities": list(cities or [])}
    )


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Returns:
        Decoded payload if signature and expiry are valid, None otherwise
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
