"""
Access token utilities.

Tokens are issued by the external identity provider (Supabase) and signed
with the project's JWT secret; this service only verifies them.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from ectracc.config import settings

# JWT configuration
ALGORITHM = "HS256"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the verified claims of an access token, or None if invalid."""
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError:
        return None


def create_access_token(
    user_id: str, email: Optional[str] = None, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a token shaped like the identity provider's (local tooling and tests)."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode = {
        "sub": user_id,
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": expire,
    }
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.SUPABASE_JWT_SECRET, algorithm=ALGORITHM)
