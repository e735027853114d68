"""Bearer-token port to the identity provider.

Tokens are HS256 JWTs whose ``sub`` claim is the caller's user id. The id is
opaque to the rest of the service.
"""

from datetime import datetime, timedelta, timezone

import jwt

from shared.config import settings
from shared.exceptions import AuthenticationError


def verify_token(token: str) -> str:
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")
    return str(user_id)


def issue_token(user_id: str, expires_in: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + (expires_in or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
