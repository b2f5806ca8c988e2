import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.api.utils.jwt import decode_token

logger = logging.getLogger("app")

# Missing headers are allowed through; callers decide whether a session is required
security = HTTPBearer(auto_error=False)


class AuthSession(BaseModel):
    """Session resolved from a bearer token issued by the host auth service."""

    user_id: str
    jti: Optional[str] = None
    role: Optional[str] = None


async def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthSession]:
    """
    Resolve the current session from the Authorization header, if any.

    Returns None when no token is sent or when the token fails validation
    (bad signature, expired, missing subject). Routes that need a session
    turn None into a 401.
    """
    if credentials is None:
        return None

    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Session token without subject claim")
        return None

    return AuthSession(user_id=str(user_id), jti=payload.get("jti"), role=payload.get("role"))
