"""
Authentication Dependencies

Verifies identity-provider (Clerk) session JWTs using python-jose.
Tokens are signed with RS256; the public key comes from settings.
The `sub` claim is the AppUser id.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from postcast.config.logging import get_logger
from postcast.config.settings import settings

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_session_token(token: str) -> Optional[str]:
    """
    Decode and validate a session JWT.

    Returns:
        User ID if valid, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            settings.clerk_jwt_public_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.debug("JWT decode error", error=str(e))
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return user_id


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Dependency returning the authenticated user's id.

    Raises:
        HTTPException: 401 if the bearer token is missing or invalid.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user_id = decode_session_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    return user_id
