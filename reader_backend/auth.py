"""
Caller identity for API requests.

Sessions and credentials are handled upstream; by the time a request gets
here the authenticated user ID travels in the X-User-Id header.
"""

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

USER_ID_HEADER = APIKeyHeader(name="X-User-Id", auto_error=False)


def get_current_user(user_id: str | None = Security(USER_ID_HEADER)) -> str:
    """
    Get the authenticated user ID from request headers.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity. Provide X-User-Id header.",
        )
    return user_id.strip()
