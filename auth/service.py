"""
Core authentication logic.

This module handles validation of credentials against the configured user
store (see `auth.config`).
"""

from fastapi import HTTPException, status
from .config import USERS
from .utils import verify_password


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def authenticate_user(username: str, password: str) -> str:
    """
    Authenticate a user by validating their username and password.

    Returns:
        str: The authenticated username, used as the owner id of short URLs.

    Raises:
        HTTPException: If authentication fails (401 Unauthorized).
    """
    stored_password = USERS.get(username)

    if stored_password is None:
        raise _unauthorized("User not found")

    if verify_password(stored_password, password):
        return username

    raise _unauthorized("Invalid password")
