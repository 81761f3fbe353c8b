"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to protect endpoints, or to
pick up an identity when one is offered.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from .service import authenticate_user

# HTTP Basic authentication schemes: required and optional
security = HTTPBasic()
optional_security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials = Depends(security)) -> str:
    """
    Dependency that retrieves and validates the current user.

    Returns:
        str: The authenticated username.
    """
    return authenticate_user(credentials.username, credentials.password)


def get_optional_user(
    credentials: Optional[HTTPBasicCredentials] = Depends(optional_security),
) -> Optional[str]:
    """
    Like `get_current_user`, but anonymous callers get None instead of a 401.
    Credentials that are present must still be valid.
    """
    if credentials is None:
        return None
    return authenticate_user(credentials.username, credentials.password)
