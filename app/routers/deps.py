"""Shared route dependencies: caller identity from the bearer token."""
import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import UnauthenticatedError
from app.core.security import user_id_from_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> int | None:
    """Return the caller's user id if a valid bearer token is attached; else None."""
    if credentials is None:
        return None
    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        logger.debug("ignoring invalid bearer token")
    return user_id


def get_current_user_id(
    user_id: Annotated[int | None, Depends(get_current_user_id_optional)],
) -> int:
    if user_id is None:
        raise UnauthenticatedError()
    return user_id
