"""Minimal auth dependency.

Identity is owned by the external auth provider. This stub extracts the user
ID from a bearer token of the form "Bearer <user_id>" so the document and
analysis routes can enforce ownership. Real token verification plugs in here.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.db.context import RequestContext


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer 42")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: 401 if the header is missing or invalid
    """
    if not authorization:
        raise _unauthorized("Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid authorization header format")

    token = authorization[7:].strip()  # Strip "Bearer "

    try:
        user_id = int(token)
    except ValueError as e:
        raise _unauthorized("Invalid bearer token (expected a user ID)") from e

    if user_id <= 0:
        raise _unauthorized("Invalid bearer token (expected a user ID)")

    return RequestContext(user_id=user_id)
