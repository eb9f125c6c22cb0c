"""Caller identity as forwarded by the upstream auth layer."""

from fastapi import Header

from app.utils.exceptions import AuthenticationError


async def get_current_user_id(
    x_user_id: str = Header(None, alias="X-User-Id"),
) -> int:
    """
    Read the authenticated user id from the X-User-Id header.

    Token verification happens upstream; this service only trusts the id the
    gateway forwards.

    Raises:
        AuthenticationError: If the header is missing or not a positive integer
    """
    if not x_user_id:
        raise AuthenticationError("Missing X-User-Id header")

    try:
        user_id = int(x_user_id.strip())
    except ValueError as e:
        raise AuthenticationError("X-User-Id must be an integer") from e

    if user_id <= 0:
        raise AuthenticationError("X-User-Id must be positive")
    return user_id
