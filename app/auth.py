from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.db.session import get_session
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User, RoleEnum
from app.db.repositories import users as user_store
from app.core.security import ACCESS_TOKEN_TYPE, decode_token
from app.core.exceptions import ForbiddenError, UnauthenticatedError

# auto_error=False so a missing header is reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer credentials containing the JWT token
        session: Database session (injected)

    Returns:
        User object

    Raises:
        UnauthenticatedError: If the token is missing, invalid, expired, or
            names a user that no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("No token provided or invalid format")

    try:
        payload = decode_token(credentials.credentials)
    except ValueError as e:
        raise UnauthenticatedError(str(e))

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise UnauthenticatedError("Invalid token type")

    user = await user_store.get_user(session, payload.get("sub"))
    if not user:
        raise UnauthenticatedError("User not found")
    return user


def role_required(required_role: RoleEnum):
    """
    Dependency to require specific role for endpoint access.

    Args:
        required_role: Role required (e.g. ``RoleEnum.organizer``)

    Returns:
        Dependency function
    """
    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role != required_role:
            raise ForbiddenError(f"Access denied. {required_role.value.capitalize()} role required.")
        return user
    return role_checker
