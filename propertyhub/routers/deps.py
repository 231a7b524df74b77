"""Shared FastAPI dependencies: bearer-token authentication and role guards."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.exceptions import ForbiddenError, UnauthorizedError
from propertyhub.core.security import decode_access_token
from propertyhub.db.base import get_db
from propertyhub.domain.enums import UserRole
from propertyhub.domain.user import User
from propertyhub.repositories.user import UserRepository

# auto_error=False: missing credentials surface as our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> User | None:
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise UnauthorizedError("Invalid or expired token")
    user = await UserRepository(session).get_by_id(payload["sub"])
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")
    return user


async def get_current_user(
    user: User | None = Depends(get_current_user_optional),
) -> User:
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user


def require_roles(*roles: UserRole | str) -> Callable[..., Coroutine[Any, Any, User]]:
    """Dependency factory: the caller must hold one of ``roles``."""
    allowed = {r.value if isinstance(r, UserRole) else r for r in roles}

    async def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise ForbiddenError("Insufficient permissions")
        return user

    return _guard


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)
require_staff = require_roles(
    UserRole.ADMIN,
    UserRole.SUPER_ADMIN,
    UserRole.AGENT,
    UserRole.LANDLORD,
    UserRole.PROPERTY_MANAGER,
)
