"""User router — own profile plus admin user management."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.pagination import PaginationParams
from propertyhub.core.response import DataResponse, ListResponse, paginated
from propertyhub.db.base import get_db
from propertyhub.domain.enums import UserRole
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user, require_admin
from propertyhub.schemas.user import UserAdminUpdate, UserOut, UserProfileUpdate
from propertyhub.services.user import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.patch("/me", response_model=DataResponse[UserOut])
async def update_profile(
    body: UserProfileUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    updated = await UserService(session).update_profile(user, body)
    return {"data": UserOut.model_validate(updated)}


@router.get("", response_model=ListResponse[UserOut])
async def list_users(
    role: Optional[UserRole] = Query(default=None),
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    pagination: PaginationParams = Depends(),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    items, total = await UserService(session).list_users(
        pagination, role=role.value if role else None, is_active=is_active
    )
    return paginated(
        [UserOut.model_validate(u) for u in items], total, pagination.page, pagination.limit
    )


@router.get("/{user_id}", response_model=DataResponse[UserOut])
async def get_user(
    user_id: str,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    return {"data": UserOut.model_validate(await UserService(session).get_user(user_id))}


@router.patch("/{user_id}", response_model=DataResponse[UserOut])
async def update_user(
    user_id: str,
    body: UserAdminUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    user = await UserService(session).update_user(user_id, body)
    return {"data": UserOut.model_validate(user)}
