"""User administration and profile service."""


from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.exceptions import NotFoundError
from propertyhub.core.pagination import PaginationParams
from propertyhub.domain.user import User
from propertyhub.repositories.user import UserRepository
from propertyhub.schemas.user import UserAdminUpdate, UserProfileUpdate

class UserService:
    def __init__(self, session: AsyncSession):
        self._repo = UserRepository(session)

    async def list_users(
        self,
        pagination: PaginationParams,
        role: str | None = None,
        is_active: bool | None = None,
    ):
        return await self._repo.list(
            **pagination.window(),
            filters={"role": role, "is_active": is_active},
        )

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def update_user(self, user_id: str, data: UserAdminUpdate) -> User:
        user = await self.get_user(user_id)
        return await self._repo.apply(user, **data.model_dump(exclude_unset=True, exclude_none=True))

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        return await self._repo.apply(user, **data.model_dump(exclude_unset=True))
