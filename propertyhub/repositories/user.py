"""User and refresh-token repositories."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, update

from propertyhub.domain.token import RefreshToken
from propertyhub.domain.user import User
from propertyhub.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            self._base_query().where(func.lower(User.email) == email.lower())
        )
        return result.scalars().first()

    async def get_by_reset_token(self, token: str) -> User | None:
        result = await self._session.execute(
            self._base_query().where(User.password_reset_token == token)
        )
        return result.scalars().first()

    async def get_by_verification_token(self, token: str) -> User | None:
        result = await self._session.execute(
            self._base_query().where(User.email_verification_token == token)
        )
        return result.scalars().first()


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    async def get_active(self, token: str) -> RefreshToken | None:
        """Return the unrevoked token row; expiry is checked by the caller."""
        result = await self._session.execute(
            self._base_query()
            .where(RefreshToken.token == token)
            .where(RefreshToken.is_revoked.is_(False))
        )
        return result.scalars().first()

    async def revoke_all_for_user(self, user_id: str) -> int:
        result = await self._session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .where(RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount

