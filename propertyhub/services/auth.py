"""Authentication service: registration, login, token rotation, password flows.

Access tokens are stateless JWTs; refresh, reset and verification tokens are
opaque random hex strings stored server-side so they can be revoked.

Rule: No FastAPI here. Pure Python business logic.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.config import settings
from propertyhub.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from propertyhub.core.security import (
    create_access_token,
    generate_token,
    hash_password,
    password_policy_errors,
    verify_password,
)
from propertyhub.domain.enums import SELF_SERVICE_ROLES
from propertyhub.domain.mixins import as_utc
from propertyhub.domain.user import User
from propertyhub.repositories.user import RefreshTokenRepository, UserRepository
from propertyhub.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPair,
)

logger = logging.getLogger(__name__)


def _check_password_policy(password: str) -> None:
    errors = password_policy_errors(password)
    if errors:
        raise ValidationError("; ".join(errors))


class AuthService:
    def __init__(self, session: AsyncSession):
        self._users = UserRepository(session)
        self._tokens = RefreshTokenRepository(session)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def _issue_tokens(self, user: User) -> TokenPair:
        access = create_access_token(
            user.id, claims={"email": user.email, "role": user.role}
        )
        refresh = generate_token(64)
        await self._tokens.create(
            token=refresh,
            user_id=user.id,
            expires_at=datetime.now(timezone.utc)
            + timedelta(days=settings.refresh_token_expire_days),
        )
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            expires_in=settings.access_token_expire_minutes * 60,
        )

    async def refresh(self, refresh_token: str) -> tuple[User, TokenPair]:
        stored = await self._tokens.get_active(refresh_token)
        if stored is None or as_utc(stored.expires_at) <= datetime.now(timezone.utc):
            raise UnauthorizedError("Invalid or expired refresh token")

        user = await self._users.get_by_id(stored.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("Invalid or expired refresh token")

        # Rotate: the presented token can never be used again
        await self._tokens.apply(stored, is_revoked=True)
        return user, await self._issue_tokens(user)

    async def logout(self, user: User) -> None:
        revoked = await self._tokens.revoke_all_for_user(user.id)
        logger.info("User %s logged out (%d refresh tokens revoked)", user.id, revoked)

    # ------------------------------------------------------------------
    # Registration / login
    # ------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> tuple[User, TokenPair]:
        if data.role not in SELF_SERVICE_ROLES:
            raise ValidationError(f"Role '{data.role}' cannot be self-assigned")
        _check_password_policy(data.password)
        if await self._users.get_by_email(data.email):
            raise ConflictError("A user with this email already exists")

        user = await self._users.create(
            email=data.email.lower(),
            hashed_password=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            phone=data.phone,
            role=data.role,
            email_verification_token=generate_token(32),
        )
        logger.info(
            "Verification link for %s: /verify-email?token=%s",
            user.email,
            user.email_verification_token,
        )
        return user, await self._issue_tokens(user)

    async def login(self, data: LoginRequest) -> tuple[User, TokenPair]:
        user = await self._users.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.hashed_password):
            logger.warning("Failed login attempt for %s", data.email)
            raise UnauthorizedError("Invalid credentials")
        if not user.is_active:
            logger.warning("Login attempt for deactivated account %s", data.email)
            raise UnauthorizedError("Account is deactivated")

        await self._users.apply(user, last_login_at=datetime.now(timezone.utc))
        return user, await self._issue_tokens(user)

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    async def change_password(self, user: User, data: ChangePasswordRequest) -> None:
        if not verify_password(data.current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect")
        _check_password_policy(data.new_password)
        await self._users.apply(user, hashed_password=hash_password(data.new_password))
        await self._tokens.revoke_all_for_user(user.id)

    async def forgot_password(self, email: str) -> None:
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("User")
        token = generate_token(32)
        await self._users.apply(
            user,
            password_reset_token=token,
            password_reset_expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=settings.password_reset_expire_minutes),
        )
        logger.info("Password reset link for %s: /reset-password?token=%s", user.email, token)

    async def _user_for_reset_token(self, token: str) -> User | None:
        user = await self._users.get_by_reset_token(token)
        if user is None:
            return None
        expires = as_utc(user.password_reset_expires_at)
        if expires is None or expires <= datetime.now(timezone.utc):
            return None
        return user

    async def validate_reset_token(self, token: str) -> bool:
        return await self._user_for_reset_token(token) is not None

    async def reset_password(self, data: ResetPasswordRequest) -> None:
        user = await self._user_for_reset_token(data.token)
        if user is None:
            raise ValidationError("Invalid or expired reset token")
        _check_password_policy(data.new_password)
        await self._users.apply(
            user,
            hashed_password=hash_password(data.new_password),
            password_reset_token=None,
            password_reset_expires_at=None,
        )
        await self._tokens.revoke_all_for_user(user.id)

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    async def verify_email(self, token: str) -> User:
        user = await self._users.get_by_verification_token(token)
        if user is None:
            raise ValidationError("Invalid verification token")
        return await self._users.apply(
            user, is_email_verified=True, email_verification_token=None
        )

    async def resend_verification(self, email: str) -> None:
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("User")
        if user.is_email_verified:
            raise ValidationError("Email is already verified")
        token = generate_token(32)
        await self._users.apply(user, email_verification_token=token)
        logger.info("Verification link for %s: /verify-email?token=%s", user.email, token)
