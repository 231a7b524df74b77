"""Authentication router — register, login, token refresh and password flows."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.response import DataResponse, MessageResponse
from propertyhub.db.base import get_db
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user
from propertyhub.schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    ResetTokenStatus,
    TokenRequest,
    UserOut,
)
from propertyhub.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_payload(user: User, tokens) -> dict:
    return {"data": AuthResponse(user=UserOut.model_validate(user), tokens=tokens)}


@router.post("/register", response_model=DataResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_db)):
    user, tokens = await AuthService(session).register(body)
    return _auth_payload(user, tokens)


@router.post("/login", response_model=DataResponse[AuthResponse])
async def login(body: LoginRequest, session: AsyncSession = Depends(get_db)):
    user, tokens = await AuthService(session).login(body)
    return _auth_payload(user, tokens)


@router.post("/refresh", response_model=DataResponse[AuthResponse])
async def refresh(body: RefreshRequest, session: AsyncSession = Depends(get_db)):
    user, tokens = await AuthService(session).refresh(body.refresh_token)
    return _auth_payload(user, tokens)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await AuthService(session).logout(user)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=DataResponse[UserOut])
async def me(user: User = Depends(get_current_user)):
    return {"data": UserOut.model_validate(user)}


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await AuthService(session).change_password(user, body)
    return {"message": "Password changed successfully"}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: ForgotPasswordRequest, session: AsyncSession = Depends(get_db)):
    await AuthService(session).forgot_password(body.email)
    return {"message": "Password reset instructions sent"}


@router.post("/validate-reset-token", response_model=DataResponse[ResetTokenStatus])
async def validate_reset_token(body: TokenRequest, session: AsyncSession = Depends(get_db)):
    valid = await AuthService(session).validate_reset_token(body.token)
    return {"data": ResetTokenStatus(valid=valid)}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, session: AsyncSession = Depends(get_db)):
    await AuthService(session).reset_password(body)
    return {"message": "Password reset successfully"}


@router.post("/verify-email", response_model=DataResponse[UserOut])
async def verify_email(body: TokenRequest, session: AsyncSession = Depends(get_db)):
    user = await AuthService(session).verify_email(body.token)
    return {"data": UserOut.model_validate(user)}


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: ResendVerificationRequest, session: AsyncSession = Depends(get_db)
):
    await AuthService(session).resend_verification(body.email)
    return {"message": "Verification email sent"}
