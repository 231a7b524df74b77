"""Auth and user Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import EmailStr, Field

from propertyhub.domain.enums import UserRole
from propertyhub.schemas.common import CamelModel

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = None
    role: UserRole = UserRole.USER

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

class RefreshRequest(CamelModel):
    refresh_token: str

class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str

class ForgotPasswordRequest(CamelModel):
    email: EmailStr

class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str

class TokenRequest(CamelModel):
    token: str

class ResendVerificationRequest(CamelModel):
    email: EmailStr

class UserOut(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: str
    is_active: bool
    is_email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

class AuthResponse(CamelModel):
    user: UserOut
    tokens: TokenPair

class ResetTokenStatus(CamelModel):
    valid: bool

class UserAdminUpdate(CamelModel):
    role: UserRole | None = None
    is_active: bool | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None

class UserProfileUpdate(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = None
