"""Authentication request and response models."""

from typing import Annotated, Literal

from pydantic import AfterValidator, Field, field_validator

from src.savemate.core.models.base import ApiModel
from src.savemate.core.models.identity import Role
from src.savemate.core.security import MAX_PASSWORD_BYTES, exceeds_password_bytes

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _fits_bcrypt(value: str) -> str:
    if exceeds_password_bytes(value):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
    return value


NewPassword = Annotated[str, Field(min_length=8, max_length=72), AfterValidator(_fits_bcrypt)]


class RegisterRequest(ApiModel):
    email: str = Field(max_length=320, pattern=EMAIL_PATTERN)
    password: NewPassword
    role: Literal[Role.USER, Role.BUSINESS] = Role.USER

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(ApiModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=72)


class RefreshRequest(ApiModel):
    refresh_token: str | None = None


class ForgotPasswordRequest(ApiModel):
    email: str = Field(min_length=3, max_length=320)


class ResetPasswordRequest(ApiModel):
    token: str = Field(min_length=1, max_length=256)
    new_password: NewPassword


class AccessTokenResponse(ApiModel):
    access_token: str


class ForgotPasswordResponse(ApiModel):
    ok: bool = True
    reset_token: str | None = None


class MeResponse(ApiModel):
    id: str
    email: str
    role: Role
    business_id: str | None = None
