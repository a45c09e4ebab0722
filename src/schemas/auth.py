"""Authentication schemas."""

from datetime import datetime

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from src.models.enums import Role


class PasswordConfirmMixin(BaseModel):
    """New password plus its confirmation, which must match."""

    password: str = Field(..., min_length=8, max_length=128)
    password_confirm: str = Field(
        ..., validation_alias=AliasChoices("password_confirm", "passwordConfirm")
    )

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same")
        return self


class UserSignup(PasswordConfirmMixin):
    """User registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class UserLogin(BaseModel):
    """User login request. Missing fields are reported by the endpoint."""

    email: str | None = None
    password: str | None = None


class ForgotPassword(BaseModel):
    """Request a password reset email."""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class ResetPassword(PasswordConfirmMixin):
    """Redeem a reset token with a new password."""


class UpdatePassword(PasswordConfirmMixin):
    """Change the password of the logged-in user."""

    password_current: str = Field(
        ..., validation_alias=AliasChoices("password_current", "passwordCurrent")
    )


class UserResponse(BaseModel):
    """User information response. Never carries password or reset fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    photo: str
    role: Role
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    status: str = "success"
    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    """Plain status message."""

    status: str = "success"
    message: str | None = None
