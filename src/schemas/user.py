"""User management schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from src.models.enums import Role


class UserUpdateMe(BaseModel):
    """Fields a user may change on their own account.

    Password fields are accepted only so the endpoint can point the caller at
    /update-my-password instead of silently ignoring them.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = None
    password_confirm: str | None = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class UserAdminUpdate(BaseModel):
    """Admin update of another user. Passwords cannot be set here."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    role: Role | None = None
    photo: str | None = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value
