"""Request/response schemas for auth endpoints. JSON keys are camelCase."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )


class RegisterRequest(_CamelModel):
    """Registration form. Missing fields are reported by the service, not by validation."""

    username: str | None = Field(default=None, description="Desired username")
    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="Password")
    confirm_password: str | None = Field(default=None, description="Password repeated")


class LoginRequest(_CamelModel):
    """Credentials for login; the identifier is tried as username, then as email."""

    username_or_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("usernameOrEmail", "username", "username_or_email"),
        description="Username or email",
    )
    password: str | None = Field(default=None, description="Password")


class UserProfile(_CamelModel):
    """Public view of a user (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    is_active: bool


class AuthResponse(_CamelModel):
    """Outcome of an auth operation: success flag, message, optional token and profile."""

    success: bool
    message: str
    token: str | None = Field(default=None, description="JWT bearer token (login only)")
    profile: UserProfile | None = None

    @classmethod
    def failure(cls, message: str) -> "AuthResponse":
        return cls(success=False, message=message)
