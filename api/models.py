"""
API request and response models for Gatehouse REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclass in auth/models.py, which
owns the internal domain representation. Route handlers map between the two.

Wire format: camelCase keys (firstName, userName, tempToken, ...) and "_id"
for the user identifier. populate_by_name=True lets tests and internal callers
build models with snake_case keyword arguments.
"""

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from auth.models import User

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt reads at most 72 bytes of a password and bcrypt 5.x rejects longer input.
PASSWORD_MAX_BYTES = 72

_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
_Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, max_length=255, pattern=EMAIL_PATTERN)]


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded.")
    return value


_Password = Annotated[str, Field(min_length=8), AfterValidator(_check_password_bytes)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(_CamelModel):
    """Request body for POST /api/v1/user/register."""

    first_name: _Name
    last_name: _Name
    email: _Email
    password: _Password


class LoginRequest(_CamelModel):
    """Request body for POST /api/v1/user/login.

    No strength rules here -- login must accept whatever was registered, and
    a wrong-shaped password simply fails verification.
    """

    user_name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class NewPasswordRequest(_CamelModel):
    """Request body for PUT /api/v1/user/new-password."""

    temp_token: str = Field(min_length=1, max_length=64)
    password: _Password


class ForgotPasswordRequest(_CamelModel):
    """Request body for PUT /api/v1/user/forgot-password."""

    email: _Email


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(_CamelModel):
    """Public view of an account. Never includes the password hash or reset token."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(alias="_id")
    first_name: str
    last_name: str
    email: str
    user_name: str
    is_email_verified: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            user_name=user.user_name,
            is_email_verified=user.is_email_verified,
        )


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    """Structured error body used by every non-2xx response."""

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
