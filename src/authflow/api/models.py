"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.

Request fields are optional at the schema level: presence and format
are business rules checked by the domain service, which reports them
as ValidationError (HTTP 400) with a caller-friendly message.
"""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    role: str | None = Field(default=None, description='Account role: "admin" or "user"')
    email: str | None = Field(default=None, description="Email address to register")
    password: str | None = Field(default=None, description="Account password")


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    user_id: str = Field(serialization_alias="userId")


class VerifyCodeRequest(BaseModel):
    """Request model for email verification."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId")
    code: str | None = Field(default=None, description="6-digit verification code")


class LoginRequest(BaseModel):
    """Request model for login."""

    email: str | None = None
    password: str | None = None


class UserOut(BaseModel):
    """Public identity of an account."""

    id: str
    email: str
    role: str


class LoginResponse(BaseModel):
    """Response model for successful login."""

    message: str
    user: UserOut


class MessageResponse(BaseModel):
    """Response carrying only a status message."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
