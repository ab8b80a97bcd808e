"""Authentication schemas."""

from pydantic import BaseModel, Field

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AuthPrincipal(BaseModel):
    """Normalized authenticated principal used by business services."""

    user_id: int = Field(ge=1)
    email: str = Field(min_length=1)


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320, pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=1024)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class User(BaseModel):
    id: int
    email: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
