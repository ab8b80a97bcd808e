"""API error response schemas."""

from typing import Any, Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class UnauthorizedErrorDetails(BaseModel):
    reason: Literal["missing_token", "token_invalid", "token_expired"]


class UnauthorizedError(BaseModel):
    code: Literal["UNAUTHORIZED"]
    message: str
    details: UnauthorizedErrorDetails


class InvalidCredentialsError(BaseModel):
    code: Literal["INVALID_CREDENTIALS"]
    message: str


class ForbiddenError(BaseModel):
    code: Literal["FORBIDDEN"]
    message: str


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class ConflictError(BaseModel):
    code: Literal["EMAIL_ALREADY_REGISTERED", "ALREADY_REGISTERED"]
    message: str

