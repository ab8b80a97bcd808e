"""User signup, login and identity routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.routes.dependencies import get_account_service, get_authenticated_principal
from app.schemas.auth import AuthPrincipal, LoginRequest, LoginResponse, SignupRequest, User
from app.schemas.error import ConflictError, ErrorResponse, InvalidCredentialsError, UnauthorizedError
from app.services.accounts import AccountService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/signup",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ConflictError}, 500: {"model": ErrorResponse}},
)
def signup(
    payload: SignupRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> User:
    return service.signup(email=payload.email, password=payload.password)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": InvalidCredentialsError}, 500: {"model": ErrorResponse}},
)
def login(
    payload: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> LoginResponse:
    return service.login(email=payload.email, password=payload.password)


@router.get(
    "/me",
    response_model=User,
    responses={401: {"model": UnauthorizedError}},
)
def me(principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)]) -> User:
    return User(id=principal.user_id, email=principal.email)
