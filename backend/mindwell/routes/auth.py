"""
MindWell Backend — Account Routes
=================================

What:  Registration, login and the current-user lookup.
How:   Successful registration and login return the public user plus a
       bearer token; the client sends it as `Authorization: Bearer <token>`.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from mindwell.dependencies import get_current_user, get_store
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import User
from mindwell.schemas.common import ErrorResponse
from mindwell.schemas.user import AuthResponse, UserResponse
from mindwell.services.auth_service import AuthService
from mindwell.validation import validate_credentials, validate_registration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Account"])


def get_auth_service(store: EntityStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    responses={400: {"description": "Invalid data or username taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    body: Any = Body(default=None),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    username, password, email = validate_registration(body)
    user, token = await service.register(username, password, email)
    return AuthResponse(user=UserResponse.model_validate(user), access_token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    body: Any = Body(default=None),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    username, password = validate_credentials(body)
    user, token = await service.login(username, password)
    return AuthResponse(user=UserResponse.model_validate(user), access_token=token)


@router.get("/user", response_model=UserResponse, summary="Current user")
async def current_user(user: User = Depends(get_current_user)) -> User:
    return user
