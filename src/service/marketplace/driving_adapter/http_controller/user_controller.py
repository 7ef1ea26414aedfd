from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Cookie, Depends, Response, status

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.create_user_use_case import CreateUserUseCase
from src.service.marketplace.app.interface.i_password_hasher import IPasswordHasher
from src.service.marketplace.app.interface.i_user_repo import IUserRepo
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.user_schema import (
    CreateUserRequest,
    LoginRequest,
    UserResponse,
)


router = APIRouter()


@inject
async def get_current_user(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
) -> UserEntity:
    """Rebuild the caller from the JWT cookie (no DB query)"""
    return jwt_auth.get_current_user_info_from_jwt(token)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_user(
    request: CreateUserRequest,
    use_case: CreateUserUseCase = Depends(CreateUserUseCase.depends),
) -> ApiResponse[UserResponse]:
    user_entity = await use_case.execute(
        email=request.email,
        password=request.password.get_secret_value(),
        name=request.name,
        role=request.role,
    )
    return ApiResponse(data=UserResponse.model_validate(user_entity))


@router.post('/login')
@Logger.io
@inject
async def login(
    response: Response,
    request: LoginRequest,
    user_repo: IUserRepo = Depends(Provide[Container.user_repo]),
    password_hasher: IPasswordHasher = Depends(Provide[Container.password_hasher]),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> ApiResponse[UserResponse]:
    user_entity = await jwt_auth.authenticate_user(
        user_repo=user_repo,
        password_hasher=password_hasher,
        email=request.email,
        password=request.password.get_secret_value(),
    )

    token = jwt_auth.create_jwt_token(user_entity)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite='lax',
        secure=not settings.DEBUG,
    )

    return ApiResponse(data=UserResponse.model_validate(user_entity))


@router.post('/logout')
@Logger.io
async def logout(response: Response) -> ApiResponse[bool]:
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME)
    return ApiResponse(data=True)


@router.get('')
@Logger.io
async def get_me(current_user: UserEntity = Depends(get_current_user)) -> ApiResponse[UserResponse]:
    return ApiResponse(data=UserResponse.model_validate(current_user))
