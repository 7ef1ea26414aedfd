from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import FeatureDisabledError, ForbiddenError
from src.service.marketplace.domain.entity.user_entity import (
    QUOTE_BUYING_ROLES,
    SELLING_ROLES,
    UserEntity,
    UserRole,
)
from src.service.marketplace.driving_adapter.http_controller.user_controller import (
    get_current_user as get_user_from_controller,
)


class RoleAuthStrategy:
    @staticmethod
    def can_bid(user: UserEntity) -> bool:
        return user.role in (UserRole.BUYER, UserRole.ENTERPRISE_BUYER)

    @staticmethod
    def can_sell(user: UserEntity) -> bool:
        return user.role in SELLING_ROLES

    @staticmethod
    def can_request_quote(user: UserEntity) -> bool:
        return user.role in QUOTE_BUYING_ROLES

    @staticmethod
    def is_admin(user: UserEntity) -> bool:
        return user.role == UserRole.ADMIN

    @staticmethod
    def is_enterprise_vendor(user: UserEntity) -> bool:
        return user.role == UserRole.ENTERPRISE_VENDOR


def _span(name: str, user: UserEntity):
    return trace.get_tracer(__name__).start_as_current_span(
        name, attributes={'user.id': user.id or 0, 'user.role': user.role.value}
    )


async def get_current_user(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    return current_user


async def require_buyer(current_user: UserEntity = Depends(get_user_from_controller)) -> UserEntity:
    with _span('auth.require_buyer', current_user):
        if not RoleAuthStrategy.can_bid(current_user):
            raise ForbiddenError('Only buyers can perform this action')
        return current_user


async def require_seller(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    with _span('auth.require_seller', current_user):
        if not RoleAuthStrategy.can_sell(current_user):
            raise ForbiddenError('Only sellers can perform this action')
        return current_user


async def require_admin(current_user: UserEntity = Depends(get_user_from_controller)) -> UserEntity:
    with _span('auth.require_admin', current_user):
        if not RoleAuthStrategy.is_admin(current_user):
            raise ForbiddenError('Admin access required')
        return current_user


async def require_enterprise_vendor(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    if not RoleAuthStrategy.is_enterprise_vendor(current_user):
        raise ForbiddenError('Only enterprise vendors can perform this action')
    return current_user


async def require_quote_buyer(
    current_user: UserEntity = Depends(get_user_from_controller),
) -> UserEntity:
    if not RoleAuthStrategy.can_request_quote(current_user):
        raise ForbiddenError('Only buyers can request quotes')
    return current_user


async def require_industrial_quotes() -> None:
    if not settings.FEATURE_INDUSTRIAL_QUOTES:
        raise FeatureDisabledError('Industrial quotes are disabled')
