from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

import attrs
from pydantic import SecretStr

from src.platform.exception.exceptions import (
    AuthenticationError,
    DomainError,
    ForbiddenError,
    LoginError,
)


if TYPE_CHECKING:
    from src.service.marketplace.app.interface.i_password_hasher import IPasswordHasher


class UserRole(StrEnum):
    BUYER = 'buyer'
    SELLER = 'seller'
    ADMIN = 'admin'
    ENTERPRISE_VENDOR = 'enterprise_vendor'
    ENTERPRISE_BUYER = 'enterprise_buyer'


# Roles a visitor may pick when registering; admins are created by the fixture loader
SELF_REGISTRABLE_ROLES = frozenset(
    {UserRole.BUYER, UserRole.SELLER, UserRole.ENTERPRISE_VENDOR, UserRole.ENTERPRISE_BUYER}
)
SELLING_ROLES = frozenset({UserRole.SELLER, UserRole.ENTERPRISE_VENDOR, UserRole.ADMIN})
QUOTE_BUYING_ROLES = frozenset({UserRole.BUYER, UserRole.ENTERPRISE_BUYER})


@attrs.define
class UserEntity:
    email: str = ''
    name: str = ''
    hashed_password: str = attrs.field(default='', repr=False)
    id: Optional[int] = None
    role: UserRole = UserRole.BUYER
    is_active: bool = True
    is_verified: bool = False
    created_at: Optional[datetime] = None

    @property
    def can_sell(self) -> bool:
        return self.role in SELLING_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def validate_for_authentication(self) -> None:
        if not self.email:
            raise AuthenticationError('LOGIN_BAD_CREDENTIALS')
        self.validate_active()

    def validate_active(self) -> None:
        if not self.is_active:
            raise ForbiddenError('User is inactive')

    @staticmethod
    def validate_user_exists(user_entity: Optional['UserEntity']) -> 'UserEntity':
        if not user_entity:
            raise LoginError('LOGIN_BAD_CREDENTIALS')
        return user_entity

    @staticmethod
    def validate_role(role: str) -> UserRole:
        valid_roles = sorted(r.value for r in SELF_REGISTRABLE_ROLES)
        if role not in valid_roles:
            raise DomainError(f'Invalid role: {role}. Must be one of: {", ".join(valid_roles)}')
        return UserRole(role)

    def set_password(self, plain_password: str, password_hasher: 'IPasswordHasher') -> None:
        if len(plain_password) < 8:
            raise DomainError('Password must be at least 8 characters')
        self.hashed_password = password_hasher.hash_password(
            plain_password=SecretStr(plain_password)
        )

    def verify(self) -> 'UserEntity':
        return attrs.evolve(self, is_verified=True)
