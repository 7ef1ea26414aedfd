from abc import ABC, abstractmethod
from typing import Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole


class IUserRepo(ABC):
    """User persistence; users are never hard-deleted"""

    @abstractmethod
    async def create(self, *, user: UserEntity) -> UserEntity:
        """Raise ConflictError when the email is already registered"""
        pass

    @abstractmethod
    async def get_by_id(self, *, user_id: int) -> Optional[UserEntity]:
        pass

    @abstractmethod
    async def get_by_email(self, *, email: str) -> Optional[UserEntity]:
        """Return the user including hashed_password, for login"""
        pass

    @abstractmethod
    async def update(self, *, user: UserEntity) -> UserEntity:
        pass

    @abstractmethod
    async def list_users(
        self, *, page: PageRequest, role: Optional[UserRole] = None
    ) -> Page[UserEntity]:
        pass
