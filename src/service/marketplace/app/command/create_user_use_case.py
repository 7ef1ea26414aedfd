"""
User registration (Use Case Layer)
"""

from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_password_hasher import IPasswordHasher
from src.service.marketplace.domain.entity.user_entity import UserEntity


class CreateUserUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork, password_hasher: IPasswordHasher) -> None:
        self.uow = uow
        self.password_hasher = password_hasher

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        password_hasher: IPasswordHasher = Depends(Provide[Container.password_hasher]),
    ) -> Self:
        return cls(uow=uow, password_hasher=password_hasher)

    @Logger.io
    async def execute(self, *, email: str, password: str, name: str, role: str) -> UserEntity:
        user_role = UserEntity.validate_role(role)
        email = email.strip().lower()

        user_entity = UserEntity(email=email, name=name.strip(), role=user_role)
        user_entity.set_password(password, self.password_hasher)

        async with self.uow:
            if await self.uow.user_repo.get_by_email(email=email):
                raise ConflictError(f'User with email {email} already exists')
            created = await self.uow.user_repo.create(user=user_entity)
            await self.uow.commit()
        return created
