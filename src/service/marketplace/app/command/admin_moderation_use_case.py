from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import ConflictError, DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.category_entity import Category
from src.service.marketplace.domain.entity.product_entity import Product
from src.service.marketplace.domain.entity.user_entity import UserEntity


class AdminModerationUseCase:
    """Admin-only writes: user verification, product moderation, category management."""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    # ========== Users ==========

    @Logger.io
    async def verify_user(self, *, user_id: int) -> UserEntity:
        async with self.uow:
            user = await self.uow.user_repo.get_by_id(user_id=user_id)
            if not user:
                raise NotFoundError('User not found')
            if not user.is_verified:
                user = await self.uow.user_repo.update(user=user.verify())
                await self.uow.commit()
        return user

    # ========== Products ==========

    async def _get_product(self, product_id: int) -> Product:
        product = await self.uow.product_repo.get_by_id(product_id=product_id)
        if not product:
            raise NotFoundError('Product not found')
        return product

    @Logger.io
    async def approve_product(self, *, product_id: int) -> Product:
        async with self.uow:
            product = await self._get_product(product_id)
            product = await self.uow.product_repo.update(product=product.approve())
            await self.uow.commit()
        return product

    @Logger.io
    async def suspend_product(self, *, product_id: int) -> Product:
        async with self.uow:
            product = await self._get_product(product_id)
            product = await self.uow.product_repo.update(product=product.suspend())
            await self.uow.commit()
        Logger.base.warning(f'🚫 [ADMIN] Product {product_id} suspended')
        return product

    # ========== Categories ==========

    @Logger.io
    async def create_category(
        self, *, name: str, description: Optional[str] = None, parent_id: Optional[int] = None
    ) -> Category:
        category = Category.create(name=name, description=description, parent_id=parent_id)
        async with self.uow:
            if await self.uow.category_repo.get_by_name(name=category.name):
                raise ConflictError(f'Category {category.name} already exists')
            if parent_id is not None and not await self.uow.category_repo.get_by_id(
                category_id=parent_id
            ):
                raise NotFoundError('Parent category not found')
            category = await self.uow.category_repo.create(category=category)
            await self.uow.commit()
        return category

    @Logger.io
    async def delete_category(self, *, category_id: int) -> None:
        async with self.uow:
            if not await self.uow.category_repo.get_by_id(category_id=category_id):
                raise NotFoundError('Category not found')
            if await self.uow.product_repo.count_by_category(category_id=category_id):
                raise DomainError('Cannot delete a category that still has products')
            await self.uow.category_repo.delete(category_id=category_id)
            await self.uow.commit()
