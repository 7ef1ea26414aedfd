from typing import List, Optional

from sqlalchemy import delete, func, select

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_category_repo import ICategoryRepo
from src.service.marketplace.domain.entity.category_entity import Category
from src.service.marketplace.driven_adapter.model.category_model import CategoryModel
from src.service.marketplace.driven_adapter.model.product_model import ProductModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class CategoryRepoImpl(SessionRepo, ICategoryRepo):
    @Logger.io
    async def create(self, *, category: Category) -> Category:
        async with self._get_session() as session:
            category_model = CategoryModel(
                name=category.name,
                description=category.description,
                parent_id=category.parent_id,
            )
            session.add(category_model)
            await session.flush()
            await session.refresh(category_model)
            return self._to_entity(category_model)

    @Logger.io
    async def get_by_id(self, *, category_id: int) -> Optional[Category]:
        async with self._get_session() as session:
            category_model = await session.get(CategoryModel, category_id)
            return self._to_entity(category_model) if category_model else None

    @Logger.io
    async def get_by_name(self, *, name: str) -> Optional[Category]:
        async with self._get_session() as session:
            result = await session.execute(
                select(CategoryModel).where(func.lower(CategoryModel.name) == name.lower())
            )
            category_model = result.scalar_one_or_none()
            return self._to_entity(category_model) if category_model else None

    @Logger.io
    async def list_all(self) -> List[Category]:
        stmt = (
            select(CategoryModel, func.count(ProductModel.id))
            .outerjoin(ProductModel, ProductModel.category_id == CategoryModel.id)
            .group_by(CategoryModel.id)
            .order_by(CategoryModel.name)
        )
        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [
                self._to_entity(category_model, product_count=count)
                for category_model, count in result.all()
            ]

    @Logger.io
    async def delete(self, *, category_id: int) -> None:
        async with self._get_session() as session:
            await session.execute(delete(CategoryModel).where(CategoryModel.id == category_id))

    @staticmethod
    def _to_entity(category_model: CategoryModel, *, product_count: int = 0) -> Category:
        return Category(
            id=category_model.id,
            name=category_model.name,
            description=category_model.description,
            parent_id=category_model.parent_id,
            product_count=product_count,
            created_at=category_model.created_at,
        )
