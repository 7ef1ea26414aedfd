from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_user_repo import IUserRepo
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole
from src.service.marketplace.driven_adapter.model.user_model import UserModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class UserRepoImpl(SessionRepo, IUserRepo):
    @Logger.io
    async def create(self, *, user: UserEntity) -> UserEntity:
        async with self._get_session() as session:
            user_model = UserModel(
                email=user.email,
                hashed_password=user.hashed_password,
                name=user.name,
                role=user.role.value,
                is_active=user.is_active,
                is_verified=user.is_verified,
            )
            session.add(user_model)
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictError(f'User with email {user.email} already exists') from e
            await session.refresh(user_model)
            return self._to_entity(user_model)

    @Logger.io
    async def get_by_id(self, *, user_id: int) -> Optional[UserEntity]:
        async with self._get_session() as session:
            user_model = await session.get(UserModel, user_id)
            return self._to_entity(user_model) if user_model else None

    @Logger.io
    async def get_by_email(self, *, email: str) -> Optional[UserEntity]:
        async with self._get_session() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.email == email.strip().lower())
            )
            user_model = result.scalar_one_or_none()
            return self._to_entity(user_model) if user_model else None

    @Logger.io
    async def update(self, *, user: UserEntity) -> UserEntity:
        async with self._get_session() as session:
            user_model = await session.get(UserModel, user.id)
            if user_model is None:
                raise NotFoundError(f'User {user.id} not found')
            user_model.name = user.name
            user_model.role = user.role.value
            user_model.is_active = user.is_active
            user_model.is_verified = user.is_verified
            await session.flush()
            return self._to_entity(user_model)

    @Logger.io
    async def list_users(
        self, *, page: PageRequest, role: Optional[UserRole] = None
    ) -> Page[UserEntity]:
        stmt = select(UserModel).order_by(UserModel.created_at.desc(), UserModel.id.desc())
        if role is not None:
            stmt = stmt.where(UserModel.role == role.value)
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @staticmethod
    def _to_entity(user_model: UserModel) -> UserEntity:
        return UserEntity(
            id=user_model.id,
            email=user_model.email,
            name=user_model.name,
            hashed_password=user_model.hashed_password,
            role=UserRole(user_model.role),
            is_active=user_model.is_active,
            is_verified=user_model.is_verified,
            created_at=user_model.created_at,
        )
