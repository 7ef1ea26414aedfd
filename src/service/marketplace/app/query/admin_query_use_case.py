from datetime import datetime, timezone
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.admin_stats import AdminStats
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_admin_stats_query_repo import IAdminStatsQueryRepo
from src.service.marketplace.app.interface.i_category_repo import ICategoryRepo
from src.service.marketplace.app.interface.i_user_repo import IUserRepo
from src.service.marketplace.domain.entity.category_entity import Category
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole


class AdminQueryUseCase:
    def __init__(
        self,
        *,
        admin_stats_query_repo: IAdminStatsQueryRepo,
        user_repo: IUserRepo,
        category_repo: ICategoryRepo,
    ) -> None:
        self.admin_stats_query_repo = admin_stats_query_repo
        self.user_repo = user_repo
        self.category_repo = category_repo

    @classmethod
    @inject
    def depends(
        cls,
        admin_stats_query_repo: IAdminStatsQueryRepo = Depends(
            Provide[Container.admin_stats_query_repo]
        ),
        user_repo: IUserRepo = Depends(Provide[Container.user_repo]),
        category_repo: ICategoryRepo = Depends(Provide[Container.category_repo]),
    ) -> Self:
        return cls(
            admin_stats_query_repo=admin_stats_query_repo,
            user_repo=user_repo,
            category_repo=category_repo,
        )

    @Logger.io
    async def get_stats(self, *, now: Optional[datetime] = None) -> AdminStats:
        return await self.admin_stats_query_repo.get_stats(now=now or datetime.now(timezone.utc))

    @Logger.io
    async def list_users(
        self, *, page: PageRequest, role: Optional[UserRole] = None
    ) -> Page[UserEntity]:
        return await self.user_repo.list_users(page=page, role=role)

    @Logger.io
    async def list_categories(self) -> List[Category]:
        return await self.category_repo.list_all()
