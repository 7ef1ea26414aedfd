from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_order_repo import IOrderRepo
from src.service.marketplace.domain.entity.order_entity import Order, OrderStatus
from src.service.marketplace.domain.entity.user_entity import UserEntity


class OrderQueryUseCase:
    def __init__(self, *, order_repo: IOrderRepo) -> None:
        self.order_repo = order_repo

    @classmethod
    @inject
    def depends(cls, order_repo: IOrderRepo = Depends(Provide[Container.order_repo])) -> Self:
        return cls(order_repo=order_repo)

    @Logger.io
    async def list_my_orders(
        self, *, user_id: int, status: Optional[OrderStatus], page: PageRequest
    ) -> Page[Order]:
        return await self.order_repo.list_for_user(user_id=user_id, status=status, page=page)

    @Logger.io
    async def get_order(self, *, order_id: UUID, user: UserEntity) -> Order:
        order = await self.order_repo.get_by_id(order_id=order_id)
        if not order:
            raise NotFoundError('Order not found')
        if not (user.is_admin or order.is_party(user.id)):  # type: ignore[arg-type]
            raise ForbiddenError('Access denied')
        return order

    @Logger.io
    async def list_all_orders(
        self, *, status: Optional[OrderStatus], page: PageRequest
    ) -> Page[Order]:
        return await self.order_repo.list_all(status=status, page=page)
