from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.order_entity import Order, OrderStatus


class UpdateOrderStatusUseCase:
    """Seller ships, buyer confirms delivery, either party cancels a pending order."""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    async def _get_order(self, order_id: UUID) -> Order:
        order = await self.uow.order_repo.get_by_id(order_id=order_id)
        if not order:
            raise NotFoundError('Order not found')
        return order

    @Logger.io
    async def ship(self, *, order_id: UUID, seller_id: int, tracking_number: str) -> Order:
        async with self.uow:
            order = await self._get_order(order_id)
            if order.seller_id != seller_id:
                raise ForbiddenError('Only the seller can ship this order')
            order = await self.uow.order_repo.update(
                order=order.ship(tracking_number=tracking_number)
            )
            await self.uow.commit()
        return order

    @Logger.io
    async def confirm_delivery(self, *, order_id: UUID, buyer_id: int) -> Order:
        async with self.uow:
            order = await self._get_order(order_id)
            if order.buyer_id != buyer_id:
                raise ForbiddenError('Only the buyer can confirm delivery')
            order = await self.uow.order_repo.update(order=order.confirm_delivery())
            await self.uow.commit()
        return order

    @Logger.io
    async def cancel(self, *, order_id: UUID, user_id: int) -> Order:
        async with self.uow:
            order = await self._get_order(order_id)
            if not order.is_party(user_id):
                raise ForbiddenError('Only the buyer or seller can cancel this order')
            if order.status != OrderStatus.PENDING:
                raise DomainError('Only pending orders can be cancelled')

            # The product is still active while the order is pending; its status is left alone
            order = await self.uow.order_repo.update(order=order.cancel())
            await self.uow.commit()
        return order
