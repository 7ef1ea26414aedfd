import uuid
from typing import Optional

from sqlalchemy import or_, select
from uuid_utils import UUID

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_order_repo import IOrderRepo
from src.service.marketplace.domain.entity.order_entity import (
    Order,
    SALE_STATUSES,
    OrderStatus,
    ShippingAddress,
)
from src.service.marketplace.driven_adapter.model.order_model import OrderModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


def _pg_uuid(value: UUID) -> uuid.UUID:
    """asyncpg speaks stdlib uuid.UUID; entities carry uuid_utils.UUID"""
    return uuid.UUID(str(value))


class OrderRepoImpl(SessionRepo, IOrderRepo):
    @Logger.io
    async def create(self, *, order: Order) -> Order:
        async with self._get_session() as session:
            order_model = OrderModel(
                id=_pg_uuid(order.id),
                buyer_id=order.buyer_id,
                seller_id=order.seller_id,
                product_id=order.product_id,
                total_amount=order.total_amount,
                platform_fee=order.platform_fee,
                seller_amount=order.seller_amount,
                shipping_address=(
                    order.shipping_address.to_dict() if order.shipping_address else None
                ),
                status=order.status.value,
                payment_intent_id=order.payment_intent_id,
            )
            session.add(order_model)
            await session.flush()
            await session.refresh(order_model)
            return self._to_entity(order_model)

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        async with self._get_session() as session:
            order_model = await session.get(OrderModel, _pg_uuid(order_id))
            return self._to_entity(order_model) if order_model else None

    @Logger.io
    async def get_by_payment_intent_id(self, *, payment_intent_id: str) -> Optional[Order]:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.payment_intent_id == payment_intent_id)
            )
            order_model = result.scalar_one_or_none()
            return self._to_entity(order_model) if order_model else None

    @Logger.io
    async def get_sale_for_product(self, *, product_id: int) -> Optional[Order]:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel)
                .where(
                    OrderModel.product_id == product_id,
                    OrderModel.status.in_([s.value for s in SALE_STATUSES]),
                )
                .order_by(OrderModel.paid_at)
                .limit(1)
            )
            order_model = result.scalar_one_or_none()
            return self._to_entity(order_model) if order_model else None

    @Logger.io
    async def update(self, *, order: Order) -> Order:
        async with self._get_session() as session:
            order_model = await session.get(OrderModel, _pg_uuid(order.id))
            if order_model is None:
                raise NotFoundError(f'Order {order.id} not found')
            order_model.status = order.status.value
            order_model.payment_intent_id = order.payment_intent_id
            order_model.tracking_number = order.tracking_number
            order_model.paid_at = order.paid_at
            order_model.shipped_at = order.shipped_at
            order_model.delivered_at = order.delivered_at
            await session.flush()
            await session.refresh(order_model)
            return self._to_entity(order_model)

    @Logger.io
    async def list_for_user(
        self, *, user_id: int, status: Optional[OrderStatus], page: PageRequest
    ) -> Page[Order]:
        stmt = select(OrderModel).where(
            or_(OrderModel.buyer_id == user_id, OrderModel.seller_id == user_id)
        )
        if status is not None:
            stmt = stmt.where(OrderModel.status == status.value)
        stmt = stmt.order_by(OrderModel.created_at.desc())
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @Logger.io
    async def list_all(self, *, status: Optional[OrderStatus], page: PageRequest) -> Page[Order]:
        stmt = select(OrderModel)
        if status is not None:
            stmt = stmt.where(OrderModel.status == status.value)
        stmt = stmt.order_by(OrderModel.created_at.desc())
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @staticmethod
    def _to_entity(order_model: OrderModel) -> Order:
        address = order_model.shipping_address
        return Order(
            id=UUID(str(order_model.id)),
            buyer_id=order_model.buyer_id,
            seller_id=order_model.seller_id,
            product_id=order_model.product_id,
            total_amount=order_model.total_amount,
            platform_fee=order_model.platform_fee,
            seller_amount=order_model.seller_amount,
            shipping_address=ShippingAddress(**address) if address else None,
            status=OrderStatus(order_model.status),
            payment_intent_id=order_model.payment_intent_id,
            tracking_number=order_model.tracking_number,
            created_at=order_model.created_at,
            updated_at=order_model.updated_at,
            paid_at=order_model.paid_at,
            shipped_at=order_model.shipped_at,
            delivered_at=order_model.delivered_at,
        )
