import uuid
from typing import Optional

from sqlalchemy import select
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_payment_repo import IPaymentRepo
from src.service.marketplace.domain.entity.payment_entity import Payment, PaymentStatus
from src.service.marketplace.driven_adapter.model.payment_model import PaymentModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class PaymentRepoImpl(SessionRepo, IPaymentRepo):
    @Logger.io
    async def create(self, *, payment: Payment) -> Payment:
        async with self._get_session() as session:
            payment_model = PaymentModel(
                user_id=payment.user_id,
                order_id=uuid.UUID(str(payment.order_id)),
                payment_intent_id=payment.payment_intent_id,
                amount=payment.amount,
                platform_fee=payment.platform_fee,
                net_amount=payment.net_amount,
                currency=payment.currency,
                status=payment.status.value,
                description=payment.description,
            )
            session.add(payment_model)
            await session.flush()
            await session.refresh(payment_model)
            return self._to_entity(payment_model)

    @Logger.io
    async def get_by_intent_id(self, *, payment_intent_id: str) -> Optional[Payment]:
        async with self._get_session() as session:
            result = await session.execute(
                select(PaymentModel).where(PaymentModel.payment_intent_id == payment_intent_id)
            )
            payment_model = result.scalar_one_or_none()
            return self._to_entity(payment_model) if payment_model else None

    @Logger.io
    async def update(self, *, payment: Payment) -> Payment:
        async with self._get_session() as session:
            result = await session.execute(
                select(PaymentModel).where(
                    PaymentModel.payment_intent_id == payment.payment_intent_id
                )
            )
            payment_model = result.scalar_one()
            payment_model.status = payment.status.value
            payment_model.paid_at = payment.paid_at
            await session.flush()
            return self._to_entity(payment_model)

    @Logger.io
    async def list_by_user(self, *, user_id: int, page: PageRequest) -> Page[Payment]:
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.user_id == user_id)
            .order_by(PaymentModel.created_at.desc(), PaymentModel.id.desc())
        )
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @staticmethod
    def _to_entity(payment_model: PaymentModel) -> Payment:
        return Payment(
            id=payment_model.id,
            user_id=payment_model.user_id,
            order_id=UUID(str(payment_model.order_id)),
            payment_intent_id=payment_model.payment_intent_id,
            amount=payment_model.amount,
            platform_fee=payment_model.platform_fee,
            net_amount=payment_model.net_amount,
            currency=payment_model.currency,
            status=PaymentStatus(payment_model.status),
            description=payment_model.description,
            created_at=payment_model.created_at,
            paid_at=payment_model.paid_at,
        )
