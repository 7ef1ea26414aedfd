from typing import Optional

from sqlalchemy import func, select, update

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_bid_repo import IBidRepo
from src.service.marketplace.domain.entity.bid_entity import Bid
from src.service.marketplace.driven_adapter.model.bid_model import BidModel
from src.service.marketplace.driven_adapter.model.product_model import ProductModel
from src.service.marketplace.driven_adapter.model.user_model import UserModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class BidRepoImpl(SessionRepo, IBidRepo):
    @Logger.io
    async def create(self, *, bid: Bid) -> Bid:
        async with self._get_session() as session:
            bid_model = BidModel(
                product_id=bid.product_id,
                user_id=bid.user_id,
                amount=bid.amount,
                is_winning=bid.is_winning,
            )
            session.add(bid_model)
            await session.flush()
            await session.refresh(bid_model)
            return self._to_entity(bid_model)

    @Logger.io
    async def get_highest_bid(self, *, product_id: int) -> Optional[Bid]:
        # Ties cannot be accepted, but order by time to stay deterministic
        stmt = (
            select(BidModel)
            .where(BidModel.product_id == product_id)
            .order_by(BidModel.amount.desc(), BidModel.created_at.asc(), BidModel.id.asc())
            .limit(1)
        )
        async with self._get_session() as session:
            bid_model = (await session.execute(stmt)).scalar_one_or_none()
            return self._to_entity(bid_model) if bid_model else None

    @Logger.io
    async def count_by_product(self, *, product_id: int) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(func.count(BidModel.id)).where(BidModel.product_id == product_id)
            )
            return result.scalar_one()

    @Logger.io
    async def mark_winning(self, *, bid_id: int) -> None:
        async with self._get_session() as session:
            await session.execute(
                update(BidModel).where(BidModel.id == bid_id).values(is_winning=True)
            )

    @Logger.io
    async def list_by_product(self, *, product_id: int, page: PageRequest) -> Page[Bid]:
        stmt = (
            select(BidModel, UserModel.name)
            .join(UserModel, UserModel.id == BidModel.user_id)
            .where(BidModel.product_id == product_id)
            .order_by(BidModel.amount.desc(), BidModel.created_at.asc())
        )
        async with self._get_session() as session:
            return await self._paginate(
                session,
                stmt,
                page,
                lambda row: self._to_entity(row[0], bidder_name=row[1]),
                scalars=False,
            )

    @Logger.io
    async def list_by_user(self, *, user_id: int, page: PageRequest) -> Page[Bid]:
        stmt = (
            select(BidModel, ProductModel.title)
            .join(ProductModel, ProductModel.id == BidModel.product_id)
            .where(BidModel.user_id == user_id)
            .order_by(BidModel.created_at.desc(), BidModel.id.desc())
        )
        async with self._get_session() as session:
            return await self._paginate(
                session,
                stmt,
                page,
                lambda row: self._to_entity(row[0], product_title=row[1]),
                scalars=False,
            )

    @staticmethod
    def _to_entity(
        bid_model: BidModel,
        *,
        bidder_name: Optional[str] = None,
        product_title: Optional[str] = None,
    ) -> Bid:
        return Bid(
            id=bid_model.id,
            product_id=bid_model.product_id,
            user_id=bid_model.user_id,
            amount=bid_model.amount,
            is_winning=bid_model.is_winning,
            created_at=bid_model.created_at,
            bidder_name=bidder_name,
            product_title=product_title,
        )
