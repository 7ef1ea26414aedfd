from datetime import datetime, time, timezone

from sqlalchemy import func, select

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.admin_stats import AdminStats
from src.service.marketplace.app.interface.i_admin_stats_query_repo import IAdminStatsQueryRepo
from src.service.marketplace.domain.entity.order_entity import OrderStatus
from src.service.marketplace.domain.entity.product_entity import ProductStatus
from src.service.marketplace.domain.money import to_money
from src.service.marketplace.driven_adapter.model.order_model import OrderModel
from src.service.marketplace.driven_adapter.model.product_model import ProductModel
from src.service.marketplace.driven_adapter.model.user_model import UserModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class AdminStatsQueryRepoImpl(SessionRepo, IAdminStatsQueryRepo):
    @Logger.io
    async def get_stats(self, *, now: datetime) -> AdminStats:
        midnight = datetime.combine(now.astimezone(timezone.utc).date(), time.min, timezone.utc)

        stmt = select(
            select(func.count(UserModel.id)).scalar_subquery(),
            select(func.count(ProductModel.id)).scalar_subquery(),
            select(func.count(OrderModel.id)).scalar_subquery(),
            select(func.coalesce(func.sum(OrderModel.platform_fee), 0))
            .where(OrderModel.status == OrderStatus.DELIVERED.value)
            .scalar_subquery(),
            select(func.count(ProductModel.id))
            .where(ProductModel.status == ProductStatus.DRAFT.value)
            .scalar_subquery(),
            select(func.count(ProductModel.id))
            .where(
                ProductModel.status == ProductStatus.ACTIVE.value,
                ProductModel.is_auction.is_(True),
                ProductModel.auction_end_date > now,
            )
            .scalar_subquery(),
            select(func.count(UserModel.id))
            .where(UserModel.created_at >= midnight)
            .scalar_subquery(),
        )
        async with self._get_session() as session:
            row = (await session.execute(stmt)).one()

        (
            total_users,
            total_products,
            total_orders,
            revenue,
            pending_products,
            active_auctions,
            new_users_today,
        ) = row
        return AdminStats(
            total_users=total_users,
            total_products=total_products,
            total_orders=total_orders,
            total_revenue=to_money(revenue),
            pending_products=pending_products,
            active_auctions=active_auctions,
            new_users_today=new_users_today,
        )
