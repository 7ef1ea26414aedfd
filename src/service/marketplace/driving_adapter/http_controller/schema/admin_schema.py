from decimal import Decimal

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    EntityModel,
)


class AdminStatsResponse(EntityModel):
    """Dashboard counters, keys in camelCase"""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    total_users: int
    total_products: int
    total_orders: int
    total_revenue: Decimal
    pending_products: int
    active_auctions: int
    new_users_today: int
