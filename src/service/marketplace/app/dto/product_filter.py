from decimal import Decimal
from typing import Optional

import attrs

from src.service.marketplace.domain.entity.product_entity import ProductStatus


@attrs.define(frozen=True)
class ProductFilter:
    search: Optional[str] = None
    category_id: Optional[int] = None
    is_auction: Optional[bool] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    # None means every status; the public catalogue passes ACTIVE
    status: Optional[ProductStatus] = ProductStatus.ACTIVE
    owner_id: Optional[int] = None
