from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import attrs

from src.service.marketplace.domain.money import to_money


@attrs.define
class Bid:
    product_id: int
    user_id: int
    amount: Decimal
    is_winning: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    # Filled by read models only
    bidder_name: Optional[str] = None
    product_title: Optional[str] = None

    @classmethod
    def create(cls, *, product_id: int, user_id: int, amount: Decimal) -> 'Bid':
        return cls(
            product_id=product_id,
            user_id=user_id,
            amount=to_money(amount),
            created_at=datetime.now(timezone.utc),
        )
