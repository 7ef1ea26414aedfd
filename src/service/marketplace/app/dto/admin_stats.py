"""Dashboard aggregates for the admin area."""

from decimal import Decimal

import attrs


@attrs.define(frozen=True)
class AdminStats:
    """
    total_revenue is the platform's cut: the sum of platform fees of delivered
    orders, not the gross merchandise value.
    """

    total_users: int
    total_products: int
    total_orders: int
    total_revenue: Decimal
    pending_products: int
    active_auctions: int
    new_users_today: int
