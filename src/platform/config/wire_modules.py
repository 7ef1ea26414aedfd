"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.marketplace.app.command import (
    add_wallet_funds_use_case,
    admin_moderation_use_case,
    confirm_payment_use_case,
    create_enterprise_listing_use_case,
    create_payment_intent_use_case,
    create_product_use_case,
    create_quote_request_use_case,
    create_user_use_case,
    decide_quote_response_use_case,
    deduct_wallet_funds_use_case,
    place_bid_use_case,
    process_payment_webhook_use_case,
    respond_to_quote_use_case,
    settle_auction_use_case,
    transfer_wallet_funds_use_case,
    update_order_status_use_case,
)
from src.service.marketplace.app.query import (
    admin_query_use_case,
    enterprise_query_use_case,
    get_auction_state_use_case,
    order_query_use_case,
    payment_query_use_case,
    product_query_use_case,
    wallet_query_use_case,
)
from src.service.marketplace.driving_adapter.http_controller import user_controller


WIRE_MODULES: list[ModuleType] = [
    # catalogue & auctions
    create_product_use_case,
    product_query_use_case,
    place_bid_use_case,
    settle_auction_use_case,
    get_auction_state_use_case,
    # payments & orders
    create_payment_intent_use_case,
    confirm_payment_use_case,
    process_payment_webhook_use_case,
    payment_query_use_case,
    update_order_status_use_case,
    order_query_use_case,
    # wallet
    add_wallet_funds_use_case,
    deduct_wallet_funds_use_case,
    transfer_wallet_funds_use_case,
    wallet_query_use_case,
    # enterprise
    create_enterprise_listing_use_case,
    create_quote_request_use_case,
    respond_to_quote_use_case,
    decide_quote_response_use_case,
    enterprise_query_use_case,
    # admin & users
    admin_moderation_use_case,
    admin_query_use_case,
    create_user_use_case,
    user_controller,
]
