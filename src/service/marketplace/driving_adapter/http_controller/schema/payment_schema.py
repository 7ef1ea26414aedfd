from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.marketplace.domain.entity.order_entity import OrderStatus
from src.service.marketplace.domain.entity.payment_entity import IntentStatus, PaymentStatus
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    EntityModel,
)


class ShippingAddressSchema(EntityModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field('US', min_length=2, max_length=2)


class CreatePaymentIntentRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'product_id': 1,
                'amount': '189.00',
                'shipping_address': {
                    'street': '1 Sun Way',
                    'city': 'Phoenix',
                    'state': 'AZ',
                    'zip_code': '85001',
                },
            }
        }
    )

    product_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    shipping_address: Optional[ShippingAddressSchema] = None


class PaymentIntentResponse(EntityModel):
    payment_intent_id: str
    client_secret: str
    order_id: UtilsUUID7
    amount: Decimal
    currency: str


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str = Field(..., min_length=1)


class MockConfirmRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'examples': [
                {'payment_intent_id': 'pi_mock_0193...', 'payment_method_id': 'pm_card_visa'},
                {
                    'payment_intent_id': 'pi_mock_0193...',
                    'payment_method_id': 'pm_card_chargeDeclined',
                },
            ]
        }
    )

    payment_intent_id: str = Field(..., min_length=1)
    payment_method_id: Optional[str] = None


class PaymentResponse(EntityModel):
    id: int
    user_id: int
    order_id: UtilsUUID7
    payment_intent_id: str
    amount: Decimal
    platform_fee: Decimal
    net_amount: Decimal
    currency: str
    status: PaymentStatus
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class OrderResponse(EntityModel):
    id: UtilsUUID7
    buyer_id: int
    seller_id: int
    product_id: int
    total_amount: Decimal
    platform_fee: Decimal
    seller_amount: Decimal
    shipping_address: Optional[ShippingAddressSchema] = None
    status: OrderStatus
    payment_intent_id: Optional[str] = None
    tracking_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class PaymentConfirmationResponse(BaseModel):
    payment: PaymentResponse
    order: OrderResponse


class PaymentStatusResponse(BaseModel):
    payment: PaymentResponse
    intent_status: IntentStatus


class PaymentConfigResponse(BaseModel):
    """Published to the checkout page, keys in camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    public_key: str
    minimum_amount: Decimal
    currency: str
    platform_fee_percentage: Decimal


class WebhookAckResponse(BaseModel):
    received: bool = True
    event_type: str
    handled: bool


class ShipOrderRequest(BaseModel):
    tracking_number: str = Field(..., min_length=1, max_length=255)
