from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.service.marketplace.domain.entity.wallet_entity import TransactionStatus, TransactionType
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    EntityModel,
)


class AddFundsRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={'example': {'amount': '250.00', 'payment_method_id': 'pm_card_visa'}}
    )

    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method_id: str = Field(..., min_length=1)


class PurchaseRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    reference: Optional[str] = Field(None, max_length=255)


class TransferRequest(BaseModel):
    recipient_id: int
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)


class WalletTransactionResponse(EntityModel):
    id: int
    wallet_id: int
    type: TransactionType
    amount: Decimal
    status: TransactionStatus
    description: Optional[str] = None
    reference: Optional[str] = None
    created_at: Optional[datetime] = None


class WalletResponse(BaseModel):
    user_id: int
    balance: Decimal
    locked_balance: Decimal
    available_balance: Decimal
    recent_transactions: List[WalletTransactionResponse] = []


class WalletOperationResponse(BaseModel):
    balance: Decimal
    available_balance: Decimal
    transaction: WalletTransactionResponse


class TransferResponse(BaseModel):
    balance: Decimal
    available_balance: Decimal
    outgoing: WalletTransactionResponse
    incoming: WalletTransactionResponse


class WalletStatsResponse(EntityModel):
    total_deposits: Decimal
    total_purchases: Decimal
    total_transfers_in: Decimal
    total_transfers_out: Decimal
    transaction_count: int
