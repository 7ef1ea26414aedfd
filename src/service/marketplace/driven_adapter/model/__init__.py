"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.marketplace.driven_adapter.model.bid_model import BidModel
from src.service.marketplace.driven_adapter.model.category_model import CategoryModel
from src.service.marketplace.driven_adapter.model.enterprise_model import (
    EnterpriseListingModel,
    QuoteRequestModel,
    QuoteResponseModel,
)
from src.service.marketplace.driven_adapter.model.order_model import OrderModel
from src.service.marketplace.driven_adapter.model.payment_model import PaymentModel
from src.service.marketplace.driven_adapter.model.product_model import ProductModel
from src.service.marketplace.driven_adapter.model.user_model import UserModel
from src.service.marketplace.driven_adapter.model.wallet_model import (
    WalletModel,
    WalletTransactionModel,
)

__all__ = [
    'BidModel',
    'CategoryModel',
    'EnterpriseListingModel',
    'OrderModel',
    'PaymentModel',
    'ProductModel',
    'QuoteRequestModel',
    'QuoteResponseModel',
    'UserModel',
    'WalletModel',
    'WalletTransactionModel',
]
