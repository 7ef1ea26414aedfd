"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.marketplace.driven_adapter.gateway.mock_payment_gateway import (
    MockPaymentGateway,
)
from src.service.marketplace.driven_adapter.repo.admin_stats_query_repo_impl import (
    AdminStatsQueryRepoImpl,
)
from src.service.marketplace.driven_adapter.repo.bid_repo_impl import BidRepoImpl
from src.service.marketplace.driven_adapter.repo.category_repo_impl import CategoryRepoImpl
from src.service.marketplace.driven_adapter.repo.enterprise_listing_repo_impl import (
    EnterpriseListingRepoImpl,
)
from src.service.marketplace.driven_adapter.repo.order_repo_impl import OrderRepoImpl
from src.service.marketplace.driven_adapter.repo.payment_repo_impl import PaymentRepoImpl
from src.service.marketplace.driven_adapter.repo.product_repo_impl import ProductRepoImpl
from src.service.marketplace.driven_adapter.repo.quote_repo_impl import QuoteRepoImpl
from src.service.marketplace.driven_adapter.repo.user_repo_impl import UserRepoImpl
from src.service.marketplace.driven_adapter.repo.wallet_repo_impl import WalletRepoImpl
from src.service.marketplace.driven_adapter.security.bcrypt_password_hasher import (
    BcryptPasswordHasher,
)
from src.service.marketplace.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database handle; every session is opened from it
    database = providers.Singleton(Database)

    # Write path: one session and one transaction per use case call
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.session
    )

    # Read path: repositories open a short-lived session per call
    user_repo = providers.Singleton(UserRepoImpl, session_factory=database.provided.session)
    product_repo = providers.Singleton(ProductRepoImpl, session_factory=database.provided.session)
    bid_repo = providers.Singleton(BidRepoImpl, session_factory=database.provided.session)
    order_repo = providers.Singleton(OrderRepoImpl, session_factory=database.provided.session)
    payment_repo = providers.Singleton(PaymentRepoImpl, session_factory=database.provided.session)
    wallet_repo = providers.Singleton(WalletRepoImpl, session_factory=database.provided.session)
    category_repo = providers.Singleton(
        CategoryRepoImpl, session_factory=database.provided.session
    )
    enterprise_listing_repo = providers.Singleton(
        EnterpriseListingRepoImpl, session_factory=database.provided.session
    )
    quote_repo = providers.Singleton(QuoteRepoImpl, session_factory=database.provided.session)
    admin_stats_query_repo = providers.Singleton(
        AdminStatsQueryRepoImpl, session_factory=database.provided.session
    )

    # Security
    password_hasher = providers.Singleton(BcryptPasswordHasher)
    jwt_auth = providers.Singleton(JwtAuth)

    # Payment provider; the mock keeps intents in memory, so it must stay a Singleton
    payment_gateway = providers.Singleton(
        MockPaymentGateway,
        public_key=config_service.provided.PAYMENT_GATEWAY_PUBLIC_KEY,
        webhook_secret=config_service.provided.PAYMENT_WEBHOOK_SECRET,
    )


container = Container()


def setup() -> None:
    container.config_service()
    container.database()


def cleanup() -> None:
    container.reset_singletons()
