"""
HTTP tests through the FastAPI TestClient

The app runs with dependency injection wired but no database: the unit of work
provider is overridden with the in-memory one from the unit tests.
"""

from collections.abc import Iterator
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from dependency_injector import providers
from fastapi.testclient import TestClient
import pytest

from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.constant import route_constant as routes
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork
from test.test_main import app


@pytest.fixture
def now() -> datetime:
    # Requests run on the wall clock
    return datetime.now(timezone.utc)


@pytest.fixture
def client(uow: InMemoryUnitOfWork) -> Iterator[TestClient]:
    container.unit_of_work.override(providers.Object(uow))
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.unit_of_work.reset_override()


def _login(client: TestClient, user: UserEntity) -> None:
    token = container.jwt_auth().create_jwt_token(user)
    client.cookies.set(settings.AUTH_COOKIE_NAME, token)


@pytest.mark.api
class TestPlatformEndpoints:
    def test_health(self, client: TestClient):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy', 'service': settings.PROJECT_NAME}

    def test_missing_cookie_uses_error_envelope(self, client: TestClient):
        response = client.post(routes.PRODUCT_BIDS.format(product_id=1), json={'amount': '100'})

        assert response.status_code == 401
        assert response.json() == {'success': False, 'error': 'Not authenticated', 'data': None}

    def test_validation_errors_are_400(self, client: TestClient):
        response = client.post(routes.USER_CREATE, json={})

        body = response.json()
        assert response.status_code == 400
        assert body['success'] is False
        assert all({'loc', 'msg'} <= set(item) for item in body['error'])

    def test_payment_config_is_camel_case(self, client: TestClient):
        response = client.get(routes.PAYMENT_CONFIG)

        data = response.json()['data']
        assert response.status_code == 200
        assert {'publicKey', 'minimumAmount', 'currency', 'platformFeePercentage'} <= set(data)

    def test_enterprise_routes_disabled_by_flag(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, 'FEATURE_INDUSTRIAL_QUOTES', False)

        response = client.get(routes.ENTERPRISE_LISTINGS)

        assert response.status_code == 403
        assert response.json()['error'] == 'Industrial quotes are disabled'


@pytest.mark.api
class TestBiddingOverHttp:
    @pytest.mark.asyncio
    async def test_bid_below_minimum_then_opening_bid(
        self,
        client: TestClient,
        create_user: Callable,
        create_auction: Callable,
    ) -> None:
        # Given: an auction with a $100 minimum and a logged-in buyer
        seller = await create_user(role=UserRole.SELLER)
        buyer = await create_user(role=UserRole.BUYER)
        auction = await create_auction(owner_id=seller.id, minimum_bid=Decimal('100'))
        _login(client, buyer)
        url = routes.PRODUCT_BIDS.format(product_id=auction.id)

        # When
        too_low = client.post(url, json={'amount': '90'})
        opening = client.post(url, json={'amount': '100'})

        # Then
        assert too_low.status_code == 400
        assert too_low.json()['error'] == 'Bid must be at least $100.00'
        assert opening.status_code == 201
        state = opening.json()['data']
        assert Decimal(state['current_bid']) == Decimal('100')
        assert state['highest_bidder_id'] == buyer.id
        assert state['bid_count'] == 1

    @pytest.mark.asyncio
    async def test_seller_cannot_bid(
        self, client: TestClient, create_user: Callable, create_auction: Callable
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        auction = await create_auction(owner_id=seller.id)
        _login(client, seller)

        response = client.post(
            routes.PRODUCT_BIDS.format(product_id=auction.id), json={'amount': '150'}
        )

        assert response.status_code == 403
        assert response.json()['error'] == 'Only buyers can perform this action'
