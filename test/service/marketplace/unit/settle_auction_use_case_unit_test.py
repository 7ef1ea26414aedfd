from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

import pytest

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.service.marketplace.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.marketplace.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from src.service.marketplace.app.command.place_bid_use_case import PlaceBidUseCase
from src.service.marketplace.app.command.settle_auction_use_case import SettleAuctionUseCase
from src.service.marketplace.domain.entity.auction_entity import AuctionOutcome
from src.service.marketplace.domain.entity.product_entity import ProductStatus
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.domain.money import split_platform_fee
from src.service.marketplace.driven_adapter.gateway.mock_payment_gateway import (
    MockPaymentGateway,
)
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork


FEE = Decimal('0.025')


@pytest.fixture
def use_case(uow: InMemoryUnitOfWork) -> SettleAuctionUseCase:
    return SettleAuctionUseCase(uow=uow, platform_fee_percentage=FEE)


@pytest.fixture
def place_bid(uow: InMemoryUnitOfWork) -> PlaceBidUseCase:
    return PlaceBidUseCase(uow=uow, platform_fee_percentage=FEE)


@pytest.fixture
def create_intent(
    uow: InMemoryUnitOfWork, payment_gateway: MockPaymentGateway, test_settings: Settings
) -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(
        uow=uow, payment_gateway=payment_gateway, settings=test_settings
    )


@pytest.fixture
def confirm(uow: InMemoryUnitOfWork, payment_gateway: MockPaymentGateway) -> ConfirmPaymentUseCase:
    return ConfirmPaymentUseCase(uow=uow, payment_gateway=payment_gateway)


@pytest.mark.unit
class TestPlatformFeeSplit:
    def test_split_on_winning_amount(self):
        assert split_platform_fee(Decimal('1000'), FEE) == (Decimal('25.00'), Decimal('975.00'))

    def test_split_rounds_half_up_to_cents(self):
        # 0.025 * 10.10 = 0.2525
        fee, payout = split_platform_fee(Decimal('10.10'), FEE)
        assert fee == Decimal('0.25')
        assert fee + payout == Decimal('10.10')


@pytest.mark.unit
class TestSettleAuction:
    @pytest.mark.asyncio
    async def test_winner_pays_fee_and_seller_gets_payout(
        self,
        use_case: SettleAuctionUseCase,
        place_bid: PlaceBidUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        # Given: a winning bid of 1000
        seller = await create_user(role=UserRole.SELLER)
        runner_up = await create_user(role=UserRole.BUYER)
        winner = await create_user(role=UserRole.BUYER)
        auction = await create_auction(owner_id=seller.id, ends_in=timedelta(hours=1))
        await place_bid.execute(
            product_id=auction.id, bidder_id=runner_up.id, amount=Decimal('800'), now=now
        )
        await place_bid.execute(
            product_id=auction.id, bidder_id=winner.id, amount=Decimal('1000'), now=now
        )

        # When
        settlement = await use_case.execute(product_id=auction.id, now=now + timedelta(hours=1))

        # Then
        assert settlement.outcome == AuctionOutcome.ENDED
        assert settlement.winner_id == winner.id
        assert settlement.winning_amount == Decimal('1000.00')
        assert settlement.platform_fee == Decimal('25.00')
        assert settlement.seller_payout == Decimal('975.00')

        product = await uow.product_repo.get_by_id(product_id=auction.id)
        assert product is not None
        assert product.status == ProductStatus.ENDED

    @pytest.mark.asyncio
    async def test_no_bids_expires_without_winner(
        self,
        use_case: SettleAuctionUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        auction = await create_auction(owner_id=seller.id, ends_in=timedelta(hours=1))

        settlement = await use_case.execute(product_id=auction.id, now=now + timedelta(days=1))

        assert settlement.outcome == AuctionOutcome.EXPIRED
        assert settlement.winner_id is None
        assert settlement.platform_fee is None
        assert settlement.seller_payout is None
        product = await uow.product_repo.get_by_id(product_id=auction.id)
        assert product is not None
        assert product.status == ProductStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_settling_twice_returns_same_outcome(
        self,
        use_case: SettleAuctionUseCase,
        place_bid: PlaceBidUseCase,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        buyer = await create_user(role=UserRole.BUYER)
        auction = await create_auction(owner_id=seller.id, ends_in=timedelta(hours=1))
        await place_bid.execute(
            product_id=auction.id, bidder_id=buyer.id, amount=Decimal('250'), now=now
        )
        later = now + timedelta(hours=3)

        first = await use_case.execute(product_id=auction.id, now=later)
        second = await use_case.execute(product_id=auction.id, now=later)

        assert first == second

    @pytest.mark.asyncio
    async def test_buy_now_sale_reports_the_buyer_not_the_highest_bidder(
        self,
        use_case: SettleAuctionUseCase,
        place_bid: PlaceBidUseCase,
        uow: InMemoryUnitOfWork,
        create_intent: CreatePaymentIntentUseCase,
        confirm: ConfirmPaymentUseCase,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        # Given: a bid of 150, then another buyer pays the buy-now price of 500
        seller = await create_user(role=UserRole.SELLER)
        bidder = await create_user(role=UserRole.BUYER)
        buyer = await create_user(role=UserRole.BUYER)
        auction = await create_auction(
            owner_id=seller.id, buy_now_price=Decimal('500'), ends_in=timedelta(hours=1)
        )
        await place_bid.execute(
            product_id=auction.id, bidder_id=bidder.id, amount=Decimal('150'), now=now
        )
        intent = await create_intent.execute(
            buyer_id=buyer.id, product_id=auction.id, amount=Decimal('500'), now=now
        )
        await confirm.execute_with_test_card(
            payment_intent_id=intent.payment_intent_id, user_id=buyer.id
        )

        # When: settled after the end date
        settlement = await use_case.execute(product_id=auction.id, now=now + timedelta(days=1))

        # Then: the sale is reported, not the outbid bid
        assert settlement.outcome == AuctionOutcome.BOUGHT_NOW
        assert settlement.winner_id == buyer.id
        assert settlement.winning_bid_id is None
        assert settlement.winning_amount == Decimal('500.00')
        assert settlement.platform_fee == Decimal('12.50')
        assert settlement.seller_payout == Decimal('487.50')
        product = await uow.product_repo.get_by_id(product_id=auction.id)
        assert product is not None
        assert product.status == ProductStatus.SOLD

    @pytest.mark.asyncio
    async def test_paid_auction_win_still_reports_the_winning_bid(
        self,
        use_case: SettleAuctionUseCase,
        place_bid: PlaceBidUseCase,
        uow: InMemoryUnitOfWork,
        create_intent: CreatePaymentIntentUseCase,
        confirm: ConfirmPaymentUseCase,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        winner = await create_user(role=UserRole.BUYER)
        auction = await create_auction(owner_id=seller.id, ends_in=timedelta(hours=1))
        await place_bid.execute(
            product_id=auction.id, bidder_id=winner.id, amount=Decimal('300'), now=now
        )
        bid = await uow.bid_repo.get_highest_bid(product_id=auction.id)
        assert bid is not None
        later = now + timedelta(hours=2)
        intent = await create_intent.execute(
            buyer_id=winner.id, product_id=auction.id, amount=Decimal('300'), now=later
        )
        await confirm.execute_with_test_card(
            payment_intent_id=intent.payment_intent_id, user_id=winner.id
        )

        settlement = await use_case.execute(product_id=auction.id, now=later)

        assert settlement.outcome == AuctionOutcome.ENDED
        assert settlement.winner_id == winner.id
        assert settlement.winning_bid_id == bid.id
        assert settlement.winning_amount == Decimal('300.00')

    @pytest.mark.asyncio
    async def test_running_auction_cannot_be_settled(
        self,
        use_case: SettleAuctionUseCase,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        auction = await create_auction(owner_id=seller.id)

        with pytest.raises(DomainError) as exc_info:
            await use_case.execute(product_id=auction.id, now=now)

        assert exc_info.value.message == 'Auction has not ended yet'

    @pytest.mark.asyncio
    async def test_fixed_price_listing_is_not_an_auction(
        self,
        use_case: SettleAuctionUseCase,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        listing = await create_listing(owner_id=seller.id)

        with pytest.raises(DomainError) as exc_info:
            await use_case.execute(product_id=listing.id, now=now)

        assert exc_info.value.message == 'This product is not an auction'

    @pytest.mark.asyncio
    async def test_unknown_product(self, use_case: SettleAuctionUseCase, now: datetime) -> None:
        with pytest.raises(NotFoundError):
            await use_case.execute(product_id=404, now=now)


@pytest.mark.unit
class TestSettleExpiredSweep:
    @pytest.mark.asyncio
    async def test_sweep_closes_only_ended_auctions(
        self,
        use_case: SettleAuctionUseCase,
        place_bid: PlaceBidUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_auction: Callable,
        now: datetime,
    ) -> None:
        # Given: two ended auctions (one with a bid) and one still running
        seller = await create_user(role=UserRole.SELLER)
        buyer = await create_user(role=UserRole.BUYER)
        with_bid = await create_auction(owner_id=seller.id, ends_in=timedelta(hours=1))
        without_bid = await create_auction(owner_id=seller.id, ends_in=timedelta(hours=2))
        running = await create_auction(owner_id=seller.id, ends_in=timedelta(days=5))
        await place_bid.execute(
            product_id=with_bid.id, bidder_id=buyer.id, amount=Decimal('400'), now=now
        )

        # When
        settlements = await use_case.settle_expired(now=now + timedelta(days=1))

        # Then
        outcomes = {s.product_id: s.outcome for s in settlements}
        assert outcomes == {
            with_bid.id: AuctionOutcome.ENDED,
            without_bid.id: AuctionOutcome.EXPIRED,
        }
        still_running = await uow.product_repo.get_by_id(product_id=running.id)
        assert still_running is not None
        assert still_running.status == ProductStatus.ACTIVE

        # A second sweep finds nothing left to settle
        assert await use_case.settle_expired(now=now + timedelta(days=1)) == []
