"""
Unit tests for the enterprise quote workflow

Request:  pending -> responded -> accepted / rejected, or pending -> expired
Response: pending -> accepted / rejected
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

import pytest

from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.service.marketplace.app.command.create_enterprise_listing_use_case import (
    CreateEnterpriseListingUseCase,
)
from src.service.marketplace.app.command.create_quote_request_use_case import (
    CreateQuoteRequestUseCase,
)
from src.service.marketplace.app.command.decide_quote_response_use_case import (
    DecideQuoteResponseUseCase,
)
from src.service.marketplace.app.command.respond_to_quote_use_case import RespondToQuoteUseCase
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.query.enterprise_query_use_case import EnterpriseQueryUseCase
from src.service.marketplace.domain.entity.category_entity import Category
from src.service.marketplace.domain.entity.enterprise_entity import (
    ListingStatus,
    ProjectSpecs,
    QuoteLineItem,
    QuoteRequestStatus,
    QuoteResponseStatus,
)
from src.service.marketplace.domain.entity.user_entity import UserRole
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork


SPECS = ProjectSpecs(
    project_type='commercial rooftop',
    system_size_kw=Decimal('250'),
    location='Phoenix, AZ',
    budget=Decimal('300000'),
    timeline='Q3',
)


@pytest.fixture
def request_quote(uow: InMemoryUnitOfWork) -> CreateQuoteRequestUseCase:
    return CreateQuoteRequestUseCase(uow=uow, ttl_days=30)


@pytest.fixture
def respond(uow: InMemoryUnitOfWork) -> RespondToQuoteUseCase:
    return RespondToQuoteUseCase(uow=uow)


@pytest.fixture
def decide(uow: InMemoryUnitOfWork) -> DecideQuoteResponseUseCase:
    return DecideQuoteResponseUseCase(uow=uow)


@pytest.fixture
def listings(uow: InMemoryUnitOfWork) -> CreateEnterpriseListingUseCase:
    return CreateEnterpriseListingUseCase(uow=uow)


@pytest.fixture
def enterprise_query(uow: InMemoryUnitOfWork) -> EnterpriseQueryUseCase:
    return EnterpriseQueryUseCase(
        enterprise_listing_repo=uow.enterprise_listing_repo, quote_repo=uow.quote_repo
    )


@pytest.fixture
def parties(create_user: Callable) -> Callable:
    async def _parties():
        buyer = await create_user(role=UserRole.ENTERPRISE_BUYER)
        vendor = await create_user(role=UserRole.ENTERPRISE_VENDOR)
        rival = await create_user(role=UserRole.ENTERPRISE_VENDOR)
        return buyer, vendor, rival

    return _parties


@pytest.mark.unit
class TestListingPublication:
    @pytest.mark.asyncio
    async def test_listing_starts_as_draft_and_vendor_publishes(
        self,
        listings: CreateEnterpriseListingUseCase,
        uow: InMemoryUnitOfWork,
        parties: Callable,
    ) -> None:
        _, vendor, rival = await parties()
        category = await uow.category_repo.create(category=Category.create(name='Inverters'))

        listing = await listings.create(
            vendor_id=vendor.id,
            category_id=category.id,
            name='Central Inverter 500kW',
            description='Utility scale',
            base_price=Decimal('48000'),
        )
        assert listing.status == ListingStatus.DRAFT

        with pytest.raises(ForbiddenError):
            await listings.publish(listing_id=listing.id, vendor_id=rival.id)

        published = await listings.publish(listing_id=listing.id, vendor_id=vendor.id)
        assert published.status == ListingStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_unknown_category(
        self, listings: CreateEnterpriseListingUseCase, parties: Callable
    ) -> None:
        _, vendor, _ = await parties()

        with pytest.raises(NotFoundError):
            await listings.create(
                vendor_id=vendor.id,
                category_id=12345,
                name='Battery Rack',
                description='',
                base_price=Decimal('9000'),
            )


@pytest.mark.unit
class TestQuoteLifecycle:
    @pytest.mark.asyncio
    async def test_open_request_response_and_acceptance(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        decide: DecideQuoteResponseUseCase,
        uow: InMemoryUnitOfWork,
        parties: Callable,
        now: datetime,
    ) -> None:
        # Given: an open request and answers from two vendors
        buyer, vendor, rival = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id, requested_quantity=600, project_specs=SPECS, now=now
        )
        assert request.status == QuoteRequestStatus.PENDING
        assert request.expires_at == now + timedelta(days=30)

        chosen = await respond.execute(
            quote_request_id=request.id,
            vendor_id=vendor.id,
            proposed_total_price=Decimal('240000'),
            valid_until=now + timedelta(days=14),
            line_items=[QuoteLineItem('Panel 420W', 600, Decimal('400'))],
            now=now,
        )
        other = await respond.execute(
            quote_request_id=request.id,
            vendor_id=rival.id,
            proposed_total_price=Decimal('255000'),
            valid_until=now + timedelta(days=14),
            now=now,
        )
        stored = await uow.quote_repo.get_request(request_id=request.id)
        assert stored is not None
        assert stored.status == QuoteRequestStatus.RESPONDED

        # When
        decision = await decide.accept(response_id=chosen.id, buyer_id=buyer.id, now=now)

        # Then: the competing response is rejected
        assert decision.request.status == QuoteRequestStatus.ACCEPTED
        assert decision.response.status == QuoteResponseStatus.ACCEPTED
        rejected = await uow.quote_repo.get_response(response_id=other.id)
        assert rejected is not None
        assert rejected.status == QuoteResponseStatus.REJECTED

    @pytest.mark.asyncio
    async def test_rejecting_closes_the_request(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        decide: DecideQuoteResponseUseCase,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, vendor, _ = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id,
            requested_quantity=10,
            project_specs=SPECS,
            vendor_id=vendor.id,
            now=now,
        )
        response = await respond.execute(
            quote_request_id=request.id,
            vendor_id=vendor.id,
            proposed_total_price=Decimal('5000'),
            valid_until=now + timedelta(days=7),
            now=now,
        )

        decision = await decide.reject(response_id=response.id, buyer_id=buyer.id, now=now)

        assert decision.request.status == QuoteRequestStatus.REJECTED
        assert decision.response.status == QuoteResponseStatus.REJECTED

    @pytest.mark.asyncio
    async def test_only_requesting_buyer_decides(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        decide: DecideQuoteResponseUseCase,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, vendor, rival = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id, requested_quantity=10, project_specs=SPECS, now=now
        )
        response = await respond.execute(
            quote_request_id=request.id,
            vendor_id=vendor.id,
            proposed_total_price=Decimal('5000'),
            valid_until=now + timedelta(days=7),
            now=now,
        )

        with pytest.raises(ForbiddenError):
            await decide.accept(response_id=response.id, buyer_id=rival.id, now=now)

    @pytest.mark.asyncio
    async def test_lapsed_response_cannot_be_accepted(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        decide: DecideQuoteResponseUseCase,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, vendor, _ = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id, requested_quantity=10, project_specs=SPECS, now=now
        )
        response = await respond.execute(
            quote_request_id=request.id,
            vendor_id=vendor.id,
            proposed_total_price=Decimal('5000'),
            valid_until=now + timedelta(days=2),
            now=now,
        )

        with pytest.raises(DomainError) as exc_info:
            await decide.accept(
                response_id=response.id, buyer_id=buyer.id, now=now + timedelta(days=3)
            )

        assert exc_info.value.message == 'Quote response is no longer valid'


@pytest.mark.unit
class TestQuoteAddressing:
    @pytest.mark.asyncio
    async def test_directed_request_refuses_other_vendors(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, vendor, rival = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id,
            requested_quantity=10,
            project_specs=SPECS,
            vendor_id=vendor.id,
            now=now,
        )

        with pytest.raises(ForbiddenError) as exc_info:
            await respond.execute(
                quote_request_id=request.id,
                vendor_id=rival.id,
                proposed_total_price=Decimal('5000'),
                valid_until=now + timedelta(days=7),
                now=now,
            )

        assert exc_info.value.message == 'Quote request is not addressed to you'

    @pytest.mark.asyncio
    async def test_request_to_non_vendor_user_is_not_found(
        self,
        request_quote: CreateQuoteRequestUseCase,
        create_user: Callable,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, _, _ = await parties()
        plain_seller = await create_user(role=UserRole.SELLER)

        with pytest.raises(NotFoundError) as exc_info:
            await request_quote.execute(
                buyer_id=buyer.id,
                requested_quantity=10,
                project_specs=SPECS,
                vendor_id=plain_seller.id,
                now=now,
            )

        assert exc_info.value.message == 'Vendor not found'

    @pytest.mark.asyncio
    async def test_draft_listing_cannot_be_quoted(
        self,
        request_quote: CreateQuoteRequestUseCase,
        listings: CreateEnterpriseListingUseCase,
        uow: InMemoryUnitOfWork,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, vendor, _ = await parties()
        category = await uow.category_repo.create(category=Category.create(name='Mounting'))
        listing = await listings.create(
            vendor_id=vendor.id,
            category_id=category.id,
            name='Ground Mount Kit',
            description='',
            base_price=Decimal('1200'),
        )

        with pytest.raises(DomainError) as exc_info:
            await request_quote.execute(
                buyer_id=buyer.id,
                requested_quantity=4,
                project_specs=SPECS,
                listing_id=listing.id,
                now=now,
            )

        assert exc_info.value.message == 'Listing is not active'

    @pytest.mark.asyncio
    async def test_vendor_dashboard_hides_competitor_responses(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        enterprise_query: EnterpriseQueryUseCase,
        parties: Callable,
        now: datetime,
    ) -> None:
        buyer, vendor, rival = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id, requested_quantity=50, project_specs=SPECS, now=now
        )
        for vendor_id, price in ((vendor.id, '20000'), (rival.id, '19000')):
            await respond.execute(
                quote_request_id=request.id,
                vendor_id=vendor_id,
                proposed_total_price=Decimal(price),
                valid_until=now + timedelta(days=7),
                now=now,
            )

        dashboard = await enterprise_query.vendor_dashboard(
            vendor_id=vendor.id, status=None, page=PageRequest.of()
        )
        mine = await enterprise_query.list_my_requests(
            buyer_id=buyer.id, status=None, page=PageRequest.of()
        )

        assert [r.vendor_id for r in dashboard.items[0].responses] == [vendor.id]
        assert len(mine.items[0].responses) == 2


@pytest.mark.unit
class TestQuoteExpiry:
    @pytest.mark.asyncio
    async def test_response_after_expiry_persists_expired_status(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        uow: InMemoryUnitOfWork,
        parties: Callable,
        now: datetime,
    ) -> None:
        # Given: a request past its 30 day window
        buyer, vendor, _ = await parties()
        request = await request_quote.execute(
            buyer_id=buyer.id, requested_quantity=10, project_specs=SPECS, now=now
        )
        later = now + timedelta(days=31)

        # When
        with pytest.raises(DomainError) as exc_info:
            await respond.execute(
                quote_request_id=request.id,
                vendor_id=vendor.id,
                proposed_total_price=Decimal('5000'),
                valid_until=later + timedelta(days=7),
                now=later,
            )

        # Then: refused, and the expiry is committed
        assert exc_info.value.message == 'Quote request has expired'
        stored = await uow.quote_repo.get_request(request_id=request.id)
        assert stored is not None
        assert stored.status == QuoteRequestStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_vendor_cannot_answer_own_request(
        self,
        request_quote: CreateQuoteRequestUseCase,
        respond: RespondToQuoteUseCase,
        create_user: Callable,
        now: datetime,
    ) -> None:
        vendor = await create_user(role=UserRole.ENTERPRISE_VENDOR)
        request = await request_quote.execute(
            buyer_id=vendor.id, requested_quantity=1, project_specs=SPECS, now=now
        )

        with pytest.raises(DomainError) as exc_info:
            await respond.execute(
                quote_request_id=request.id,
                vendor_id=vendor.id,
                proposed_total_price=Decimal('100'),
                valid_until=now + timedelta(days=1),
                now=now,
            )

        assert exc_info.value.message == 'Cannot respond to your own quote request'
