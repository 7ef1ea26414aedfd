"""
Enterprise (B2B) quote workflow

EnterpriseListing: draft -> active (publish) -> suspended / archived
QuoteRequest:      pending -> responded -> accepted / rejected, or pending -> expired
QuoteResponse:     pending -> accepted / rejected
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Any, List, Optional

import attrs

from src.platform.exception.exceptions import DomainError, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.money import to_money


class ListingStatus(StrEnum):
    DRAFT = 'draft'
    ACTIVE = 'active'
    SUSPENDED = 'suspended'
    ARCHIVED = 'archived'


class QuoteRequestStatus(StrEnum):
    PENDING = 'pending'
    RESPONDED = 'responded'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    EXPIRED = 'expired'


class QuoteResponseStatus(StrEnum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    EXPIRED = 'expired'


# ========== Typed records ==========


@attrs.define(frozen=True)
class ListingSpec:
    name: str
    value: str
    unit: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'ListingSpec':
        return cls(name=str(data['name']), value=str(data['value']), unit=data.get('unit'))


@attrs.define(frozen=True)
class ProjectSpecs:
    project_type: Optional[str] = None
    system_size_kw: Optional[Decimal] = None
    location: Optional[str] = None
    budget: Optional[Decimal] = None
    timeline: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'project_type': self.project_type,
            'system_size_kw': str(self.system_size_kw) if self.system_size_kw is not None else None,
            'location': self.location,
            'budget': str(self.budget) if self.budget is not None else None,
            'timeline': self.timeline,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> 'ProjectSpecs':
        data = data or {}
        size = data.get('system_size_kw')
        budget = data.get('budget')
        return cls(
            project_type=data.get('project_type'),
            system_size_kw=Decimal(str(size)) if size is not None else None,
            location=data.get('location'),
            budget=Decimal(str(budget)) if budget is not None else None,
            timeline=data.get('timeline'),
        )


@attrs.define(frozen=True)
class QuoteLineItem:
    description: str
    quantity: int
    unit_price: Decimal

    @property
    def total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'QuoteLineItem':
        return cls(
            description=str(data['description']),
            quantity=int(data['quantity']),
            unit_price=Decimal(str(data['unit_price'])),
        )


# ========== Listing ==========


@attrs.define
class EnterpriseListing:
    vendor_id: int
    category_id: int
    name: str
    description: str
    base_price: Decimal
    price_unit: str = 'unit'
    specs: List[ListingSpec] = attrs.field(factory=list)
    location: Optional[str] = None
    delivery_time: Optional[str] = None
    status: ListingStatus = ListingStatus.DRAFT
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        vendor_id: int,
        category_id: int,
        name: str,
        description: str,
        base_price: Decimal,
        price_unit: str = 'unit',
        specs: Optional[List[ListingSpec]] = None,
        location: Optional[str] = None,
        delivery_time: Optional[str] = None,
    ) -> 'EnterpriseListing':
        if not name.strip():
            raise DomainError('Listing name is required')
        if base_price <= 0:
            raise DomainError('Base price must be greater than 0')
        now = datetime.now(timezone.utc)
        return cls(
            vendor_id=vendor_id,
            category_id=category_id,
            name=name.strip(),
            description=description,
            base_price=to_money(base_price),
            price_unit=price_unit,
            specs=list(specs or []),
            location=location,
            delivery_time=delivery_time,
            status=ListingStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )

    def publish(self, *, vendor_id: int) -> 'EnterpriseListing':
        if self.vendor_id != vendor_id:
            raise ForbiddenError('Only the listing vendor can publish it')
        if self.status == ListingStatus.ACTIVE:
            return self
        if self.status != ListingStatus.DRAFT:
            raise DomainError(f'Cannot publish a {self.status} listing')
        return attrs.evolve(
            self, status=ListingStatus.ACTIVE, updated_at=datetime.now(timezone.utc)
        )


# ========== Quote request ==========


@attrs.define
class QuoteRequest:
    buyer_id: int
    requested_quantity: int
    project_specs: ProjectSpecs
    expires_at: datetime
    listing_id: Optional[int] = None
    vendor_id: Optional[int] = None
    notes: Optional[str] = None
    delivery_deadline: Optional[datetime] = None
    status: QuoteRequestStatus = QuoteRequestStatus.PENDING
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        buyer_id: int,
        requested_quantity: int,
        project_specs: ProjectSpecs,
        ttl_days: int,
        listing_id: Optional[int] = None,
        vendor_id: Optional[int] = None,
        notes: Optional[str] = None,
        delivery_deadline: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> 'QuoteRequest':
        if requested_quantity <= 0:
            raise DomainError('Requested quantity must be greater than 0')
        if vendor_id is not None and vendor_id == buyer_id:
            raise DomainError('Cannot request a quote from yourself')
        now = now or datetime.now(timezone.utc)
        return cls(
            buyer_id=buyer_id,
            requested_quantity=requested_quantity,
            project_specs=project_specs,
            expires_at=now + timedelta(days=ttl_days),
            listing_id=listing_id,
            vendor_id=vendor_id,
            notes=notes,
            delivery_deadline=delivery_deadline,
            status=QuoteRequestStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_open_request(self) -> bool:
        return self.listing_id is None and self.vendor_id is None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def expire(self, now: datetime) -> 'QuoteRequest':
        return attrs.evolve(self, status=QuoteRequestStatus.EXPIRED, updated_at=now)

    def ensure_open_for_response(self, now: datetime) -> None:
        if self.status not in (QuoteRequestStatus.PENDING, QuoteRequestStatus.RESPONDED):
            raise DomainError(f'Quote request is {self.status}')
        if self.is_expired(now):
            raise DomainError('Quote request has expired')

    def mark_responded(self, now: datetime) -> 'QuoteRequest':
        if self.status == QuoteRequestStatus.RESPONDED:
            return self
        return attrs.evolve(self, status=QuoteRequestStatus.RESPONDED, updated_at=now)

    def decide(self, *, accepted: bool, now: datetime) -> 'QuoteRequest':
        if self.status != QuoteRequestStatus.RESPONDED:
            raise DomainError(f'Cannot decide on a quote request in status {self.status}')
        status = QuoteRequestStatus.ACCEPTED if accepted else QuoteRequestStatus.REJECTED
        return attrs.evolve(self, status=status, updated_at=now)


# ========== Quote response ==========


@attrs.define
class QuoteResponse:
    quote_request_id: int
    vendor_id: int
    proposed_total_price: Decimal
    valid_until: datetime
    line_items: List[QuoteLineItem] = attrs.field(factory=list)
    delivery_estimate: Optional[str] = None
    message: Optional[str] = None
    payment_terms: Optional[str] = None
    warranty_terms: Optional[str] = None
    status: QuoteResponseStatus = QuoteResponseStatus.PENDING
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        quote_request_id: int,
        vendor_id: int,
        proposed_total_price: Decimal,
        valid_until: datetime,
        line_items: Optional[List[QuoteLineItem]] = None,
        delivery_estimate: Optional[str] = None,
        message: Optional[str] = None,
        payment_terms: Optional[str] = None,
        warranty_terms: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> 'QuoteResponse':
        now = now or datetime.now(timezone.utc)
        if proposed_total_price <= 0:
            raise DomainError('Proposed total price must be greater than 0')
        if valid_until <= now:
            raise DomainError('Quote validity must end in the future')
        for item in line_items or []:
            if item.quantity <= 0 or item.unit_price < 0:
                raise DomainError('Line items need a positive quantity and a non-negative price')
        return cls(
            quote_request_id=quote_request_id,
            vendor_id=vendor_id,
            proposed_total_price=to_money(proposed_total_price),
            valid_until=valid_until,
            line_items=list(line_items or []),
            delivery_estimate=delivery_estimate,
            message=message,
            payment_terms=payment_terms,
            warranty_terms=warranty_terms,
            status=QuoteResponseStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    def accept(self, now: datetime) -> 'QuoteResponse':
        self._ensure_pending(now)
        return attrs.evolve(self, status=QuoteResponseStatus.ACCEPTED, updated_at=now)

    def reject(self, now: datetime) -> 'QuoteResponse':
        if self.status == QuoteResponseStatus.REJECTED:
            return self
        if self.status != QuoteResponseStatus.PENDING:
            raise DomainError(f'Quote response is {self.status}')
        return attrs.evolve(self, status=QuoteResponseStatus.REJECTED, updated_at=now)

    def _ensure_pending(self, now: datetime) -> None:
        if self.status != QuoteResponseStatus.PENDING:
            raise DomainError(f'Quote response is {self.status}')
        if now >= self.valid_until:
            raise DomainError('Quote response is no longer valid')
