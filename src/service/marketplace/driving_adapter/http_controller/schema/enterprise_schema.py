from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.service.marketplace.domain.entity.enterprise_entity import (
    ListingStatus,
    QuoteRequestStatus,
    QuoteResponseStatus,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    EntityModel,
)


class ListingSpecSchema(EntityModel):
    name: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., max_length=255)
    unit: Optional[str] = Field(None, max_length=20)


class ListingCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'category_id': 1,
                'name': 'Utility-scale 550W bifacial modules',
                'description': 'Pallets of 36, container loads available',
                'base_price': '0.21',
                'price_unit': 'W',
                'specs': [{'name': 'Efficiency', 'value': '21.5', 'unit': '%'}],
                'location': 'Houston, TX',
                'delivery_time': '4-6 weeks',
            }
        }
    )

    category_id: int
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ''
    base_price: Decimal = Field(..., gt=0, decimal_places=2)
    price_unit: str = Field('unit', max_length=50)
    specs: List[ListingSpecSchema] = []
    location: Optional[str] = Field(None, max_length=255)
    delivery_time: Optional[str] = Field(None, max_length=100)


class ListingResponse(EntityModel):
    id: int
    vendor_id: int
    category_id: int
    name: str
    description: str
    base_price: Decimal
    price_unit: str
    specs: List[ListingSpecSchema] = []
    location: Optional[str] = None
    delivery_time: Optional[str] = None
    status: ListingStatus
    created_at: Optional[datetime] = None


class ProjectSpecsSchema(EntityModel):
    project_type: Optional[str] = Field(None, max_length=100)
    system_size_kw: Optional[Decimal] = Field(None, gt=0)
    location: Optional[str] = Field(None, max_length=255)
    budget: Optional[Decimal] = Field(None, gt=0)
    timeline: Optional[str] = Field(None, max_length=100)


class QuoteRequestCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'listing_id': 1,
                'requested_quantity': 2000,
                'project_specs': {
                    'project_type': 'commercial rooftop',
                    'system_size_kw': '850',
                    'location': 'Austin, TX',
                },
                'notes': 'Need delivery before Q3',
            }
        }
    )

    listing_id: Optional[int] = None
    vendor_id: Optional[int] = None
    requested_quantity: int = Field(..., gt=0)
    project_specs: ProjectSpecsSchema = ProjectSpecsSchema()
    notes: Optional[str] = None
    delivery_deadline: Optional[datetime] = None


class LineItemSchema(EntityModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)


class QuoteResponseCreateRequest(BaseModel):
    quote_request_id: int
    proposed_total_price: Decimal = Field(..., gt=0, decimal_places=2)
    valid_until: datetime
    line_items: List[LineItemSchema] = []
    delivery_estimate: Optional[str] = Field(None, max_length=100)
    message: Optional[str] = None
    payment_terms: Optional[str] = Field(None, max_length=255)
    warranty_terms: Optional[str] = Field(None, max_length=255)


class QuoteResponseSchema(EntityModel):
    id: int
    quote_request_id: int
    vendor_id: int
    proposed_total_price: Decimal
    line_items: List[LineItemSchema] = []
    delivery_estimate: Optional[str] = None
    message: Optional[str] = None
    payment_terms: Optional[str] = None
    warranty_terms: Optional[str] = None
    status: QuoteResponseStatus
    valid_until: datetime
    created_at: Optional[datetime] = None


class QuoteRequestSchema(EntityModel):
    id: int
    buyer_id: int
    listing_id: Optional[int] = None
    vendor_id: Optional[int] = None
    requested_quantity: int
    project_specs: ProjectSpecsSchema
    notes: Optional[str] = None
    delivery_deadline: Optional[datetime] = None
    status: QuoteRequestStatus
    expires_at: datetime
    created_at: Optional[datetime] = None


class QuoteRequestWithResponses(EntityModel):
    request: QuoteRequestSchema
    responses: List[QuoteResponseSchema] = []


class QuoteDecisionResponse(EntityModel):
    request: QuoteRequestSchema
    response: QuoteResponseSchema
