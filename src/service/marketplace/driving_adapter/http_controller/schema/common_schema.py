"""
Response envelope shared by every endpoint

Success: {"success": true, "data": ...}
Failure: {"success": false, "error": "...", "data": null} (built by the exception handlers)
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict

from src.service.marketplace.app.dto.page import Page


T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class PageResponse(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def of(cls, page: Page, item_model: type[BaseModel]) -> 'PageResponse':
        return cls(
            items=[item_model.model_validate(item) for item in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            pages=page.pages,
        )


class MessageResponse(BaseModel):
    message: str


class EntityModel(BaseModel):
    """Response models built straight from domain entities"""

    model_config = ConfigDict(from_attributes=True)
