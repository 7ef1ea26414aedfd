"""Pagination DTOs shared by list queries."""

from typing import Generic, List, TypeVar

import attrs


T = TypeVar('T')

MAX_PAGE_SIZE = 100


@attrs.define(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 20

    @classmethod
    def of(cls, *, page: int = 1, limit: int = 20) -> 'PageRequest':
        return cls(page=max(page, 1), limit=min(max(limit, 1), MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@attrs.define(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
