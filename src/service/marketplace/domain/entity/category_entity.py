from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError


@attrs.define
class Category:
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    id: Optional[int] = None
    product_count: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls, *, name: str, description: Optional[str] = None, parent_id: Optional[int] = None
    ) -> 'Category':
        name = name.strip()
        if not name:
            raise DomainError('Category name is required')
        if len(name) > 100:
            raise DomainError('Category name must be at most 100 characters')
        return cls(name=name, description=description, parent_id=parent_id)
