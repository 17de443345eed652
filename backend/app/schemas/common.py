from __future__ import annotations

import math
from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for payloads exchanged with the dashboard.

    Columns are snake_case in the database; everything crossing the API is
    camelCase. Requests may use either form.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(CamelModel, Generic[T]):
    data: List[T]
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int

    @classmethod
    def build(cls, items: Sequence[T], *, page: int, limit: int, total: int) -> "Page[T]":
        return cls(
            data=list(items),
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total_items=total,
            items_per_page=limit,
        )
