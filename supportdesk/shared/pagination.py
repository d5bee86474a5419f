"""
Pagination
==========

Offset pagination primitives shared by every listing endpoint.
"""

import math
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

from supportdesk.config import settings

T = TypeVar("T")


class PageRequest(BaseModel):
    """Requested page; ``page_size`` is clamped to the configured ceiling."""
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=settings.default_page_size, ge=1)

    @property
    def limit(self) -> int:
        return min(self.page_size, settings.max_page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """One page of results plus the numbers a client needs to navigate."""

    items: List[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.page_size else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @classmethod
    def build(cls, items: List[T], request: PageRequest, total_items: int) -> "Page[T]":
        return cls(
            items=list(items),
            page=request.page,
            page_size=request.limit,
            total_items=total_items,
        )


class PaginationMeta(BaseModel):
    """Pagination block of a list response."""
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def from_page(cls, page: Page) -> "PaginationMeta":
        return cls(
            page=page.page,
            page_size=page.page_size,
            total_items=page.total_items,
            total_pages=page.total_pages,
            has_next_page=page.has_next_page,
            has_previous_page=page.has_previous_page,
        )
