"""Pagination over materialized sequences and SQLAlchemy async queries."""

from __future__ import annotations

import math
from typing import Generic, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.config import settings

T = TypeVar("T")


# ── FastAPI dependency ──────────────────────────────────────────────

class PaginationParams:
    """Inject via ``Depends(PaginationParams)`` on any list endpoint."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
        page_size: int = Query(
            default=settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Items per page",
        ),
    ) -> None:
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ── Pydantic response models ───────────────────────────────────────

class PaginationMeta(BaseModel):
    """Metadata block embedded in every paginated response."""

    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class Page(BaseModel, Generic[T]):
    """Standard envelope: ``{"data": [...], "meta": {...}}``."""

    data: list[T]
    meta: PaginationMeta


# ── Slicing helper ──────────────────────────────────────────────────

def paginate(items: Sequence[T], page_size: int, page: int) -> Page[T]:
    """
    Return the 1-indexed *page* of *items*.

    A page past the end yields an empty ``data`` list rather than an error.
    An empty collection still reports one (empty) page.
    """
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    if page < 1:
        raise ValueError("page must be >= 1")

    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    offset = (page - 1) * page_size

    return Page(
        data=list(items[offset:offset + page_size]),
        meta=PaginationMeta(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )


# ── SQLAlchemy helper ───────────────────────────────────────────────

async def paginate_query(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
) -> Page:
    """
    Run *query* with LIMIT/OFFSET from *params*; same envelope as ``paginate``.

    *query* must select a single ORM entity and carry its own ORDER BY.
    """
    count_q = select(func.count()).select_from(query.order_by(None).subquery())
    total: int = (await session.execute(count_q)).scalar_one()

    rows = (
        await session.execute(query.offset(params.offset).limit(params.page_size))
    ).scalars().all()

    total_pages = max(1, math.ceil(total / params.page_size))
    return Page(
        data=list(rows),
        meta=PaginationMeta(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_prev=params.page > 1,
        ),
    )
