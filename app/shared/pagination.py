"""Limit/offset paging for booking and tutor listings."""

from __future__ import annotations

from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")

MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    limit: int
    offset: int


def get_pagination_params(
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> PaginationParams:
    return PaginationParams(limit=limit, offset=offset)


class Page(BaseModel, Generic[T]):
    """One page of results plus the unpaged total."""

    items: list[T]
    total: int
    limit: int
    offset: int


def build_page(items: list[T], total: int, params: PaginationParams) -> Page[T]:
    return Page(items=items, total=total, limit=params.limit, offset=params.offset)
