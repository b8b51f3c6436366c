"""Shared response envelopes and base model configuration."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class APIModel(BaseModel):
    """Base for every payload; camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DataResponse(APIModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(APIModel, Generic[T]):
    success: bool = True
    count: int
    data: list[T]


class PageRef(APIModel):
    page: int
    limit: int


class Pagination(APIModel):
    next: PageRef | None = None
    prev: PageRef | None = None


class PagedResponse(ListResponse[T], Generic[T]):
    total: int
    pagination: Pagination = Field(default_factory=Pagination)


class MessageResponse(APIModel):
    success: bool = True
    message: str


class EmptyResponse(APIModel):
    success: bool = True
    data: dict = Field(default_factory=dict)


def paginate(total: int, page: int, limit: int) -> Pagination:
    """Build next/prev links the way list endpoints report them."""

    start = (page - 1) * limit
    end = page * limit
    return Pagination(
        next=PageRef(page=page + 1, limit=limit) if end < total else None,
        prev=PageRef(page=page - 1, limit=limit) if start > 0 else None,
    )
