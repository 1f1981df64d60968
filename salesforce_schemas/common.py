"""Base model and list envelope used on the wire."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(WireModel):
    limit: int
    offset: int
    count: int


class ListResponse(WireModel, Generic[T]):
    """Envelope returned by every list endpoint."""

    data: list[T]
    pagination: Pagination

