"""Shared response shapes: the JSON envelope and paginated pages."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Every response body: a message, the HTTP status and an optional payload."""

    message: str
    status: int
    data: T | None = None
    code: str | None = None


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int


class LookupRef(BaseModel):
    """id/name pair for a joined reference row."""

    id: int
    name: str

    model_config = {"from_attributes": True}
