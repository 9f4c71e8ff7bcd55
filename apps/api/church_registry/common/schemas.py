"""Shared Pydantic building blocks: camelCase models and the response envelope."""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PHONE_PATTERN = r"^\+?\d{10,15}$"
PHOTO_URL_PATTERN = r"^https?://.*"

T = TypeVar("T")


class APIModel(BaseModel):
    """Accepts and emits camelCase field names, also accepts snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(APIModel, Generic[T]):
    """``{success, data, message}`` wrapper returned by every endpoint."""

    success: bool = True
    data: T
    message: str = ""


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AddressIn(APIModel):
    region: str = Field(..., min_length=1, max_length=100)
    zone: Optional[str] = Field(None, max_length=100)
    woreda: Optional[str] = Field(None, max_length=100)
    kebele: Optional[str] = Field(None, max_length=100)


class Address(APIModel):
    region: str
    zone: Optional[str] = None
    woreda: Optional[str] = None
    kebele: Optional[str] = None

