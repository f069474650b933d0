from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, condecimal, constr

from app.domain.entities.catalog_item import CatalogItem

Price = condecimal(max_digits=10, decimal_places=2, gt=0)
Isbn = constr(strip_whitespace=True, min_length=10, max_length=17)


class CreateCatalogItemRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: constr(strip_whitespace=True, min_length=1, max_length=255)
    author: constr(strip_whitespace=True, min_length=1, max_length=255)
    isbn: Isbn
    price: Price
    stock_quantity: int = Field(default=0, ge=0)
    category: constr(strip_whitespace=True, min_length=1, max_length=100)
    description: constr(max_length=1000) | None = None
    publisher: constr(max_length=100) | None = None


class UpdateCatalogItemRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: constr(strip_whitespace=True, min_length=1, max_length=255) | None = None
    author: constr(strip_whitespace=True, min_length=1, max_length=255) | None = None
    isbn: Isbn | None = None
    price: Price | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    category: constr(strip_whitespace=True, min_length=1, max_length=100) | None = None
    description: constr(max_length=1000) | None = None
    publisher: constr(max_length=100) | None = None
    active: bool | None = None


class CatalogItemResponse(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    price: Decimal
    stock_quantity: int
    category: str
    description: str | None = None
    publisher: str | None = None
    active: bool
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, item: CatalogItem) -> "CatalogItemResponse":
        return cls(**item.to_dict())


class MutationErrorResponse(BaseModel):
    error_kind: str
    detail: str | None = None
