"""Product catalog records: categories, products and product queries."""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import pydantic
from pydantic import Field

from models.base import WireModel, id_field


class ProductStatus(str, Enum):
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"


class Category(WireModel):
    id: str = id_field()
    name: str


class Product(WireModel):
    id: str = id_field()
    sku: str = ""
    name: str
    category: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0)
    quantity: int = Field(0, ge=0)
    status: ProductStatus = ProductStatus.IN_STOCK

    @pydantic.field_validator("category", mode="before")
    def reduce_populated_category(cls, v):
        # Populated categories arrive as objects; keep the reference only
        if isinstance(v, dict):
            return v.get("_id") or v.get("id") or v.get("name")
        return v


class ProductPage(WireModel):
    data: Tuple[Product, ...] = ()
    total_pages: int = Field(1, ge=0)

    @pydantic.field_validator("total_pages", mode="before")
    def missing_total_is_one(cls, v):
        return v or 1


class ProductInput(WireModel):
    """Body of ``POST /api/products`` and ``PUT /api/products/:id``."""

    sku: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    status: ProductStatus = ProductStatus.IN_STOCK


class CategoryInput(WireModel):
    name: str = Field(..., min_length=1)


class ProductQuery(WireModel):
    """Search, filter, sort and paging parameters of ``GET /api/products``."""

    search: str = ""
    category: str = ""
    status: str = ""
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    sort_by: str = "createdAt"
    order: str = Field("desc", pattern="^(asc|desc)$")
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)

    def to_params(self) -> Dict[str, Any]:
        params = self.model_dump(by_alias=True, exclude_none=True)
        return {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in params.items()
            if value != ""
        }
