"""Transaction (debt invoice line) model objects for the shop ledger."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union

import pydantic
from pydantic import Field

from models.base import WireModel, id_field
from models.catalog import Product


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class TransactionItem(WireModel):
    """One line of a transaction; ``product`` is populated or a bare product id."""

    product: Union[Product, str, None] = None
    quantity: int = Field(0, ge=0)

    @property
    def unit_price(self) -> Decimal:
        if isinstance(self.product, Product):
            return self.product.price
        return Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Transaction(WireModel):
    """A checkout or an admin debt entry as returned by ``GET /api/transactions``."""

    id: str = id_field()
    user: str = Field(..., min_length=1)
    items: Tuple[TransactionItem, ...] = ()
    total_amount: Decimal = Decimal("0")
    status: TransactionStatus = TransactionStatus.PENDING
    created_at: datetime
    note: Optional[str] = None

    @pydantic.field_validator("user", mode="before")
    def reduce_populated_user(cls, v):
        # Populated users arrive as objects; invoices are keyed by username
        if isinstance(v, dict):
            return v.get("username") or v.get("_id") or v.get("id")
        return v

    @pydantic.field_validator("items", mode="before")
    def null_items_is_empty(cls, v):
        return () if v is None else v

    @pydantic.field_validator("total_amount", mode="before")
    def null_total_is_zero(cls, v):
        return Decimal("0") if v is None else v

    @property
    def items_total(self) -> Decimal:
        """Sum of ``price * quantity`` over the populated items."""
        return sum((item.line_total for item in self.items), Decimal("0"))


class TransactionLineInput(WireModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class TransactionCreate(WireModel):
    """
    Body of ``POST /api/transactions``.

    Either ``items`` (a checkout) or a positive ``total_amount`` (a manually
    entered debt) must be given.
    """

    user: str = Field(..., min_length=1)
    items: Tuple[TransactionLineInput, ...] = ()
    total_amount: Optional[Decimal] = Field(None, gt=0)
    status: Optional[TransactionStatus] = None
    created_at: Optional[datetime] = None
    note: Optional[str] = None

    @pydantic.model_validator(mode="after")
    def items_or_total(self):
        if not self.items and self.total_amount is None:
            raise ValueError("Either items or totalAmount is required")
        return self


class TransactionUpdate(WireModel):
    """Body of ``PUT /api/transactions/:id``; only the given fields are sent."""

    status: Optional[TransactionStatus] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)
    note: Optional[str] = None
    created_at: Optional[datetime] = None
