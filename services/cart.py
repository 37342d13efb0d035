"""
Shopping cart used to build checkout transactions.

The cart lives only on the client: it is created empty, filled from the
product list, and destroyed on checkout or cancel.
"""

from decimal import Decimal
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field

from models import Product
from services.exceptions import InvalidInputError
from utils.messages import translate


class CartLine(BaseModel):
    product_id: str
    name: str
    price: Decimal = Decimal("0")
    quantity: int = Field(1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    """
    Mapping from product id to cart line, in insertion order.

    Quantities stay within ``[1, product.quantity]``; setting a quantity of 0
    removes the line, and anything above the available stock is rejected
    without touching the current line.
    """

    def __init__(self):
        self._lines: Dict[str, CartLine] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._lines

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def quantity_of(self, product_id: str) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line else 0

    def add(self, product: Product) -> CartLine:
        """Add one unit of a product."""
        line = self._lines.get(product.id)
        if line is not None:
            if line.quantity >= product.quantity:
                raise InvalidInputError(
                    translate("stock_exceeded", available=product.quantity)
                )
            line = line.model_copy(update={"quantity": line.quantity + 1})
        else:
            if product.quantity < 1:
                raise InvalidInputError(translate("out_of_stock", name=product.name))
            line = CartLine(product_id=product.id, name=product.name, price=product.price)
        self._lines[product.id] = line
        return line

    def update_quantity(self, product: Product, quantity: Any) -> None:
        """
        Set the quantity of a product's line.

        Raises:
            InvalidInputError: Quantity is not a whole number, is negative, or
                exceeds the stock; the existing line is left unchanged
        """
        try:
            quantity = int(quantity)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(translate("quantity_invalid")) from e

        if quantity < 0:
            raise InvalidInputError(translate("quantity_invalid"))
        if quantity == 0:
            self.remove(product.id)
            return
        if quantity > product.quantity:
            raise InvalidInputError(
                translate("max_quantity", name=product.name, available=product.quantity)
            )

        line = self._lines.get(product.id)
        if line is None:
            line = CartLine(product_id=product.id, name=product.name, price=product.price)
        self._lines[product.id] = line.model_copy(update={"quantity": quantity})

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    def to_items(self) -> List[Dict[str, Any]]:
        """Checkout line items as the transactions endpoint expects them."""
        return [
            {"product_id": line.product_id, "quantity": line.quantity}
            for line in self._lines.values()
        ]

    def clear(self) -> None:
        self._lines.clear()
