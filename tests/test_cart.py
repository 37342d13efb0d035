from decimal import Decimal

import pytest

from factories import make_product
from services.cart import Cart
from services.exceptions import InvalidInputError


def test_add_increments_quantity():
    cart = Cart()
    cola = make_product("p-cola", price=12000, quantity=5)

    cart.add(cola)
    cart.add(cola)

    assert len(cart) == 1
    assert cart.quantity_of("p-cola") == 2
    assert cart.total() == Decimal("24000")


def test_add_stops_at_stock():
    cart = Cart()
    last_one = make_product("p-1", quantity=1)
    cart.add(last_one)

    with pytest.raises(InvalidInputError, match="only 1 in stock"):
        cart.add(last_one)

    assert cart.quantity_of("p-1") == 1


def test_out_of_stock_product_cannot_be_added():
    cart = Cart()

    with pytest.raises(InvalidInputError, match="out of stock"):
        cart.add(make_product("p-1", quantity=0))

    assert cart.is_empty


def test_update_quantity_within_stock():
    cart = Cart()
    rice = make_product("p-rice", price=18000, quantity=10)
    cart.add(rice)

    cart.update_quantity(rice, "4")

    assert cart.quantity_of("p-rice") == 4
    assert cart.lines[0].line_total == Decimal("72000")


def test_update_quantity_above_stock_is_rejected_and_keeps_line():
    cart = Cart()
    rice = make_product("p-rice", quantity=3)
    cart.add(rice)
    cart.update_quantity(rice, 2)

    with pytest.raises(InvalidInputError, match="maximum quantity"):
        cart.update_quantity(rice, 4)

    assert cart.quantity_of("p-rice") == 2


def test_update_quantity_zero_removes_line():
    cart = Cart()
    rice = make_product("p-rice")
    cart.add(rice)

    cart.update_quantity(rice, 0)

    assert "p-rice" not in cart
    assert cart.is_empty


@pytest.mark.parametrize("quantity", [-1, "two", None, "1.5"])
def test_update_quantity_rejects_invalid_values(quantity):
    cart = Cart()
    rice = make_product("p-rice")
    cart.add(rice)

    with pytest.raises(InvalidInputError):
        cart.update_quantity(rice, quantity)

    assert cart.quantity_of("p-rice") == 1


def test_to_items_and_clear():
    cart = Cart()
    a = make_product("p-a")
    b = make_product("p-b")
    cart.add(a)
    cart.add(b)
    cart.update_quantity(b, 3)

    assert cart.to_items() == [
        {"product_id": "p-a", "quantity": 1},
        {"product_id": "p-b", "quantity": 3},
    ]

    cart.remove("p-a")
    assert len(cart) == 1
    cart.clear()
    assert cart.is_empty
    assert cart.total() == Decimal("0")
