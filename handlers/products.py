"""
Product list page.

Search, filter and page through the catalog, maintain products and
categories (admins), and collect products in a cart that is checked out as
one pending transaction.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from models import (Category, CategoryInput, Product, ProductInput,
                    ProductPage, ProductQuery, Role, TransactionCreate)
from services.cart import Cart
from services.config import config
from services.exceptions import InvalidInputError
from utils.decorators import require_role, single_flight, view_action
from utils.logging import setup_logger
from utils.messages import translate

from .base import BaseHandler

logger = setup_logger(__name__)

PRODUCT_REQUIRED_FIELDS = ("sku", "name", "price", "quantity")


def _optional_price(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidInputError(translate("price_range_invalid")) from e


def validate_price_range(min_price: Any, max_price: Any) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """
    Check a price filter before it is sent.

    Raises:
        InvalidInputError: A bound is negative or the minimum exceeds the maximum
    """
    low = _optional_price(min_price)
    high = _optional_price(max_price)
    if low is not None and low < 0:
        raise InvalidInputError(translate("price_min_negative"))
    if high is not None and high < 0:
        raise InvalidInputError(translate("price_max_negative"))
    if low is not None and high is not None and low > high:
        raise InvalidInputError(translate("price_range_invalid"))
    return low, high


class ProductListHandler(BaseHandler):
    def __init__(self, session, client, confirm=None, page_size: Optional[int] = None):
        super().__init__(session, client, confirm)
        self.products: Tuple[Product, ...] = ()
        self.categories: Tuple[Category, ...] = ()
        self.total_pages = 1
        self.query = ProductQuery(limit=page_size or config.page_size)
        self.cart = Cart()

    def _apply_page(self, page: ProductPage) -> None:
        self.products = page.data
        self.total_pages = page.total_pages

    def _reload_products(self) -> None:
        self._apply_page(self.gateway.fetch_products(self.query))

    def product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    @view_action()
    @require_role()
    def load(self) -> None:
        """Fetch categories and the current page of products."""
        self.categories = self.gateway.fetch_categories()
        self._reload_products()

    @view_action()
    @require_role()
    def apply_filters(self, **filters: Any) -> None:
        """
        Change search, category, status, price range or sort order and go back to page 1.

        The price range is checked before anything is sent.
        """
        low, high = validate_price_range(
            filters.pop("min_price", self.query.min_price),
            filters.pop("max_price", self.query.max_price),
        )
        try:
            query = ProductQuery.model_validate(
                {
                    **self.query.model_dump(),
                    **filters,
                    "min_price": low,
                    "max_price": high,
                    "page": 1,
                }
            )
        except ValidationError as e:
            raise InvalidInputError(translate("request_failed")) from e

        self.query = query
        self._reload_products()

    @view_action()
    @require_role()
    def go_to_page(self, page: int) -> None:
        try:
            page = int(page)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(translate("page_invalid")) from e
        page = max(1, min(page, self.total_pages))
        self.query = self.query.model_copy(update={"page": page})
        self._reload_products()

    # Catalog maintenance

    @staticmethod
    def _product_input(fields: Dict[str, Any]) -> ProductInput:
        missing = [
            name for name in PRODUCT_REQUIRED_FIELDS
            if fields.get(name) is None or str(fields.get(name)).strip() == ""
        ]
        if missing:
            raise InvalidInputError(translate("product_fields_required"))
        try:
            return ProductInput.model_validate(fields)
        except ValidationError as e:
            raise InvalidInputError(translate("product_fields_required")) from e

    @view_action(success="product_added")
    @require_role(Role.ADMIN)
    def add_product(self, fields: Dict[str, Any]) -> None:
        request = self._product_input(fields)
        self.client.create_product(request)
        logger.info("Product created", extra={"sku": request.sku})
        with self.refreshing():
            self._reload_products()

    @view_action(success="product_updated")
    @require_role(Role.ADMIN)
    def update_product(self, product_id: str, fields: Dict[str, Any]) -> None:
        request = self._product_input(fields)
        self.client.update_product(product_id, request)
        logger.info("Product updated", extra={"product_id": product_id})
        with self.refreshing():
            self._reload_products()

    @view_action(success="product_deleted")
    @require_role(Role.ADMIN)
    def delete_product(self, product_id: str) -> None:
        self.require_confirmation("confirm_delete_product")
        self.client.delete_product(product_id)
        self.cart.remove(product_id)
        with self.refreshing():
            self._reload_products()

    @view_action(success="category_added")
    @require_role(Role.ADMIN)
    def add_category(self, name: str) -> None:
        name = (name or "").strip()
        if not name:
            raise InvalidInputError(translate("category_name_required"))
        self.client.create_category(CategoryInput(name=name))
        with self.refreshing():
            self.categories = self.gateway.fetch_categories()

    # Cart

    @view_action(track_loading=False)
    def add_to_cart(self, product: Product) -> None:
        self.cart.add(product)

    @view_action(track_loading=False)
    def update_cart_quantity(self, product: Product, quantity: Any) -> None:
        self.cart.update_quantity(product, quantity)

    @view_action(track_loading=False)
    def remove_from_cart(self, product_id: str) -> None:
        self.cart.remove(product_id)

    def cancel_cart(self) -> None:
        self.cart = Cart()
        self.state.clear()

    @view_action(success="transaction_created")
    @single_flight
    @require_role()
    def checkout(self, cart_user: str = "") -> None:
        """
        Post the cart as one transaction and start a new cart.

        The buyer is the logged-in user; ``cart_user`` is used only without
        a session username.
        """
        user = (self.session.username if self.session else "") or (cart_user or "").strip()
        if not user:
            raise InvalidInputError(translate("cart_user_required"))
        if self.cart.is_empty:
            raise InvalidInputError(translate("cart_empty"))

        request = TransactionCreate(user=user, items=self.cart.to_items())
        self.client.create_transaction(request)
        logger.info(
            "Checkout completed",
            extra={"user": user, "lines": len(self.cart), "total": str(self.cart.total())},
        )
        self.cart = Cart()
        with self.refreshing():
            self._reload_products()
