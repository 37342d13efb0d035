"""
Transaction list page.

Lists transactions newest first, grouped into daily invoices, and lets admins
create a transaction either from product lines or from a manual total.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from pydantic import ValidationError

from models import (Invoice, Product, Role, Transaction, TransactionCreate,
                    TransactionStatus, User)
from services.exceptions import InvalidInputError
from services.invoices import group_invoices, same_invoice, sort_key
from services.ledger import parse_amount
from utils.decorators import require_role, single_flight, view_action
from utils.logging import setup_logger
from utils.messages import translate

from .base import BaseHandler

logger = setup_logger(__name__)


def newest_first(transactions: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(sorted(transactions, key=lambda t: sort_key(t.created_at), reverse=True))


class TransactionListHandler(BaseHandler):
    def __init__(self, session, client, confirm=None):
        super().__init__(session, client, confirm)
        self.transactions: Tuple[Transaction, ...] = ()
        self.products: Tuple[Product, ...] = ()
        self.users: Tuple[User, ...] = ()
        self.selected_invoice: Optional[Invoice] = None

    @property
    def invoices(self) -> Tuple[Invoice, ...]:
        return group_invoices(self.transactions)

    def toggle_invoice(self, invoice: Invoice) -> Optional[Invoice]:
        """Select an invoice, or deselect it when it is already selected."""
        if same_invoice(self.selected_invoice, invoice):
            self.selected_invoice = None
        else:
            self.selected_invoice = invoice
        return self.selected_invoice

    def _reload_transactions(self) -> None:
        self.transactions = newest_first(self.gateway.fetch_transactions())

    @view_action()
    @require_role()
    def load(self) -> None:
        """Fetch transactions; admins also get the products and users of the create form."""
        self._reload_transactions()
        if self.session.is_admin:
            self.products = self.gateway.fetch_products().data
            self.users = self.gateway.fetch_users()

    @view_action(success="transactions_refreshed")
    @require_role()
    def refresh(self) -> None:
        self._reload_transactions()

    def draft_total(self, lines: Sequence[Dict[str, Any]]) -> Decimal:
        """Total of draft lines ``{"product_id", "quantity"}`` priced from the loaded products."""
        prices = {product.id: product.price for product in self.products}
        total = Decimal("0")
        for line in lines:
            try:
                quantity = int(line.get("quantity") or 0)
            except (TypeError, ValueError) as e:
                raise InvalidInputError(translate("quantity_invalid")) from e
            total += prices.get(line.get("product_id"), Decimal("0")) * quantity
        return total

    @view_action(success="transaction_created")
    @single_flight
    @require_role(Role.ADMIN)
    def create(
        self,
        user: str,
        items: Optional[Sequence[Dict[str, Any]]] = None,
        total_amount: Any = None,
    ) -> None:
        """
        Create a transaction for a user.

        With product lines the backend prices the items; without them a
        positive manual total is recorded as a pending debt.
        """
        user = (user or "").strip()
        if not user:
            raise InvalidInputError(translate("user_required"))

        if items:
            payload = {"user": user, "items": list(items)}
        else:
            try:
                amount = parse_amount(total_amount, allow_zero=False)
            except InvalidInputError as e:
                raise InvalidInputError(translate("items_or_total_required")) from e
            payload = {
                "user": user,
                "items": [],
                "total_amount": amount,
                "status": TransactionStatus.PENDING,
            }

        try:
            request = TransactionCreate.model_validate(payload)
        except ValidationError as e:
            raise InvalidInputError(translate("items_or_total_required")) from e

        self.client.create_transaction(request)
        logger.info("Transaction created", extra={"user": user, "lines": len(request.items)})
        with self.refreshing():
            self._reload_transactions()
