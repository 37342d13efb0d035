"""
Debt pages.

``DebtManagementHandler`` is the admin dashboard over pending transactions:
per-user summary, daily invoices, inline editing of a user's debt amount,
marking transactions paid and recording manual debt entries.
``DebtListHandler`` manages debt balances per user: adding debt, deleting it
and viewing the debt history.

Both pages re-fetch from the backend after every successful mutation and
never patch their lists locally.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from models import (DebtDetails, DebtHistoryEntry, Invoice, Role, Transaction,
                    TransactionStatus, User, UserSummary)
from services.exceptions import InvalidInputError
from services.invoices import group_invoices, invoices_for_user, same_invoice
from services.ledger import DebtLedger, DebtRowEditor
from services.summary import grand_total, summarize_debts
from utils.decorators import require_role, single_flight, view_action
from utils.messages import translate

from .base import BaseHandler


class DebtManagementHandler(BaseHandler):
    def __init__(self, session, client, confirm=None):
        super().__init__(session, client, confirm)
        self.debts: Tuple[Transaction, ...] = ()
        self.users: Tuple[User, ...] = ()
        self.search = ""
        self.status: Optional[str] = TransactionStatus.PENDING.value
        self.selected_invoice: Optional[Invoice] = None
        self.details: Optional[DebtDetails] = None
        self.ledger = DebtLedger(client, self.gateway, self.confirm)
        self.editor = DebtRowEditor(self.ledger)

    # Derived data

    @property
    def invoices(self) -> Tuple[Invoice, ...]:
        return group_invoices(self.debts)

    @property
    def summary(self) -> Tuple[UserSummary, ...]:
        return summarize_debts(self.debts)

    @property
    def total_debt(self):
        return grand_total(self.summary)

    def user_by_name(self, username: str) -> Optional[User]:
        return next((u for u in self.users if u.username == username), None)

    def toggle_invoice(self, invoice: Invoice) -> Optional[Invoice]:
        if same_invoice(self.selected_invoice, invoice):
            self.selected_invoice = None
        else:
            self.selected_invoice = invoice
        return self.selected_invoice

    # Fetching

    def _reload_debts(self) -> None:
        self.debts = self.gateway.fetch_debts(status=self.status, user=self.search)
        if self.details is not None:
            self.details = self.details.model_copy(
                update={"invoices": invoices_for_user(self.invoices, self.details.username)}
            )

    def _reload_after_mutation(self, users: bool = True) -> None:
        with self.refreshing():
            if users:
                self.users = self.gateway.fetch_users()
            self._reload_debts()

    @view_action()
    @require_role(Role.ADMIN)
    def load(self) -> None:
        """Fetch pending debts (filtered by the search term) and all users."""
        self._reload_debts()
        self.users = self.gateway.fetch_users()

    @view_action()
    @require_role(Role.ADMIN)
    def search_user(self, term: str) -> None:
        self.search = (term or "").strip()
        self._reload_debts()

    # Inline debt amount editing

    @view_action(track_loading=False)
    def begin_edit(self, user: User) -> None:
        self.editor.begin(user)

    def update_edit(self, value: str) -> None:
        self.editor.update(value)

    @view_action(track_loading=False)
    def cancel_edit(self) -> None:
        self.editor.cancel()

    @view_action(success="debt_updated")
    @single_flight
    @require_role(Role.ADMIN)
    def save_debt(self) -> None:
        """Submit the edited amount of the row being edited."""
        self.users = self.editor.save()
        self._reload_after_mutation(users=False)

    @view_action(success="debt_updated")
    @single_flight
    @require_role(Role.ADMIN)
    def set_debt(self, user_id: str, amount: Any) -> None:
        self.users = self.ledger.set_debt(user_id, amount)
        self._reload_after_mutation(users=False)

    # Debt transactions

    @view_action(success="marked_paid")
    @require_role(Role.ADMIN)
    def mark_paid(self, transaction_id: str) -> None:
        self.ledger.mark_paid(transaction_id)
        self._reload_after_mutation(users=False)

    @view_action(success="debt_details_updated")
    @require_role(Role.ADMIN)
    def update_debt_details(self, transaction_id: str, fields: Dict[str, Any]) -> None:
        self.ledger.update_debt_details(transaction_id, fields)
        self._reload_after_mutation()

    @view_action(success="debt_entry_added")
    @single_flight
    @require_role(Role.ADMIN)
    def record_debt_entry(
        self,
        username: str,
        amount: Any,
        when: Optional[datetime] = None,
        note: str = "",
    ) -> None:
        """
        Record a manual debt for a user as a pending transaction without items.

        Args:
            username: Owner of the debt
            amount: Positive amount as typed
            when: Date and time of the debt, defaults to now
            note: Free text
        """
        if not username:
            raise InvalidInputError(translate("user_required"))
        self.ledger.record_debt_entry(username, amount, when or datetime.now(), note)
        self._reload_after_mutation()

    @view_action(track_loading=False)
    @require_role(Role.ADMIN)
    def view_debt_details(self, username: str) -> Optional[DebtDetails]:
        """Open the invoices of one user; the user must be in the loaded user list."""
        user = self.user_by_name(username)
        if user is None:
            raise InvalidInputError(translate("user_unknown"))
        self.details = DebtDetails(
            username=username,
            user_id=user.id,
            invoices=invoices_for_user(self.invoices, username),
        )
        return self.details

    def close_debt_details(self) -> None:
        self.details = None


class DebtListHandler(BaseHandler):
    def __init__(self, session, client, confirm=None):
        super().__init__(session, client, confirm)
        self.users: Tuple[User, ...] = ()
        self.history: Tuple[DebtHistoryEntry, ...] = ()
        self.history_user: Optional[User] = None
        self.ledger = DebtLedger(client, self.gateway, self.confirm)

    @property
    def has_updates(self) -> bool:
        """Whether any user's debt has been changed since accounts were created."""
        return any(user.last_debt_update for user in self.users)

    def filtered_users(self, term: str = "") -> Tuple[User, ...]:
        term = (term or "").strip().lower()
        if not term:
            return self.users
        return tuple(
            user for user in self.users
            if term in user.username.lower() or term in (user.email or "").lower()
        )

    @view_action()
    @require_role(Role.ADMIN)
    def load(self) -> None:
        self.users = self.gateway.fetch_users()

    @view_action(success="debt_updated")
    @single_flight
    @require_role(Role.ADMIN)
    def add_debt(self, user: User, amount: Any, note: Optional[str] = None) -> None:
        """Increase a user's debt by ``amount``."""
        self.users = self.ledger.add_debt(user, amount, note)

    @view_action(success="debt_deleted")
    @require_role(Role.ADMIN)
    def delete_debt(self, user_id: str) -> None:
        self.users = self.ledger.delete_debt(user_id)

    @view_action()
    @require_role(Role.ADMIN)
    def view_history(self, user: User) -> Tuple[DebtHistoryEntry, ...]:
        self.history = self.ledger.history(user.id)
        self.history_user = user
        return self.history

    def close_history(self) -> None:
        self.history = ()
        self.history_user = None
