"""
Debt ledger reconciliation.

Mutations of user debt balances and debt transactions. Every mutation is
validated before a request is sent, destructive ones need an explicit
confirmation, and after success the user list is re-fetched in full so the
backend stays the single source of truth.

Setting an absolute amount leaves the history entry (increase or decrease,
change amount) to the backend. Adding debt sends the client's computed total
together with the increase; the backend should treat that total as a hint.
"""

import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from models import (AddDebtRequest, DebtHistoryEntry, DebtUpdateRequest,
                    TransactionCreate, TransactionStatus, TransactionUpdate,
                    User)
from services.api_client import ShopAPIClient
from services.exceptions import (ActionInProgress, ConfirmationDeclined,
                                 InvalidInputError, NotFoundError,
                                 RefreshError, ShopClientError)
from services.gateway import RefreshGateway
from utils.logging import setup_logger
from utils.messages import format_amount, translate

logger = setup_logger(__name__)

Confirm = Callable[[str], bool]


def parse_amount(raw: Any, allow_zero: bool = True) -> Decimal:
    """
    Validate a currency amount typed by the user.

    Args:
        raw: String or number from a form field
        allow_zero: Whether 0 is acceptable (it is for absolute amounts,
            not for increases)

    Returns:
        The amount as a Decimal

    Raises:
        InvalidInputError: Empty, non-numeric, non-finite, negative, or zero
            when ``allow_zero`` is False
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidInputError(translate("amount_required"))
    if isinstance(raw, bool):
        raise InvalidInputError(translate("amount_invalid"))
    if isinstance(raw, float) and not math.isfinite(raw):
        raise InvalidInputError(translate("amount_invalid"))

    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation as e:
        raise InvalidInputError(translate("amount_invalid")) from e

    if not amount.is_finite():
        raise InvalidInputError(translate("amount_invalid"))
    if amount < 0:
        raise InvalidInputError(translate("amount_negative"))
    if amount == 0 and not allow_zero:
        raise InvalidInputError(translate("amount_invalid"))
    return amount


class DebtLedger:
    """Write side of the debt pages."""

    def __init__(self, client: ShopAPIClient, gateway: RefreshGateway, confirm: Confirm):
        self.client = client
        self.gateway = gateway
        self.confirm = confirm

    def _require_confirmation(self, key: str, **kwargs: Any) -> None:
        if not self.confirm(translate(key, **kwargs)):
            raise ConfirmationDeclined(key)

    def _refresh_users(self) -> Tuple[User, ...]:
        try:
            return self.gateway.fetch_users()
        except ShopClientError as e:
            logger.warning(f"Re-fetch after mutation failed: {e.message}")
            raise RefreshError() from e

    # Absolute amount

    def confirm_set_debt(self, amount: Decimal) -> None:
        self._require_confirmation("confirm_set_debt", amount=format_amount(amount))

    def submit_set_debt(self, user_id: str, amount: Decimal) -> Tuple[User, ...]:
        """Send an already validated and confirmed absolute amount, then re-fetch users."""
        if not user_id:
            raise InvalidInputError(translate("user_id_invalid"))
        try:
            self.client.set_user_debt(user_id, DebtUpdateRequest(debt_amount=amount))
        except NotFoundError as e:
            raise NotFoundError(translate("user_not_found"), status_code=e.status_code) from e

        logger.info(
            "Debt amount set",
            extra={"user_id": user_id, "debt_amount": str(amount)},
        )
        return self._refresh_users()

    def set_debt(self, user_id: str, new_amount: Any) -> Tuple[User, ...]:
        """
        Replace a user's debt with an absolute amount.

        Args:
            user_id: Target user
            new_amount: New absolute amount as typed by the user

        Returns:
            The re-fetched user list
        """
        amount = parse_amount(new_amount)
        self.confirm_set_debt(amount)
        return self.submit_set_debt(user_id, amount)

    # Increase

    def add_debt(self, user: User, delta: Any, note: Optional[str] = None) -> Tuple[User, ...]:
        """
        Increase a user's debt.

        The request carries both the new total computed here and the increase
        itself, so the backend can write an accurate history note even when it
        recomputes the total.

        Returns:
            The re-fetched user list
        """
        if user is None:
            raise InvalidInputError(translate("user_required"))
        if not user.id:
            raise InvalidInputError(translate("user_id_invalid"))
        increase = parse_amount(delta, allow_zero=False)
        final_amount = user.debt_amount + increase

        request = AddDebtRequest(
            debt_amount=final_amount,
            new_debt_amount=increase,
            note=note or translate("add_debt_note", amount=format_amount(increase)),
        )
        self.client.add_user_debt(user.id, request)

        logger.info(
            "Debt added",
            extra={
                "user_id": user.id,
                "previous_amount": str(user.debt_amount),
                "increase": str(increase),
                "final_amount": str(final_amount),
            },
        )
        return self._refresh_users()

    def delete_debt(self, user_id: str) -> Tuple[User, ...]:
        if not user_id:
            raise InvalidInputError(translate("user_id_invalid"))
        self._require_confirmation("confirm_delete_debt")
        self.client.delete_user_debt(user_id)
        logger.info("Debt deleted", extra={"user_id": user_id})
        return self._refresh_users()

    def history(self, user_id: str) -> Tuple[DebtHistoryEntry, ...]:
        if not user_id:
            raise InvalidInputError(translate("user_id_invalid"))
        return self.gateway.fetch_debt_history(user_id)

    # Debt transactions

    def mark_paid(self, transaction_id: str) -> None:
        self._require_confirmation("confirm_mark_paid")
        self.client.update_transaction(
            transaction_id, TransactionUpdate(status=TransactionStatus.PAID)
        )
        logger.info("Transaction marked as paid", extra={"transaction_id": transaction_id})

    def update_debt_details(self, transaction_id: str, fields: Dict[str, Any]) -> None:
        try:
            update = TransactionUpdate.model_validate(fields)
        except ValueError as e:
            raise InvalidInputError(translate("amount_invalid")) from e
        self.client.update_transaction(transaction_id, update, fallback="debt_details_failed")

    def record_debt_entry(
        self,
        user_ref: str,
        amount: Any,
        when: Optional[datetime],
        note: str = "",
    ) -> None:
        """
        Record a manually entered debt as a pending transaction without items.

        Args:
            user_ref: Username or user id the debt belongs to
            amount: Positive amount as typed by the user
            when: Date and time of the debt
            note: Free text shown in the debt details
        """
        increase = parse_amount(amount, allow_zero=False)
        if when is None:
            raise InvalidInputError(translate("date_required"))
        if not user_ref:
            raise InvalidInputError(translate("user_required"))

        self._require_confirmation(
            "confirm_add_entry",
            amount=format_amount(increase),
            date=when.strftime("%d/%m/%Y"),
        )
        self.client.create_transaction(
            TransactionCreate(
                user=user_ref,
                total_amount=increase,
                created_at=when,
                note=note or "",
                status=TransactionStatus.PENDING,
            ),
            fallback="debt_entry_failed",
        )
        logger.info(
            "Debt entry recorded",
            extra={"user": user_ref, "amount": str(increase)},
        )


class EditState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SUBMITTING = "submitting"


class DebtRowEditor:
    """
    Edit state of the debt amount of one user row.

    VIEWING -> EDITING on ``begin`` (input seeded with the current amount);
    EDITING -> VIEWING on ``cancel``; EDITING -> SUBMITTING -> VIEWING on
    ``save``, whether the request succeeds or fails. Validation errors and a
    declined confirmation happen before submitting and keep the row in
    EDITING. A failed save discards the typed value.
    """

    def __init__(self, ledger: DebtLedger):
        self.ledger = ledger
        self.state = EditState.VIEWING
        self.user_id: Optional[str] = None
        self.value = ""

    def begin(self, user: User) -> None:
        if self.state == EditState.SUBMITTING:
            raise ActionInProgress("save")
        self.user_id = user.id
        self.value = format(user.debt_amount, "f")
        self.state = EditState.EDITING

    def update(self, value: str) -> None:
        if self.state == EditState.EDITING:
            self.value = value

    def cancel(self) -> None:
        if self.state == EditState.SUBMITTING:
            raise ActionInProgress("save")
        self._reset()

    def is_editing(self, user_id: str) -> bool:
        return self.state != EditState.VIEWING and self.user_id == user_id

    def save(self) -> Tuple[User, ...]:
        if self.state == EditState.SUBMITTING:
            raise ActionInProgress("save")
        if self.state != EditState.EDITING:
            raise InvalidInputError(translate("user_required"))

        amount = parse_amount(self.value)
        self.ledger.confirm_set_debt(amount)

        self.state = EditState.SUBMITTING
        try:
            return self.ledger.submit_set_debt(self.user_id, amount)
        finally:
            self._reset()

    def _reset(self) -> None:
        self.state = EditState.VIEWING
        self.user_id = None
        self.value = ""
