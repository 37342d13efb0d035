"""Debt model objects for the shop ledger."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from pydantic import Field

from models.base import WireModel, id_field
from models.transactions import TransactionItem, TransactionStatus


class DebtChangeType(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class DebtHistoryEntry(WireModel):
    """One append-only entry of a user's debt history; read-only in the client."""

    id: Optional[str] = id_field(default=None)
    date: datetime
    amount: Decimal = Field(..., description="Running total after this entry")
    type: DebtChangeType
    change_amount: Decimal = Field(..., ge=0)
    note: str = ""


class DebtUpdateRequest(WireModel):
    """Body of ``PUT /api/auth/users/:id/debt`` (set the absolute amount)."""

    debt_amount: Decimal = Field(..., ge=0)


class AddDebtRequest(WireModel):
    """
    Body of ``POST /api/debts/users/:id/debt``.

    ``debt_amount`` is the client's view of the new total and is only a hint;
    ``new_debt_amount`` is the increase the history entry records.
    """

    debt_amount: Decimal = Field(..., ge=0)
    new_debt_amount: Decimal = Field(..., gt=0)
    note: str = ""


class Invoice(WireModel):
    """Transactions of one user on one calendar day, grouped for display."""

    user: str
    date: datetime
    items: Tuple[TransactionItem, ...] = ()
    total_amount: Decimal = Decimal("0")
    status: TransactionStatus = TransactionStatus.PENDING


class UserSummary(WireModel):
    user: str
    total_debt: Decimal = Decimal("0")
    transaction_count: int = 0
    last_transaction: Optional[datetime] = None


class DebtDetails(WireModel):
    """Invoices of one user, opened from the debt summary."""

    username: str
    user_id: Optional[str] = None
    invoices: Tuple[Invoice, ...] = ()
