"""
Invoice grouping.

Groups flat transaction records into one invoice per user and calendar day.
Invoices are derived data: they are recomputed from every new snapshot of
transactions and never sent back to the backend.
"""

from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence, Tuple

from models import Invoice, Transaction
from utils.decorators import memoize_by_identity


def local_time(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Timestamp as a wall-clock time in ``tz``, or in local time when omitted.

    Naive timestamps are taken to be wall-clock times already and are
    returned unchanged.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


def sort_key(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Naive wall-clock time, so aware and naive timestamps order together."""
    return local_time(moment, tz).replace(tzinfo=None)


def day_of(moment: datetime, tz: Optional[tzinfo] = None):
    """Calendar day of a timestamp in ``tz``, local time by default."""
    return local_time(moment, tz).date()


def invoice_key(transaction: Transaction, tz: Optional[tzinfo] = None) -> str:
    return f"{transaction.user}_{day_of(transaction.created_at, tz).isoformat()}"


@memoize_by_identity
def group_invoices(
    transactions: Sequence[Transaction], tz: Optional[tzinfo] = None
) -> Tuple[Invoice, ...]:
    """
    Group transactions by ``(user, day of created_at)``.

    The first record seen for a key fixes the invoice's ``date`` and
    ``status``; items of every member are concatenated in input order and
    ``total_amount`` adds ``price * quantity`` for each item. Records without
    items still open or extend their group and add nothing to the total.

    Args:
        transactions: Snapshot of fetched transactions
        tz: Time zone defining calendar days; defaults to local time

    Returns:
        Invoices, most recent first; equal dates keep input order
    """
    groups: Dict[str, dict] = {}

    for transaction in transactions:
        key = invoice_key(transaction, tz)
        group = groups.get(key)
        if group is None:
            group = groups[key] = {
                "user": transaction.user,
                "date": transaction.created_at,
                "items": [],
                "total_amount": Decimal("0"),
                "status": transaction.status,
            }
        group["items"].extend(transaction.items)
        group["total_amount"] += transaction.items_total

    invoices = [
        Invoice(
            user=group["user"],
            date=group["date"],
            items=tuple(group["items"]),
            total_amount=group["total_amount"],
            status=group["status"],
        )
        for group in groups.values()
    ]
    # list.sort is stable, also with reverse=True
    invoices.sort(key=lambda invoice: sort_key(invoice.date, tz), reverse=True)
    return tuple(invoices)


def invoices_for_user(invoices: Iterable[Invoice], username: str) -> Tuple[Invoice, ...]:
    return tuple(invoice for invoice in invoices if invoice.user == username)


def invoice_total(invoices: Iterable[Invoice]) -> Decimal:
    return sum((invoice.total_amount for invoice in invoices), Decimal("0"))


def same_invoice(a: Optional[Invoice], b: Optional[Invoice]) -> bool:
    """Whether two invoices denote the same user and date (used for selection toggling)."""
    if a is None or b is None:
        return False
    return a.user == b.user and a.date == b.date
