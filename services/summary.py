"""Per-user debt statistics for the reporting views."""

from decimal import Decimal
from typing import Dict, Iterable, Sequence, Tuple

from models import Transaction, UserSummary
from services.invoices import sort_key
from utils.decorators import memoize_by_identity


@memoize_by_identity
def summarize_debts(transactions: Sequence[Transaction]) -> Tuple[UserSummary, ...]:
    """
    Aggregate transactions per user.

    ``total_debt`` sums ``price * quantity`` over every item, the count
    includes records without items, and ``last_transaction`` is the latest
    ``created_at``. Results are sorted by total debt, largest first; equal
    totals keep the order in which their users first appear.
    """
    acc: Dict[str, dict] = {}

    for transaction in transactions:
        entry = acc.setdefault(
            transaction.user,
            {"total_debt": Decimal("0"), "transaction_count": 0, "last_transaction": None},
        )
        entry["total_debt"] += transaction.items_total
        entry["transaction_count"] += 1
        latest = entry["last_transaction"]
        if latest is None or sort_key(transaction.created_at) > sort_key(latest):
            entry["last_transaction"] = transaction.created_at

    summaries = [UserSummary(user=user, **data) for user, data in acc.items()]
    summaries.sort(key=lambda summary: summary.total_debt, reverse=True)
    return tuple(summaries)


def grand_total(summaries: Iterable[UserSummary]) -> Decimal:
    return sum((summary.total_debt for summary in summaries), Decimal("0"))
