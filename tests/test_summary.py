from datetime import datetime, timezone
from decimal import Decimal

from factories import make_transaction
from services.summary import grand_total, summarize_debts


def test_totals_counts_and_last_transaction():
    debts = (
        make_transaction("t1", "bob", datetime(2024, 1, 1, 10, 0), [(10, 1)]),
        make_transaction("t2", "bob", datetime(2024, 1, 9, 10, 0), [(20, 1)]),
        make_transaction("t3", "bob", datetime(2024, 1, 4, 10, 0), [(15, 2)]),
    )

    (summary,) = summarize_debts(debts)

    assert summary.user == "bob"
    assert summary.total_debt == Decimal("60")
    assert summary.transaction_count == 3
    assert summary.last_transaction == datetime(2024, 1, 9, 10, 0)


def test_records_without_items_are_counted_but_add_nothing():
    debts = (
        make_transaction("t1", "bob", datetime(2024, 1, 1), [(10, 1)]),
        make_transaction("t2", "bob", datetime(2024, 1, 2), [], total_amount=500),
    )

    (summary,) = summarize_debts(debts)

    assert summary.total_debt == Decimal("10")
    assert summary.transaction_count == 2


def test_sorted_by_total_debt_with_stable_ties():
    debts = (
        make_transaction("t1", "ann", datetime(2024, 1, 1), [(50, 1)]),
        make_transaction("t2", "ben", datetime(2024, 1, 1), [(80, 1)]),
        make_transaction("t3", "cat", datetime(2024, 1, 1), [(50, 1)]),
        make_transaction("t4", "dan", datetime(2024, 1, 1), [(5, 1)]),
    )

    summaries = summarize_debts(debts)

    assert [s.user for s in summaries] == ["ben", "ann", "cat", "dan"]
    assert grand_total(summaries) == Decimal("185")


def test_empty_input():
    assert summarize_debts(()) == ()
    assert grand_total(()) == Decimal("0")


def test_last_transaction_with_naive_and_aware_timestamps():
    latest = datetime(2024, 1, 9, 10, 0, tzinfo=timezone.utc)
    debts = (
        make_transaction("t1", "bob", datetime(2024, 1, 1, 10, 0), [(10, 1)]),
        make_transaction("t2", "bob", latest, [(20, 1)]),
    )

    (summary,) = summarize_debts(debts)

    assert summary.last_transaction == latest
