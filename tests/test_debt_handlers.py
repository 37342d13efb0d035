from datetime import datetime
from decimal import Decimal

import pytest

from conftest import FakeResponse
from factories import make_user, transaction_record, user_record
from handlers import DebtListHandler, DebtManagementHandler
from services.ledger import EditState

USERS = [
    user_record("u-alice", "alice", 150, last_debt_update="2024-01-05T10:00:00"),
    user_record("u-bob", "bob", 0),
]
DEBTS = [
    transaction_record("t-1", "alice", datetime(2024, 1, 5, 9, 0), [(100, 1)]),
    transaction_record("t-2", "alice", datetime(2024, 1, 5, 17, 0), [(25, 2)]),
    transaction_record("t-3", "bob", datetime(2024, 1, 4, 12, 0), [(30, 1)]),
]


@pytest.fixture
def dashboard(client, http, admin_session, confirm_yes):
    http.on("GET", "/api/transactions", DEBTS)
    http.on("GET", "/api/auth/users", USERS)
    handler = DebtManagementHandler(admin_session, client, confirm_yes)
    handler.load()
    http.calls.clear()
    return handler


class TestDebtManagement:
    def test_load_requests_pending_populated_debts(self, client, http, admin_session):
        http.on("GET", "/api/transactions", DEBTS)
        http.on("GET", "/api/auth/users", USERS)
        handler = DebtManagementHandler(admin_session, client)

        handler.search_user("  Alice ")

        assert http.calls[0].params == {"status": "pending", "user": "alice", "populate": "true"}

    def test_summary_and_invoices(self, dashboard):
        summary = {row.user: row for row in dashboard.summary}

        assert summary["alice"].total_debt == Decimal("150")
        assert summary["alice"].transaction_count == 2
        assert summary["bob"].total_debt == Decimal("30")
        assert dashboard.total_debt == Decimal("180")
        assert [(inv.user, inv.total_amount) for inv in dashboard.invoices] == [
            ("alice", Decimal("150")),
            ("bob", Decimal("30")),
        ]

    def test_derived_data_is_recomputed_only_for_new_snapshots(self, dashboard):
        assert dashboard.invoices is dashboard.invoices
        assert dashboard.summary is dashboard.summary

    def test_edit_and_save_debt(self, dashboard, http):
        http.on("PUT", "/api/auth/users/u-bob/debt", {"data": user_record("u-bob", "bob", 500)})
        bob = dashboard.user_by_name("bob")

        dashboard.begin_edit(bob)
        dashboard.update_edit("500")
        dashboard.save_debt()

        assert dashboard.state.success == "Debt amount updated."
        assert dashboard.editor.state is EditState.VIEWING
        assert [(c.method, c.path) for c in http.calls] == [
            ("PUT", "/api/auth/users/u-bob/debt"),
            ("GET", "/api/auth/users"),
            ("GET", "/api/transactions"),
        ]

    def test_invalid_edit_shows_error_and_keeps_editing(self, dashboard, http):
        dashboard.begin_edit(dashboard.user_by_name("bob"))
        dashboard.update_edit("abc")

        dashboard.save_debt()

        assert dashboard.state.error == "Invalid debt amount."
        assert dashboard.editor.is_editing("u-bob")
        assert http.calls == []

    def test_cancel_edit(self, dashboard, http):
        dashboard.begin_edit(dashboard.user_by_name("alice"))
        assert dashboard.editor.value == "150"

        dashboard.cancel_edit()

        assert not dashboard.editor.is_editing("u-alice")
        assert http.calls == []

    def test_save_is_ignored_while_in_flight(self, dashboard, http):
        dashboard.begin_edit(dashboard.user_by_name("bob"))
        dashboard.in_flight.add("save_debt")

        assert dashboard.is_busy("save_debt")
        dashboard.save_debt()

        assert http.calls == []
        assert dashboard.state.error == ""

    def test_mark_paid_refetches_debts(self, dashboard, http):
        http.on("PUT", "/api/transactions/t-3", {"success": True})

        dashboard.mark_paid("t-3")

        assert http.calls[0].body == {"status": "paid"}
        assert http.calls[-1].path == "/api/transactions"
        assert dashboard.state.success == "Transaction marked as paid."

    def test_mark_paid_with_failed_refetch_is_reported_as_saved(self, dashboard, http):
        http.on("PUT", "/api/transactions/t-1", {"success": True})
        http.on("GET", "/api/transactions", FakeResponse(500))

        dashboard.mark_paid("t-1")

        assert dashboard.state.error == "Saved, but the data could not be refreshed. Please reload."
        assert len(dashboard.debts) == 3

    def test_view_debt_details(self, dashboard):
        details = dashboard.view_debt_details("alice")

        assert details.user_id == "u-alice"
        assert [inv.total_amount for inv in details.invoices] == [Decimal("150")]

        dashboard.close_debt_details()
        assert dashboard.details is None

    def test_unknown_user_details(self, dashboard):
        assert dashboard.view_debt_details("mallory") is None
        assert dashboard.state.error == "User not found."

    def test_record_debt_entry(self, dashboard, http):
        http.on("POST", "/api/transactions", FakeResponse(201, {"success": True}))

        dashboard.record_debt_entry("bob", "20000", datetime(2024, 1, 6, 8, 0), "Eggs")

        post = http.calls_to("POST")[0]
        assert post.body["totalAmount"] == 20000
        assert post.body["user"] == "bob"
        assert dashboard.state.success == "New debt added."

    def test_mutation_with_failed_refetch(self, dashboard, http):
        http.on("PUT", "/api/transactions/t-1", {"success": True})
        http.on("GET", "/api/auth/users", FakeResponse(500, {}))

        dashboard.update_debt_details("t-1", {"note": "corrected"})

        assert http.calls[0].body == {"note": "corrected"}
        assert dashboard.state.error == "Saved, but the data could not be refreshed. Please reload."
        assert len(dashboard.users) == 2

    def test_toggle_invoice(self, dashboard):
        first = dashboard.invoices[0]

        assert dashboard.toggle_invoice(first) is first
        assert dashboard.toggle_invoice(first) is None


class TestDebtList:
    @pytest.fixture
    def debt_list(self, client, http, admin_session, confirm_yes):
        http.on("GET", "/api/auth/users", USERS)
        handler = DebtListHandler(admin_session, client, confirm_yes)
        handler.load()
        http.calls.clear()
        return handler

    def test_has_updates(self, debt_list, client, admin_session):
        assert debt_list.has_updates
        assert not DebtListHandler(admin_session, client).has_updates

    def test_filtered_users(self, debt_list):
        assert [u.username for u in debt_list.filtered_users("BO")] == ["bob"]
        assert len(debt_list.filtered_users("")) == 2

    def test_add_debt(self, debt_list, http):
        http.on("POST", "/api/debts/users/u-alice/debt", {"success": True})

        debt_list.add_debt(debt_list.users[0], "50")

        assert http.calls[0].body["debtAmount"] == 200
        assert http.calls[0].body["newDebtAmount"] == 50
        assert debt_list.state.success == "Debt amount updated."

    def test_add_debt_without_user(self, debt_list, http):
        debt_list.add_debt(None, "50")

        assert debt_list.state.error == "Please select a user."
        assert http.calls == []

    def test_delete_debt(self, debt_list, http):
        http.on("DELETE", "/api/debts/users/u-bob/debt", {"success": True})

        debt_list.delete_debt("u-bob")

        assert [c.method for c in http.calls] == ["DELETE", "GET"]
        assert debt_list.state.success == "Debt deleted."

    def test_view_history(self, debt_list, http):
        http.on(
            "GET",
            "/api/debts/users/u-alice/debt-history",
            [{"date": "2024-01-05T10:00:00", "amount": 150, "type": "increase", "changeAmount": 150}],
        )

        history = debt_list.view_history(make_user("u-alice", "alice", 150))

        assert len(history) == 1
        assert debt_list.history_user.username == "alice"
        assert http.mutations == []

        debt_list.close_history()
        assert debt_list.history == ()
        assert debt_list.history_user is None
