"""
Fetch/refresh gateway.

Authenticated read requests used by the page handlers. Each fetch toggles the
owner's loading flag for its duration and returns a complete, immutable
snapshot; the caller replaces its list with the snapshot only on success, so
a failed fetch never leaves partially overwritten data behind.
"""

from contextlib import nullcontext
from typing import Optional, Tuple

from models import (Category, DebtHistoryEntry, ProductPage, ProductQuery,
                    Transaction, TransactionStatus, User)
from services.api_client import ShopAPIClient
from utils.logging import setup_logger

logger = setup_logger(__name__)


class RefreshGateway:
    """Read side of the client, shared by every handler."""

    def __init__(self, client: ShopAPIClient, state=None):
        self.client = client
        self.state = state

    def _tracking(self):
        return self.state.track() if self.state is not None else nullcontext()

    def fetch_users(self) -> Tuple[User, ...]:
        with self._tracking():
            users = self.client.list_users()
        logger.debug("Fetched users", extra={"count": len(users)})
        return users

    def fetch_categories(self) -> Tuple[Category, ...]:
        with self._tracking():
            return self.client.list_categories()

    def fetch_debts(
        self,
        status: Optional[str] = TransactionStatus.PENDING.value,
        user: Optional[str] = None,
    ) -> Tuple[Transaction, ...]:
        """
        Fetch transactions with populated products for the debt pages.

        Args:
            status: Status filter, pending by default; None fetches all
            user: Username filter; trimmed and lower-cased before sending

        Returns:
            Tuple of transactions
        """
        user_filter = user.strip().lower() if user else None
        with self._tracking():
            debts = self.client.list_transactions(
                status=status,
                user=user_filter or None,
                populate=True,
                fallback="fetch_debts_failed",
            )
        logger.debug(
            "Fetched debts",
            extra={"count": len(debts), "status": status, "user": user_filter},
        )
        return debts

    def fetch_transactions(self) -> Tuple[Transaction, ...]:
        with self._tracking():
            return self.client.list_transactions()

    def fetch_products(self, query: Optional[ProductQuery] = None) -> ProductPage:
        with self._tracking():
            return self.client.list_products(query)

    def fetch_debt_history(self, user_id: str) -> Tuple[DebtHistoryEntry, ...]:
        with self._tracking():
            return self.client.debt_history(user_id)
