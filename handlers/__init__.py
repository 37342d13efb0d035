"""
Handlers package for the shop client pages.

Each handler owns the state of one page (its lists, loading flag and
messages) and exposes the page's actions as methods.
"""

from .auth import AuthHandler
from .base import BaseHandler, ViewState
from .categories import CategoryListHandler
from .debts import DebtListHandler, DebtManagementHandler
from .products import ProductListHandler
from .transactions import TransactionListHandler
from .users import UserManagementHandler

__all__ = [
    "AuthHandler",
    "BaseHandler",
    "ViewState",
    "CategoryListHandler",
    "DebtListHandler",
    "DebtManagementHandler",
    "ProductListHandler",
    "TransactionListHandler",
    "UserManagementHandler",
]
