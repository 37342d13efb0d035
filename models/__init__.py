"""
Models package for the records exchanged with the shop backend.

This package contains Pydantic models for request bodies, validated
response records and the derived (client-only) invoice and summary records.
"""

from .base import WireModel
from .catalog import (Category, CategoryInput, Product, ProductInput,
                      ProductPage, ProductQuery, ProductStatus)
from .debt import (AddDebtRequest, DebtChangeType, DebtDetails,
                   DebtHistoryEntry, DebtUpdateRequest, Invoice, UserSummary)
from .transactions import (Transaction, TransactionCreate, TransactionItem,
                           TransactionLineInput, TransactionStatus,
                           TransactionUpdate)
from .users import LoginRequest, LoginResponse, RegisterRequest, Role, User

__all__ = [
    "WireModel",
    "Category",
    "CategoryInput",
    "Product",
    "ProductInput",
    "ProductPage",
    "ProductQuery",
    "ProductStatus",
    "AddDebtRequest",
    "DebtChangeType",
    "DebtDetails",
    "DebtHistoryEntry",
    "DebtUpdateRequest",
    "Invoice",
    "UserSummary",
    "Transaction",
    "TransactionCreate",
    "TransactionItem",
    "TransactionLineInput",
    "TransactionStatus",
    "TransactionUpdate",
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "Role",
    "User",
]
