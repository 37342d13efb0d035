from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from models import Product, Transaction, User


def product_record(product_id: str, price, quantity: int = 10, name: Optional[str] = None) -> dict:
    return {
        "_id": product_id,
        "sku": f"SKU-{product_id}",
        "name": name or f"Product {product_id}",
        "category": {"_id": "c-1", "name": "Drinks"},
        "price": price,
        "quantity": quantity,
        "status": "in_stock" if quantity else "out_of_stock",
    }


def make_product(product_id: str = "p-1", price=10000, quantity: int = 10) -> Product:
    return Product.model_validate(product_record(product_id, price, quantity))


def transaction_record(
    transaction_id: str,
    user: str,
    created_at: datetime,
    lines: Sequence[Tuple[object, int]] = (),
    status: str = "pending",
    total_amount=None,
) -> dict:
    """Wire record of a populated transaction; ``lines`` are (price, quantity) pairs."""
    return {
        "_id": transaction_id,
        "user": {"_id": f"u-{user}", "username": user},
        "items": [
            {"product": product_record(f"{transaction_id}-p{n}", price), "quantity": qty}
            for n, (price, qty) in enumerate(lines)
        ],
        "totalAmount": total_amount,
        "status": status,
        "createdAt": created_at.isoformat(),
    }


def make_transaction(*args, **kwargs) -> Transaction:
    return Transaction.model_validate(transaction_record(*args, **kwargs))


def user_record(
    user_id: str,
    username: str,
    debt_amount=0,
    role: str = "user",
    last_debt_update: Optional[str] = None,
) -> dict:
    return {
        "_id": user_id,
        "username": username,
        "email": f"{username}@shopmail.com",
        "role": role,
        "debtAmount": debt_amount,
        "lastDebtUpdate": last_debt_update,
    }


def make_user(user_id: str = "u-bob", username: str = "bob", debt_amount=0) -> User:
    return User.model_validate(user_record(user_id, username, debt_amount))


def money(value) -> Decimal:
    return Decimal(str(value))
