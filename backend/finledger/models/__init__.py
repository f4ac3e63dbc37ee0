"""SQLAlchemy models."""

from finledger.models.account import Account
from finledger.models.base import Base
from finledger.models.budget import Budget
from finledger.models.lookups import (
    AccountType,
    Category,
    Currency,
    State,
    TransactionDirection,
    TransactionType,
)
from finledger.models.transaction import Transaction
from finledger.models.user import User

__all__ = [
    "Base",
    "User",
    "Account",
    "Transaction",
    "Budget",
    "Category",
    "Currency",
    "AccountType",
    "TransactionType",
    "State",
    "TransactionDirection",
]
