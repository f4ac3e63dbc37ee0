"""Repositories: the SQLAlchemy queries behind each service."""

from finledger.repositories.account_repo import AccountRepository
from finledger.repositories.budget_repo import BudgetRepository
from finledger.repositories.lookup_repo import LookupRepository
from finledger.repositories.transaction_repo import TransactionRepository

__all__ = [
    "AccountRepository",
    "BudgetRepository",
    "LookupRepository",
    "TransactionRepository",
]
