"""Shared reference tables (read-only for the ledger)."""

import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from finledger.config import settings
from finledger.models.base import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)


class Currency(Base):
    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)


class AccountType(Base):
    __tablename__ = "account_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)


class TransactionType(Base):
    __tablename__ = "transaction_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)


class State(Base):
    __tablename__ = "states"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(250), nullable=False)


class TransactionDirection(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def transaction_type_id(self) -> int:
        if self is TransactionDirection.INCOME:
            return settings.income_transaction_type_id
        return settings.expense_transaction_type_id

    @classmethod
    def from_type_id(cls, transaction_type_id: int) -> "TransactionDirection | None":
        """Direction of a transaction type, or None for types that are neither."""
        if transaction_type_id == settings.income_transaction_type_id:
            return cls.INCOME
        if transaction_type_id == settings.expense_transaction_type_id:
            return cls.EXPENSE
        return None
