"""Transaction schemas for request/response validation."""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from finledger.schemas.budget import BudgetResponse
from finledger.schemas.common import LookupRef


class TransactionCreate(BaseModel):
    # Required fields are checked by the service so the first violated rule is reported
    description: str | None = None
    amount: Decimal | None = None
    transaction_type_id: int
    state_id: int
    account_id: int
    category_id: int
    date: dt.date | None = None


class TransactionUpdate(BaseModel):
    description: str | None = None
    amount: Decimal | None = None
    transaction_type_id: int | None = None
    state_id: int | None = None
    account_id: int | None = None
    category_id: int | None = None
    date: dt.date | None = None


class TransactionAccount(BaseModel):
    id: int
    name: str
    balance: Decimal

    model_config = {"from_attributes": True}


class TransactionResponse(BaseModel):
    id: int
    description: str
    amount: Decimal
    date: date
    created_at: datetime
    transaction_type_id: int
    state_id: int
    user_id: int
    account_id: int
    category_id: int
    transaction_type: LookupRef | None = None
    state: LookupRef | None = None
    account: TransactionAccount | None = None
    category: LookupRef | None = None

    model_config = {"from_attributes": True}


class TransactionFilter(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    transaction_type_id: int | None = None
    state_id: int | None = None
    account_id: int | None = None
    category_id: int | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None


class TransactionSummary(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    net_amount: Decimal
    transaction_count: int
    average_amount: Decimal


class MonthlyTransactionSummary(BaseModel):
    month: int  # 1..12
    month_name: str
    year: int
    total_income: Decimal
    total_expenses: Decimal
    net_amount: Decimal
    transaction_count: int


class MonthTotals(BaseModel):
    total_amount: Decimal
    total_income: Decimal
    total_expenses: Decimal
    balance: Decimal


class MonthChanges(BaseModel):
    total_amount_change: str | None = None
    total_income_change: str | None = None
    total_expenses_change: str | None = None
    total_amount_change_positive: bool
    total_income_change_positive: bool
    total_expenses_change_positive: bool


class MonthOverMonthComparison(BaseModel):
    current_month: MonthTotals
    last_month: MonthTotals | None = None
    changes: MonthChanges


class RecordedExpense(BaseModel):
    """A created transaction and the budget it was charged to, if any."""

    transaction: TransactionResponse
    budget: BudgetResponse | None = None
