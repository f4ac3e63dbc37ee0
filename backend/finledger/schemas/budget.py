"""Budget schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from finledger.schemas.common import LookupRef


class BudgetCreate(BaseModel):
    month: date | None = None
    budgeted_amount: Decimal | None = None
    category_id: int | None = None
    spent_amount: Decimal = Decimal("0.00")


class BudgetUpdate(BaseModel):
    budgeted_amount: Decimal | None = None
    spent_amount: Decimal | None = None
    category_id: int | None = None
    month: date | None = None


class BudgetUpsert(BaseModel):
    category_id: int
    budgeted_amount: Decimal
    month: date


class RecordSpendingRequest(BaseModel):
    category_id: int
    additional_spent: Decimal
    month: date


class BudgetResponse(BaseModel):
    id: int
    month: date
    budgeted_amount: Decimal
    spent_amount: Decimal
    remaining: Decimal
    alert_triggered: bool
    category_id: int
    user_id: int
    created_at: datetime
    category: LookupRef | None = None
    # Derived
    percentage_used: float
    is_over_budget: bool
    days_remaining_in_month: int


class BudgetSummary(BaseModel):
    total_budgeted: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    percentage_used: float
    categories_over_budget: int
    categories_with_alerts: int


class MonthlyBudgetOverview(BudgetSummary):
    month: date
    budgets: list[BudgetResponse]
