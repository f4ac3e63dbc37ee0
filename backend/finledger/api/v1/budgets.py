"""Budget API routes."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.api.deps import Pagination, get_current_user, get_db
from finledger.schemas.budget import (
    BudgetCreate,
    BudgetResponse,
    BudgetSummary,
    BudgetUpdate,
    BudgetUpsert,
    MonthlyBudgetOverview,
    RecordSpendingRequest,
)
from finledger.schemas.common import Envelope, Page
from finledger.schemas.user import AuthenticatedUser
from finledger.services.budget_service import BudgetService, budget_view

router = APIRouter()


@router.post("", response_model=Envelope[BudgetResponse], status_code=201)
async def create_budget(
    data: BudgetCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budget = await BudgetService(db).create_budget(data, current_user.id)
    return Envelope(message="Budget created successfully", status=201, data=budget_view(budget))


@router.get("", response_model=Envelope[Page[BudgetResponse]])
async def list_budgets(
    month: date | None = None,
    pagination: Pagination = Depends(),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List budgets, latest month first."""
    result = await BudgetService(db).list_budgets(
        current_user.id, month, pagination.page, pagination.page_size
    )
    page = Page[BudgetResponse](
        **{**result, "items": [budget_view(b) for b in result["items"]]}
    )
    return Envelope(message="Budgets retrieved successfully", status=200, data=page)


@router.put("/upsert", response_model=Envelope[BudgetResponse])
async def create_or_update_budget(
    data: BudgetUpsert,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Set the budgeted amount for a category and month, creating the budget if needed."""
    budget = await BudgetService(db).create_or_update(
        current_user.id, data.category_id, data.month, data.budgeted_amount
    )
    return Envelope(message="Budget saved successfully", status=200, data=budget_view(budget))


@router.post("/record-spending", response_model=Envelope[BudgetResponse])
async def record_spending(
    data: RecordSpendingRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budget = await BudgetService(db).record_spending(
        current_user.id, data.category_id, data.month, data.additional_spent
    )
    if budget is None:
        return Envelope(message="No budget found for this category and month", status=200)
    return Envelope(message="Spending recorded successfully", status=200, data=budget_view(budget))


@router.get("/summary", response_model=Envelope[BudgetSummary])
async def budget_summary(
    month: date | None = None,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    summary = await BudgetService(db).summary(current_user.id, month)
    return Envelope(
        message="Budget summary retrieved successfully",
        status=200,
        data=BudgetSummary(**summary),
    )


@router.get("/monthly-overview", response_model=Envelope[MonthlyBudgetOverview])
async def monthly_overview(
    month: date | None = None,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """One month's summary and budgets (defaults to the current month)."""
    overview = await BudgetService(db).monthly_overview(current_user.id, month or date.today())
    return Envelope(
        message="Monthly budget overview retrieved successfully",
        status=200,
        data=MonthlyBudgetOverview(**overview),
    )


@router.get("/alerts", response_model=Envelope[list[BudgetResponse]])
async def budgets_with_alerts(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budgets = await BudgetService(db).list_with_alerts(current_user.id)
    return Envelope(
        message="Budget alerts retrieved successfully",
        status=200,
        data=[budget_view(b) for b in budgets],
    )


@router.get("/over-budget", response_model=Envelope[list[BudgetResponse]])
async def over_budget(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budgets = await BudgetService(db).list_over_budget(current_user.id)
    return Envelope(
        message="Over-budget budgets retrieved successfully",
        status=200,
        data=[budget_view(b) for b in budgets],
    )


@router.get("/{budget_id}", response_model=Envelope[BudgetResponse])
async def get_budget(
    budget_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budget = await BudgetService(db).get_budget(budget_id, current_user.id)
    return Envelope(message="Budget retrieved successfully", status=200, data=budget_view(budget))


@router.put("/{budget_id}", response_model=Envelope[BudgetResponse])
async def update_budget(
    budget_id: int,
    data: BudgetUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budget = await BudgetService(db).update_budget(budget_id, data, current_user.id)
    return Envelope(message="Budget updated successfully", status=200, data=budget_view(budget))


@router.delete("/{budget_id}", response_model=Envelope)
async def delete_budget(
    budget_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await BudgetService(db).delete_budget(budget_id, current_user.id)
    return Envelope(message="Budget deleted successfully", status=200)
