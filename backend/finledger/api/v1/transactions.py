"""Transaction API routes."""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.api.deps import Pagination, get_current_user, get_db
from finledger.schemas.common import Envelope, Page
from finledger.schemas.transaction import (
    MonthlyTransactionSummary,
    MonthOverMonthComparison,
    RecordedExpense,
    TransactionCreate,
    TransactionFilter,
    TransactionResponse,
    TransactionSummary,
    TransactionUpdate,
)
from finledger.schemas.user import AuthenticatedUser
from finledger.services.budget_service import budget_view
from finledger.services.spending_service import SpendingService
from finledger.services.transaction_service import TransactionService

router = APIRouter()


def to_page(result: dict) -> Page[TransactionResponse]:
    return Page[TransactionResponse](
        **{**result, "items": [TransactionResponse.model_validate(t) for t in result["items"]]}
    )


@router.post("", response_model=Envelope[TransactionResponse | RecordedExpense], status_code=201)
async def create_transaction(
    data: TransactionCreate,
    apply_to_budget: bool = False,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record a transaction.

    With ``apply_to_budget=true`` an expense is also added to the spent amount
    of the budget for its category and month.
    """
    if apply_to_budget:
        txn, budget = await SpendingService(db).record_expense(data, current_user.id)
        return Envelope(
            message="Transaction created successfully",
            status=201,
            data=RecordedExpense(
                transaction=TransactionResponse.model_validate(txn),
                budget=budget_view(budget) if budget else None,
            ),
        )

    txn = await TransactionService(db).create_transaction(data, current_user.id)
    return Envelope(
        message="Transaction created successfully",
        status=201,
        data=TransactionResponse.model_validate(txn),
    )


@router.get("", response_model=Envelope[Page[TransactionResponse]])
async def list_transactions(
    pagination: Pagination = Depends(),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    transaction_type: int | None = Query(None, alias="type"),
    transaction_type_id: int | None = None,
    state_id: int | None = None,
    account_id: int | None = None,
    category: int | None = None,
    category_id: int | None = None,
    min_amount: Decimal | None = Query(None, alias="minAmount"),
    max_amount: Decimal | None = Query(None, alias="maxAmount"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List transactions with pagination and filters."""
    filters = TransactionFilter(
        start_date=start_date,
        end_date=end_date,
        transaction_type_id=transaction_type_id if transaction_type_id is not None else transaction_type,
        state_id=state_id,
        account_id=account_id,
        category_id=category_id if category_id is not None else category,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    result = await TransactionService(db).list_transactions(
        current_user.id, filters, pagination.page, pagination.page_size
    )
    return Envelope(
        message="Transactions retrieved successfully",
        status=200,
        data=to_page(result),
    )


@router.get("/search", response_model=Envelope[Page[TransactionResponse]])
async def search_transactions(
    search: str | None = None,
    pagination: Pagination = Depends(),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Case-insensitive search on the description."""
    result = await TransactionService(db).search_transactions(
        current_user.id, search, pagination.page, pagination.page_size
    )
    return Envelope(
        message="Transactions retrieved successfully",
        status=200,
        data=to_page(result),
    )


@router.get("/recent", response_model=Envelope[list[TransactionResponse]])
async def recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transactions = await TransactionService(db).recent_transactions(current_user.id, limit)
    return Envelope(
        message="Recent transactions retrieved successfully",
        status=200,
        data=[TransactionResponse.model_validate(t) for t in transactions],
    )


@router.get("/pending", response_model=Envelope[list[TransactionResponse]])
async def pending_transactions(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transactions = await TransactionService(db).pending_transactions(current_user.id)
    return Envelope(
        message="Pending transactions retrieved successfully",
        status=200,
        data=[TransactionResponse.model_validate(t) for t in transactions],
    )


@router.get("/summary", response_model=Envelope[TransactionSummary])
async def transaction_summary(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Income, expense and net totals over an optional date range."""
    summary = await TransactionService(db).summary(current_user.id, start_date, end_date)
    return Envelope(
        message="Transaction summary retrieved successfully",
        status=200,
        data=TransactionSummary(**summary),
    )


@router.get("/monthly-summary", response_model=Envelope[list[MonthlyTransactionSummary]])
async def monthly_summary(
    year: int | None = None,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Per-month totals for a year (defaults to the current one)."""
    months = await TransactionService(db).monthly_summary(
        current_user.id, year if year is not None else date.today().year
    )
    return Envelope(
        message="Monthly summary retrieved successfully",
        status=200,
        data=[MonthlyTransactionSummary(**m) for m in months],
    )


@router.get("/comparison", response_model=Envelope[MonthOverMonthComparison])
async def month_over_month(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """This month's totals against last month's."""
    comparison = await TransactionService(db).month_over_month(current_user.id)
    return Envelope(
        message="Monthly comparison retrieved successfully",
        status=200,
        data=MonthOverMonthComparison(**comparison),
    )


@router.get("/account/{account_id}", response_model=Envelope[Page[TransactionResponse]])
async def list_by_account(
    account_id: int,
    pagination: Pagination = Depends(),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await TransactionService(db).list_by_account(
        account_id, current_user.id, pagination.page, pagination.page_size
    )
    return Envelope(
        message="Transactions retrieved successfully",
        status=200,
        data=to_page(result),
    )


@router.get("/category/{category_id}", response_model=Envelope[Page[TransactionResponse]])
async def list_by_category(
    category_id: int,
    pagination: Pagination = Depends(),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await TransactionService(db).list_by_category(
        category_id, current_user.id, pagination.page, pagination.page_size
    )
    return Envelope(
        message="Transactions retrieved successfully",
        status=200,
        data=to_page(result),
    )


@router.get("/{transaction_id}", response_model=Envelope[TransactionResponse])
async def get_transaction(
    transaction_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    txn = await TransactionService(db).get_transaction(transaction_id, current_user.id)
    return Envelope(
        message="Transaction retrieved successfully",
        status=200,
        data=TransactionResponse.model_validate(txn),
    )


@router.put("/{transaction_id}", response_model=Envelope[TransactionResponse])
async def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    txn = await TransactionService(db).update_transaction(transaction_id, data, current_user.id)
    return Envelope(
        message="Transaction updated successfully",
        status=200,
        data=TransactionResponse.model_validate(txn),
    )


@router.delete("/{transaction_id}", response_model=Envelope)
async def delete_transaction(
    transaction_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await TransactionService(db).delete_transaction(transaction_id, current_user.id)
    return Envelope(message="Transaction deleted successfully", status=200)
