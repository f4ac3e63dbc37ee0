"""Budget tracker: monthly per-category spending envelopes."""

import calendar
from datetime import date
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.config import settings
from finledger.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from finledger.models.budget import Budget
from finledger.repositories.budget_repo import BudgetRepository
from finledger.schemas.budget import BudgetCreate, BudgetResponse, BudgetUpdate
from finledger.schemas.common import LookupRef
from finledger.services.common import build_page, check_pagination, parse_money, to_money
from finledger.services.lookup_service import LookupService

logger = structlog.get_logger()

SLOT_CONFLICT = "Budget already exists for this category and month"


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def compute_remaining(budgeted_amount: Decimal, spent_amount: Decimal) -> Decimal:
    return to_money(budgeted_amount) - to_money(spent_amount)


def is_alert_triggered(remaining: Decimal, budgeted_amount: Decimal) -> bool:
    """True once the budget is overspent or less than the alert ratio is left."""
    if remaining < 0:
        return True
    return remaining / budgeted_amount < settings.budget_alert_ratio


def budget_view(budget: Budget, today: date | None = None) -> BudgetResponse:
    """Response model for a budget, with the derived usage fields."""
    today = today or date.today()
    budgeted = to_money(budget.budgeted_amount)
    spent = to_money(budget.spent_amount)
    remaining = to_money(budget.remaining)
    percentage_used = float(spent / budgeted * 100) if budgeted > 0 else 0.0
    last_day = budget.month.replace(day=calendar.monthrange(budget.month.year, budget.month.month)[1])

    return BudgetResponse(
        id=budget.id,
        month=budget.month,
        budgeted_amount=budgeted,
        spent_amount=spent,
        remaining=remaining,
        alert_triggered=budget.alert_triggered,
        category_id=budget.category_id,
        user_id=budget.user_id,
        created_at=budget.created_at,
        category=LookupRef.model_validate(budget.category) if budget.category else None,
        percentage_used=round(percentage_used, 2),
        is_over_budget=remaining < 0,
        days_remaining_in_month=max(0, (last_day - today).days),
    )


class BudgetService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = BudgetRepository(db)
        self.lookups = LookupService(db)

    # ── CRUD ──────────────────────────────────────────

    async def create_budget(self, data: BudgetCreate, user_id: int) -> Budget:
        """Create the budget for one (category, month) slot of the user."""
        if data.month is None:
            raise ValidationError("Month is required")
        budgeted = parse_money(data.budgeted_amount)
        if budgeted is None or budgeted <= 0:
            raise ValidationError("Budgeted amount must be greater than 0")
        spent = parse_money(data.spent_amount)
        if spent is None or spent < 0:
            raise ValidationError("Spent amount cannot be negative")
        if data.category_id is None:
            raise ValidationError("Category ID is required")
        await self.lookups.require_category(data.category_id)

        month = first_of_month(data.month)
        if await self.repo.get_by_slot(user_id, data.category_id, month):
            raise ConflictError(SLOT_CONFLICT)

        remaining = compute_remaining(budgeted, spent)
        budget = await self.repo.create(
            month=month,
            budgeted_amount=budgeted,
            spent_amount=spent,
            remaining=remaining,
            alert_triggered=is_alert_triggered(remaining, budgeted),
            category_id=data.category_id,
            user_id=user_id,
        )
        logger.info(
            "budget_created",
            budget_id=budget.id,
            category_id=data.category_id,
            month=month.isoformat(),
        )
        return await self.repo.get_by_id(budget.id)

    async def get_budget(self, budget_id: int, user_id: int) -> Budget:
        return await self._get_user_budget(budget_id, user_id)

    async def list_budgets(
        self,
        user_id: int,
        month: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> dict:
        offset = check_pagination(page, page_size)
        if month is not None:
            month = first_of_month(month)
        items = await self.repo.list_by_user(user_id, month, limit=page_size, offset=offset)
        total = await self.repo.count(user_id, month)
        return build_page(items, total, page, page_size)

    async def update_budget(self, budget_id: int, data: BudgetUpdate, user_id: int) -> Budget:
        """Apply a partial update; remaining and the alert flag follow the merged values."""
        budget = await self._get_user_budget(budget_id, user_id)
        fields = data.model_dump(exclude_unset=True)

        budgeted = parse_money(fields.get("budgeted_amount", budget.budgeted_amount))
        spent = parse_money(fields.get("spent_amount", budget.spent_amount))
        if budgeted is None or budgeted <= 0:
            raise ValidationError("Budgeted amount must be greater than 0")
        if spent is None or spent < 0:
            raise ValidationError("Spent amount cannot be negative")
        if "month" in fields and fields["month"] is None:
            raise ValidationError("Month is required")
        if "category_id" in fields and fields["category_id"] is None:
            raise ValidationError("Category ID is required")

        category_id = fields.get("category_id", budget.category_id)
        month = first_of_month(fields.get("month", budget.month))
        if category_id != budget.category_id:
            await self.lookups.require_category(category_id)
        if (category_id, month) != (budget.category_id, budget.month):
            occupant = await self.repo.get_by_slot(user_id, category_id, month)
            if occupant is not None and occupant.id != budget.id:
                raise ConflictError(SLOT_CONFLICT)

        remaining = compute_remaining(budgeted, spent)
        await self.repo.update(budget, {
            "budgeted_amount": budgeted,
            "spent_amount": spent,
            "remaining": remaining,
            "alert_triggered": is_alert_triggered(remaining, budgeted),
            "category_id": category_id,
            "month": month,
        })
        logger.info("budget_updated", budget_id=budget_id, fields=sorted(fields))
        return await self.repo.get_by_id(budget_id)

    async def delete_budget(self, budget_id: int, user_id: int) -> None:
        await self._get_user_budget(budget_id, user_id)
        await self.repo.delete(budget_id)
        logger.info("budget_deleted", budget_id=budget_id, user_id=user_id)

    # ── Aggregates ────────────────────────────────────

    async def summary(self, user_id: int, month: date | None = None) -> dict:
        if month is not None:
            month = first_of_month(month)
        budgets = await self.repo.list_by_user(user_id, month)
        return self._summarize(budgets)

    @staticmethod
    def _summarize(budgets: list[Budget]) -> dict:
        total_budgeted = sum((to_money(b.budgeted_amount) for b in budgets), Decimal("0.00"))
        total_spent = sum((to_money(b.spent_amount) for b in budgets), Decimal("0.00"))
        total_remaining = sum((to_money(b.remaining) for b in budgets), Decimal("0.00"))
        percentage_used = (
            float(total_spent / total_budgeted * 100) if total_budgeted > 0 else 0.0
        )
        return {
            "total_budgeted": total_budgeted,
            "total_spent": total_spent,
            "total_remaining": total_remaining,
            "percentage_used": round(percentage_used, 2),
            "categories_over_budget": sum(1 for b in budgets if b.remaining < 0),
            "categories_with_alerts": sum(1 for b in budgets if b.alert_triggered),
        }

    async def monthly_overview(self, user_id: int, month: date) -> dict:
        """Summary of one month plus every budget in it."""
        month = first_of_month(month)
        budgets = await self.repo.list_by_user(user_id, month)
        return {
            "month": month,
            **self._summarize(budgets),
            "budgets": [budget_view(b) for b in budgets],
        }

    async def list_with_alerts(self, user_id: int) -> list[Budget]:
        return await self.repo.list_with_alerts(user_id)

    async def list_over_budget(self, user_id: int) -> list[Budget]:
        return await self.repo.list_over_budget(user_id)

    # ── Spending ──────────────────────────────────────

    async def record_spending(
        self,
        user_id: int,
        category_id: int,
        month: date,
        additional_spent: Decimal,
    ) -> Budget | None:
        """Add to the spent amount of the slot's budget.

        Returns None, without error, when the user has no budget for the slot.
        """
        additional_spent = parse_money(additional_spent)
        if additional_spent is None or additional_spent <= 0:
            raise ValidationError("Additional spent must be greater than 0")
        budget = await self.repo.get_by_slot(user_id, category_id, first_of_month(month))
        if budget is None:
            logger.info("budget_spending_skipped", category_id=category_id, month=month.isoformat())
            return None

        spent = parse_money(to_money(budget.spent_amount) + additional_spent)
        remaining = compute_remaining(budget.budgeted_amount, spent)
        await self.repo.update(budget, {
            "spent_amount": spent,
            "remaining": remaining,
            "alert_triggered": is_alert_triggered(remaining, to_money(budget.budgeted_amount)),
        })
        logger.info("budget_spending_recorded", budget_id=budget.id, amount=str(additional_spent))
        return await self.repo.get_by_id(budget.id)

    async def create_or_update(
        self,
        user_id: int,
        category_id: int,
        month: date,
        budgeted_amount: Decimal,
    ) -> Budget:
        """Set the budgeted amount of a slot, creating the budget if needed."""
        existing = await self.repo.get_by_slot(user_id, category_id, first_of_month(month))
        if existing is not None:
            return await self.update_budget(
                existing.id, BudgetUpdate(budgeted_amount=budgeted_amount), user_id
            )
        return await self.create_budget(
            BudgetCreate(month=month, budgeted_amount=budgeted_amount, category_id=category_id),
            user_id,
        )

    # ── Helpers ───────────────────────────────────────

    async def _get_user_budget(self, budget_id: int, user_id: int) -> Budget:
        budget = await self.repo.get_by_id(budget_id)
        if not budget:
            raise NotFoundError("Budget")
        if budget.user_id != user_id:
            raise UnauthorizedError("Budget does not belong to the user")
        return budget
