"""Transaction recorder: ledger rows, filtered retrieval and aggregates."""

import calendar
from datetime import date, timedelta
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.config import settings
from finledger.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from finledger.models.lookups import TransactionDirection
from finledger.models.transaction import Transaction
from finledger.repositories.account_repo import AccountRepository
from finledger.repositories.transaction_repo import TransactionRepository
from finledger.schemas.transaction import TransactionCreate, TransactionFilter, TransactionUpdate
from finledger.services.common import build_page, check_pagination, parse_money, to_money
from finledger.services.lookup_service import LookupService

logger = structlog.get_logger()

MAX_DESCRIPTION_LENGTH = 250


def month_bounds(day: date) -> tuple[date, date]:
    """First and last calendar day of the month containing ``day``."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def percentage_change(current: Decimal, previous: Decimal) -> str:
    """Signed change from ``previous`` to ``current``, e.g. "+25.0%"."""
    if previous == 0:
        return "+100%" if current > 0 else "0%"
    change = (current - previous) / previous * 100
    return f"{change:+.1f}%"


class TransactionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = TransactionRepository(db)
        self.accounts = AccountRepository(db)
        self.lookups = LookupService(db)

    # ── CRUD ──────────────────────────────────────────

    async def create_transaction(self, data: TransactionCreate, user_id: int) -> Transaction:
        """Record a transaction against one of the user's accounts.

        Account balances are left untouched.
        """
        if data.description is None or not data.description.strip():
            raise ValidationError("Description is required")
        amount = parse_money(data.amount)
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        if data.date is None:
            raise ValidationError("Date is required")
        if len(data.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError("Description cannot exceed 250 characters")

        await self._check_account(data.account_id, user_id)
        await self.lookups.require_transaction_type(data.transaction_type_id)
        await self.lookups.require_state(data.state_id)
        await self.lookups.require_category(data.category_id)

        txn = await self.repo.create(
            description=data.description.strip(),
            amount=amount,
            date=data.date,
            transaction_type_id=data.transaction_type_id,
            state_id=data.state_id,
            user_id=user_id,
            account_id=data.account_id,
            category_id=data.category_id,
        )
        logger.info(
            "transaction_created",
            transaction_id=txn.id,
            account_id=data.account_id,
            amount=str(txn.amount),
        )
        return await self.repo.get_by_id(txn.id)

    async def get_transaction(self, transaction_id: int, user_id: int) -> Transaction:
        return await self._get_user_transaction(transaction_id, user_id)

    async def update_transaction(
        self, transaction_id: int, data: TransactionUpdate, user_id: int
    ) -> Transaction:
        txn = await self._get_user_transaction(transaction_id, user_id)
        fields = data.model_dump(exclude_unset=True)

        if "description" in fields:
            description = fields["description"]
            if description is None or not description.strip():
                raise ValidationError("Description cannot be empty")
            if len(description) > MAX_DESCRIPTION_LENGTH:
                raise ValidationError("Description cannot exceed 250 characters")
            fields["description"] = description.strip()
        if "amount" in fields:
            fields["amount"] = parse_money(fields["amount"])
            if fields["amount"] is None or fields["amount"] <= 0:
                raise ValidationError("Amount must be greater than 0")
        if "date" in fields and fields["date"] is None:
            raise ValidationError("Date is required")

        for key in ("account_id", "transaction_type_id", "state_id", "category_id"):
            if key in fields and fields[key] is None:
                raise ValidationError(f"{key} cannot be null")
        if "account_id" in fields and fields["account_id"] != txn.account_id:
            await self._check_account(fields["account_id"], user_id)
        if "transaction_type_id" in fields:
            await self.lookups.require_transaction_type(fields["transaction_type_id"])
        if "state_id" in fields:
            await self.lookups.require_state(fields["state_id"])
        if "category_id" in fields:
            await self.lookups.require_category(fields["category_id"])

        await self.repo.update(txn, fields)
        logger.info("transaction_updated", transaction_id=transaction_id, fields=sorted(fields))
        return await self.repo.get_by_id(transaction_id)

    async def delete_transaction(self, transaction_id: int, user_id: int) -> None:
        await self._get_user_transaction(transaction_id, user_id)
        await self.repo.delete(transaction_id)
        logger.info("transaction_deleted", transaction_id=transaction_id, user_id=user_id)

    # ── Listing ───────────────────────────────────────

    async def list_transactions(
        self,
        user_id: int,
        filters: TransactionFilter | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> dict:
        """Paginated transactions matching every given filter, newest first."""
        offset = check_pagination(page, page_size)
        items = await self.repo.list_for_user(user_id, filters, limit=page_size, offset=offset)
        total = await self.repo.count(user_id, filters)
        return build_page(items, total, page, page_size)

    async def list_by_account(
        self, account_id: int, user_id: int, page: int = 1, page_size: int = 20
    ) -> dict:
        await self._check_account(account_id, user_id)
        return await self.list_transactions(
            user_id, TransactionFilter(account_id=account_id), page, page_size
        )

    async def list_by_category(
        self, category_id: int, user_id: int, page: int = 1, page_size: int = 20
    ) -> dict:
        return await self.list_transactions(
            user_id, TransactionFilter(category_id=category_id), page, page_size
        )

    async def search_transactions(
        self, user_id: int, term: str | None, page: int = 1, page_size: int = 20
    ) -> dict:
        """Case-insensitive substring search on the description."""
        if term is None or not term.strip():
            raise ValidationError("Search term is required")
        if len(term) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError("Search term cannot exceed 250 characters")
        offset = check_pagination(page, page_size)

        term = term.strip()
        items = await self.repo.search(user_id, term, limit=page_size, offset=offset)
        total = await self.repo.count_search(user_id, term)
        return build_page(items, total, page, page_size)

    async def recent_transactions(self, user_id: int, limit: int = 10) -> list[Transaction]:
        if limit < 1:
            raise ValidationError("Limit must be greater than 0")
        return await self.repo.recent(user_id, limit)

    async def pending_transactions(
        self, user_id: int, pending_state_id: int | None = None
    ) -> list[Transaction]:
        if pending_state_id is None:
            pending_state_id = settings.pending_state_id
        return await self.repo.by_state(user_id, pending_state_id)

    # ── Aggregates ────────────────────────────────────

    async def _totals(
        self, user_id: int, start_date: date | None, end_date: date | None
    ) -> tuple[Decimal, Decimal, int]:
        income, expenses, count = await self.repo.totals(
            user_id,
            TransactionDirection.INCOME.transaction_type_id,
            TransactionDirection.EXPENSE.transaction_type_id,
            start_date,
            end_date,
        )
        return to_money(income), to_money(expenses), count

    async def summary(
        self,
        user_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict:
        income, expenses, count = await self._totals(user_id, start_date, end_date)
        average = to_money((income + expenses) / count) if count else to_money(0)
        return {
            "total_income": income,
            "total_expenses": expenses,
            "net_amount": income - expenses,
            "transaction_count": count,
            "average_amount": average,
        }

    async def monthly_summary(self, user_id: int, year: int) -> list[dict]:
        """Twelve entries, January to December; months without transactions are zero."""
        if year < 1 or year > 9999:
            raise ValidationError("Year is out of range")
        rows = await self.repo.monthly_totals(
            user_id,
            year,
            TransactionDirection.INCOME.transaction_type_id,
            TransactionDirection.EXPENSE.transaction_type_id,
        )
        by_month = {int(row.month): row for row in rows}

        months = []
        for month in range(1, 13):
            row = by_month.get(month)
            income = to_money(row.income) if row else to_money(0)
            expenses = to_money(row.expenses) if row else to_money(0)
            months.append({
                "month": month,
                "month_name": calendar.month_name[month],
                "year": year,
                "total_income": income,
                "total_expenses": expenses,
                "net_amount": income - expenses,
                "transaction_count": row.txn_count if row else 0,
            })
        return months

    async def month_over_month(self, user_id: int, today: date | None = None) -> dict:
        """Totals of the current calendar month against the previous one."""
        today = today or date.today()
        current_start, current_end = month_bounds(today)
        last_start, last_end = month_bounds(current_start - timedelta(days=1))

        current_income, current_expenses, _ = await self._totals(user_id, current_start, current_end)
        last_income, last_expenses, last_count = await self._totals(user_id, last_start, last_end)
        has_last_month = last_count > 0

        current_total = current_income + current_expenses
        last_total = last_income + last_expenses

        return {
            "current_month": {
                "total_amount": current_total,
                "total_income": current_income,
                "total_expenses": current_expenses,
                "balance": current_income - current_expenses,
            },
            "last_month": {
                "total_amount": last_total,
                "total_income": last_income,
                "total_expenses": last_expenses,
                "balance": last_income - last_expenses,
            } if has_last_month else None,
            "changes": {
                "total_amount_change": (
                    percentage_change(current_total, last_total) if has_last_month else None
                ),
                "total_income_change": (
                    percentage_change(current_income, last_income) if has_last_month else None
                ),
                "total_expenses_change": (
                    percentage_change(current_expenses, last_expenses) if has_last_month else None
                ),
                "total_amount_change_positive": current_total >= last_total,
                "total_income_change_positive": current_income >= last_income,
                # Spending less than last month counts as positive
                "total_expenses_change_positive": current_expenses <= last_expenses,
            },
        }

    # ── Helpers ───────────────────────────────────────

    async def _get_user_transaction(self, transaction_id: int, user_id: int) -> Transaction:
        txn = await self.repo.get_by_id(transaction_id)
        if not txn:
            raise NotFoundError("Transaction")
        if txn.user_id != user_id:
            raise UnauthorizedError("Transaction does not belong to the user")
        return txn

    async def _check_account(self, account_id: int, user_id: int) -> None:
        account = await self.accounts.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account")
        if account.user_id != user_id:
            raise ValidationError("Account does not belong to the user")
