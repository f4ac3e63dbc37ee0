"""Transaction persistence: filtered listing, search and aggregates."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Select, case, delete, extract, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.models.transaction import Transaction
from finledger.schemas.transaction import TransactionFilter


class TransactionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, transaction_id: int) -> Transaction | None:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, **fields) -> Transaction:
        txn = Transaction(**fields)
        self.db.add(txn)
        await self.db.flush()
        return txn

    async def update(self, txn: Transaction, fields: dict) -> Transaction:
        for key, value in fields.items():
            setattr(txn, key, value)
        await self.db.flush()
        return txn

    async def delete(self, transaction_id: int) -> None:
        await self.db.execute(delete(Transaction).where(Transaction.id == transaction_id))
        await self.db.flush()

    # ── Listing ───────────────────────────────────────

    @staticmethod
    def _apply_filters(query: Select, user_id: int, filters: TransactionFilter | None) -> Select:
        """WHERE clauses shared by list and count (AND semantics, open-ended ranges)."""
        query = query.where(Transaction.user_id == user_id)
        if filters is None:
            return query
        if filters.start_date is not None:
            query = query.where(Transaction.date >= filters.start_date)
        if filters.end_date is not None:
            query = query.where(Transaction.date <= filters.end_date)
        if filters.transaction_type_id is not None:
            query = query.where(Transaction.transaction_type_id == filters.transaction_type_id)
        if filters.state_id is not None:
            query = query.where(Transaction.state_id == filters.state_id)
        if filters.account_id is not None:
            query = query.where(Transaction.account_id == filters.account_id)
        if filters.category_id is not None:
            query = query.where(Transaction.category_id == filters.category_id)
        if filters.min_amount is not None:
            query = query.where(Transaction.amount >= filters.min_amount)
        if filters.max_amount is not None:
            query = query.where(Transaction.amount <= filters.max_amount)
        return query

    @staticmethod
    def _newest_first(query: Select) -> Select:
        return query.order_by(
            Transaction.date.desc(),
            Transaction.created_at.desc(),
            Transaction.id.desc(),
        )

    async def list_for_user(
        self,
        user_id: int,
        filters: TransactionFilter | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Transaction]:
        query = self._newest_first(self._apply_filters(select(Transaction), user_id, filters))
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query.offset(offset))
        return list(result.scalars().all())

    async def count(self, user_id: int, filters: TransactionFilter | None = None) -> int:
        query = self._apply_filters(select(func.count(Transaction.id)), user_id, filters)
        result = await self.db.execute(query)
        return result.scalar() or 0

    def _search_clause(self, term: str):
        return Transaction.description.icontains(term, autoescape=True)

    async def search(self, user_id: int, term: str, limit: int, offset: int) -> list[Transaction]:
        query = self._newest_first(
            select(Transaction).where(Transaction.user_id == user_id, self._search_clause(term))
        )
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def count_search(self, user_id: int, term: str) -> int:
        result = await self.db.execute(
            select(func.count(Transaction.id)).where(
                Transaction.user_id == user_id, self._search_clause(term)
            )
        )
        return result.scalar() or 0

    async def recent(self, user_id: int, limit: int) -> list[Transaction]:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def by_state(self, user_id: int, state_id: int) -> list[Transaction]:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id, Transaction.state_id == state_id)
            .order_by(Transaction.date.asc(), Transaction.created_at.asc(), Transaction.id.asc())
        )
        return list(result.scalars().all())

    # ── Aggregates ────────────────────────────────────

    def _direction_sums(self, income_type_id: int, expense_type_id: int):
        income = func.coalesce(
            func.sum(case((Transaction.transaction_type_id == income_type_id, Transaction.amount), else_=0)),
            0,
        )
        expenses = func.coalesce(
            func.sum(case((Transaction.transaction_type_id == expense_type_id, Transaction.amount), else_=0)),
            0,
        )
        return income.label("income"), expenses.label("expenses")

    async def totals(
        self,
        user_id: int,
        income_type_id: int,
        expense_type_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> tuple[Decimal, Decimal, int]:
        """(income, expenses, count) over the optional inclusive date range."""
        income, expenses = self._direction_sums(income_type_id, expense_type_id)
        query = self._apply_filters(
            select(income, expenses, func.count(Transaction.id).label("txn_count")),
            user_id,
            TransactionFilter(start_date=start_date, end_date=end_date),
        )
        row = (await self.db.execute(query)).one()
        return Decimal(str(row.income)), Decimal(str(row.expenses)), row.txn_count

    async def monthly_totals(
        self,
        user_id: int,
        year: int,
        income_type_id: int,
        expense_type_id: int,
    ) -> list:
        """One row per month of ``year`` that has transactions: month, income, expenses, count."""
        income, expenses = self._direction_sums(income_type_id, expense_type_id)
        month_col = extract("month", Transaction.date).label("month")
        query = self._apply_filters(
            select(month_col, income, expenses, func.count(Transaction.id).label("txn_count")),
            user_id,
            TransactionFilter(start_date=date(year, 1, 1), end_date=date(year, 12, 31)),
        )
        query = query.group_by(literal_column("month")).order_by(literal_column("month"))
        result = await self.db.execute(query)
        return list(result.all())
