"""Budget persistence."""

from datetime import date

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.models.budget import Budget


class BudgetRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, budget_id: int) -> Budget | None:
        result = await self.db.execute(
            select(Budget)
            .where(Budget.id == budget_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_slot(self, user_id: int, category_id: int, month: date) -> Budget | None:
        """The budget occupying (user, category, month), if any."""
        result = await self.db.execute(
            select(Budget)
            .where(
                Budget.user_id == user_id,
                Budget.category_id == category_id,
                Budget.month == month,
            )
            .order_by(Budget.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _for_user(query: Select, user_id: int, month: date | None) -> Select:
        query = query.where(Budget.user_id == user_id)
        if month is not None:
            query = query.where(Budget.month == month)
        return query

    async def list_by_user(
        self,
        user_id: int,
        month: date | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Budget]:
        query = self._for_user(select(Budget), user_id, month).order_by(
            Budget.month.desc(), Budget.category_id.asc(), Budget.id.asc()
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query.offset(offset))
        return list(result.scalars().all())

    async def count(self, user_id: int, month: date | None = None) -> int:
        result = await self.db.execute(
            self._for_user(select(func.count(Budget.id)), user_id, month)
        )
        return result.scalar() or 0

    async def list_with_alerts(self, user_id: int) -> list[Budget]:
        result = await self.db.execute(
            select(Budget)
            .where(Budget.user_id == user_id, Budget.alert_triggered.is_(True))
            .order_by(Budget.month.desc(), Budget.category_id.asc())
        )
        return list(result.scalars().all())

    async def list_over_budget(self, user_id: int) -> list[Budget]:
        result = await self.db.execute(
            select(Budget)
            .where(Budget.user_id == user_id, Budget.remaining < 0)
            .order_by(Budget.month.desc(), Budget.category_id.asc())
        )
        return list(result.scalars().all())

    async def create(self, **fields) -> Budget:
        budget = Budget(**fields)
        self.db.add(budget)
        await self.db.flush()
        return budget

    async def update(self, budget: Budget, fields: dict) -> Budget:
        for key, value in fields.items():
            setattr(budget, key, value)
        await self.db.flush()
        return budget

    async def delete(self, budget_id: int) -> None:
        await self.db.execute(delete(Budget).where(Budget.id == budget_id))
        await self.db.flush()
