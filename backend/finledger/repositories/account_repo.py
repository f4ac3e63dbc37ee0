"""Account persistence, including the atomic balance primitive."""

from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.models.account import Account


class AccountRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, account_id: int) -> Account | None:
        result = await self.db.execute(
            select(Account)
            .where(Account.id == account_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def lock(self, account_ids: list[int]) -> list[Account]:
        """SELECT ... FOR UPDATE the given rows, always in ascending id order."""
        result = await self.db.execute(
            select(Account)
            .where(Account.id.in_(account_ids))
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_by_user(
        self,
        user_id: int,
        account_type_id: int | None = None,
        currency_id: int | None = None,
    ) -> list[Account]:
        query = select(Account).where(Account.user_id == user_id)
        if account_type_id is not None:
            query = query.where(Account.account_type_id == account_type_id)
        if currency_id is not None:
            query = query.where(Account.currency_id == currency_id)
        result = await self.db.execute(
            query.order_by(Account.created_at.desc(), Account.id.desc())
        )
        return list(result.scalars().all())

    async def list_low_balance(self, user_id: int, threshold: Decimal) -> list[Account]:
        result = await self.db.execute(
            select(Account)
            .where(Account.user_id == user_id, Account.balance < threshold)
            .order_by(Account.balance.asc(), Account.id.asc())
        )
        return list(result.scalars().all())

    async def total_balance(self, user_id: int) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Account.balance), 0)).where(Account.user_id == user_id)
        )
        return Decimal(str(result.scalar() or 0))

    async def create(self, **fields) -> Account:
        account = Account(**fields)
        self.db.add(account)
        await self.db.flush()
        return account

    async def update(self, account: Account, fields: dict) -> Account:
        for key, value in fields.items():
            setattr(account, key, value)
        await self.db.flush()
        return account

    async def delete(self, account_id: int) -> None:
        await self.db.execute(delete(Account).where(Account.id == account_id))
        await self.db.flush()

    async def adjust_balance(
        self,
        account_id: int,
        delta: Decimal,
        require_non_negative: bool = True,
    ) -> bool:
        """Apply ``balance += delta`` in a single conditional UPDATE.

        Returns False when no row matched: the account is gone or, with
        ``require_non_negative``, the new balance would drop below zero.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(balance=Account.balance + delta)
            .execution_options(synchronize_session=False)
        )
        if require_non_negative:
            stmt = stmt.where(Account.balance + delta >= 0)
        result = await self.db.execute(stmt)
        return result.rowcount == 1
