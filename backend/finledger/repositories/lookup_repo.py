"""Reference table lookups (categories, currencies, account types, ...)."""

from sqlalchemy.ext.asyncio import AsyncSession

from finledger.models.lookups import AccountType, Category, Currency, State, TransactionType


class LookupRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_category(self, category_id: int) -> Category | None:
        return await self.db.get(Category, category_id)

    async def get_currency(self, currency_id: int) -> Currency | None:
        return await self.db.get(Currency, currency_id)

    async def get_account_type(self, account_type_id: int) -> AccountType | None:
        return await self.db.get(AccountType, account_type_id)

    async def get_transaction_type(self, transaction_type_id: int) -> TransactionType | None:
        return await self.db.get(TransactionType, transaction_type_id)

    async def get_state(self, state_id: int) -> State | None:
        return await self.db.get(State, state_id)
