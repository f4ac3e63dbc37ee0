"""Existence checks against the shared reference tables."""

from sqlalchemy.ext.asyncio import AsyncSession

from finledger.core.exceptions import NotFoundError
from finledger.models.lookups import AccountType, Category, Currency, State, TransactionType
from finledger.repositories.lookup_repo import LookupRepository


class LookupService:
    def __init__(self, db: AsyncSession):
        self.repo = LookupRepository(db)

    async def require_category(self, category_id: int) -> Category:
        category = await self.repo.get_category(category_id)
        if category is None:
            raise NotFoundError("Category")
        return category

    async def require_currency(self, currency_id: int) -> Currency:
        currency = await self.repo.get_currency(currency_id)
        if currency is None:
            raise NotFoundError("Currency")
        return currency

    async def require_account_type(self, account_type_id: int) -> AccountType:
        account_type = await self.repo.get_account_type(account_type_id)
        if account_type is None:
            raise NotFoundError("Account type")
        return account_type

    async def require_transaction_type(self, transaction_type_id: int) -> TransactionType:
        transaction_type = await self.repo.get_transaction_type(transaction_type_id)
        if transaction_type is None:
            raise NotFoundError("Transaction type")
        return transaction_type

    async def require_state(self, state_id: int) -> State:
        state = await self.repo.get_state(state_id)
        if state is None:
            raise NotFoundError("State")
        return state
