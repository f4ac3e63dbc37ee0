"""Spending workflow: record an expense and charge it to the matching budget."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from finledger.models.budget import Budget
from finledger.models.lookups import TransactionDirection
from finledger.models.transaction import Transaction
from finledger.schemas.transaction import TransactionCreate
from finledger.services.budget_service import BudgetService
from finledger.services.transaction_service import TransactionService

logger = structlog.get_logger()


class SpendingService:
    """Links the transaction recorder to the budget tracker on request.

    Both writes go through the same session, so they commit or roll back
    together with the request.
    """

    def __init__(self, db: AsyncSession):
        self.transactions = TransactionService(db)
        self.budgets = BudgetService(db)

    async def record_expense(
        self, data: TransactionCreate, user_id: int
    ) -> tuple[Transaction, Budget | None]:
        txn = await self.transactions.create_transaction(data, user_id)
        if TransactionDirection.from_type_id(txn.transaction_type_id) is not TransactionDirection.EXPENSE:
            return txn, None

        budget = await self.budgets.record_spending(
            user_id, txn.category_id, txn.date, txn.amount
        )
        logger.info(
            "expense_applied_to_budget",
            transaction_id=txn.id,
            budget_id=budget.id if budget else None,
        )
        return txn, budget
