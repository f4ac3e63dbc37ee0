"""Spending workflow tests."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import ALICE_ID, COMPLETED, EXPENSE, GROCERIES, INCOME, SALARY
from finledger.core.exceptions import ValidationError
from finledger.schemas.account import AccountCreate
from finledger.schemas.budget import BudgetCreate
from finledger.schemas.transaction import TransactionCreate
from finledger.services.account_service import AccountService
from finledger.services.budget_service import BudgetService
from finledger.services.spending_service import SpendingService


@pytest.fixture
async def account(db_session):
    return await AccountService(db_session).create_account(AccountCreate(name="Checking"), ALICE_ID)


def _expense(account_id, **overrides):
    fields = {
        "description": "Supermarket",
        "amount": Decimal("120"),
        "date": date(2024, 3, 12),
        "transaction_type_id": EXPENSE,
        "state_id": COMPLETED,
        "account_id": account_id,
        "category_id": GROCERIES,
    }
    fields.update(overrides)
    return TransactionCreate(**fields)


@pytest.mark.asyncio
async def test_expense_is_charged_to_budget(db_session, account):
    budget = await BudgetService(db_session).create_budget(
        BudgetCreate(month=date(2024, 3, 1), budgeted_amount=Decimal("500"), category_id=GROCERIES),
        ALICE_ID,
    )

    txn, charged = await SpendingService(db_session).record_expense(_expense(account.id), ALICE_ID)

    assert txn.id is not None
    assert charged.id == budget.id
    assert charged.spent_amount == Decimal("120.00")
    assert charged.remaining == Decimal("380.00")


@pytest.mark.asyncio
async def test_expense_without_budget_still_recorded(db_session, account):
    txn, charged = await SpendingService(db_session).record_expense(_expense(account.id), ALICE_ID)

    assert txn.id is not None
    assert charged is None


@pytest.mark.asyncio
async def test_income_does_not_touch_budget(db_session, account):
    budgets = BudgetService(db_session)
    budget = await budgets.create_budget(
        BudgetCreate(month=date(2024, 3, 1), budgeted_amount=Decimal("500"), category_id=SALARY),
        ALICE_ID,
    )

    _, charged = await SpendingService(db_session).record_expense(
        _expense(account.id, transaction_type_id=INCOME, category_id=SALARY), ALICE_ID
    )

    assert charged is None
    assert (await budgets.get_budget(budget.id, ALICE_ID)).spent_amount == Decimal("0.00")


@pytest.mark.asyncio
async def test_invalid_expense_writes_nothing(db_session, account):
    budgets = BudgetService(db_session)
    budget = await budgets.create_budget(
        BudgetCreate(month=date(2024, 3, 1), budgeted_amount=Decimal("500"), category_id=GROCERIES),
        ALICE_ID,
    )

    with pytest.raises(ValidationError):
        await SpendingService(db_session).record_expense(_expense(account.id, amount=Decimal("0")), ALICE_ID)

    assert (await budgets.get_budget(budget.id, ALICE_ID)).spent_amount == Decimal("0.00")
