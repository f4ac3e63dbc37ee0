"""Budget tracker service tests."""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from conftest import ALICE_ID, BOB_ID, GROCERIES, RENT, SALARY
from finledger.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from finledger.schemas.budget import BudgetCreate, BudgetUpdate
from finledger.services.budget_service import BudgetService, budget_view, is_alert_triggered

MARCH = date(2024, 3, 1)
APRIL = date(2024, 4, 1)


@pytest.fixture
async def service(db_session):
    return BudgetService(db_session)


def _data(**overrides):
    fields = {"month": MARCH, "budgeted_amount": Decimal("1000"), "category_id": GROCERIES}
    fields.update(overrides)
    return BudgetCreate(**fields)


@pytest.mark.asyncio
async def test_create_budget(service):
    budget = await service.create_budget(_data(month=date(2024, 3, 17)), ALICE_ID)

    assert budget.month == MARCH
    assert budget.remaining == Decimal("1000.00")
    assert budget.spent_amount == Decimal("0.00")
    assert budget.alert_triggered is False
    assert budget.category.name == "Groceries"


@pytest.mark.asyncio
async def test_alert_scenario(service):
    budget = await service.create_budget(_data(), ALICE_ID)

    budget = await service.update_budget(
        budget.id, BudgetUpdate(spent_amount=Decimal("920")), ALICE_ID
    )

    assert budget.remaining == Decimal("80.00")
    assert budget.alert_triggered is True


@pytest.mark.asyncio
async def test_update_recomputes_from_merged_values(service):
    budget = await service.create_budget(_data(spent_amount=Decimal("950")), ALICE_ID)
    assert budget.alert_triggered is True

    budget = await service.update_budget(
        budget.id, BudgetUpdate(budgeted_amount=Decimal("2000")), ALICE_ID
    )
    assert budget.spent_amount == Decimal("950.00")
    assert budget.remaining == Decimal("1050.00")
    assert budget.alert_triggered is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"month": None}, "Month is required"),
        ({"budgeted_amount": Decimal("0")}, "Budgeted amount must be greater than 0"),
        ({"budgeted_amount": Decimal("0.004")}, "Budgeted amount must be greater than 0"),
        ({"budgeted_amount": Decimal("1e12")}, "Amount is out of range"),
        ({"spent_amount": Decimal("-1")}, "Spent amount cannot be negative"),
        ({"category_id": None}, "Category ID is required"),
    ],
)
async def test_create_budget_validation(service, overrides, message):
    with pytest.raises(ValidationError) as exc_info:
        await service.create_budget(_data(**overrides), ALICE_ID)
    assert exc_info.value.message == message


@pytest.mark.asyncio
async def test_create_budget_unknown_category(service):
    with pytest.raises(NotFoundError):
        await service.create_budget(_data(category_id=99), ALICE_ID)


@pytest.mark.asyncio
async def test_duplicate_slot_conflicts_and_keeps_original(service):
    original = await service.create_budget(_data(), ALICE_ID)

    with pytest.raises(ConflictError) as exc_info:
        await service.create_budget(_data(month=date(2024, 3, 28), budgeted_amount=Decimal("5")), ALICE_ID)
    assert exc_info.value.message == "Budget already exists for this category and month"

    unchanged = await service.get_budget(original.id, ALICE_ID)
    assert unchanged.budgeted_amount == Decimal("1000.00")

    # Same slot for another user is free
    await service.create_budget(_data(), BOB_ID)


@pytest.mark.asyncio
async def test_update_into_occupied_slot_conflicts(service):
    await service.create_budget(_data(category_id=RENT), ALICE_ID)
    budget = await service.create_budget(_data(), ALICE_ID)

    with pytest.raises(ConflictError):
        await service.update_budget(budget.id, BudgetUpdate(category_id=RENT), ALICE_ID)

    moved = await service.update_budget(budget.id, BudgetUpdate(month=date(2024, 4, 9)), ALICE_ID)
    assert moved.month == APRIL


@pytest.mark.asyncio
async def test_get_and_delete_ownership(service):
    budget = await service.create_budget(_data(), ALICE_ID)

    with pytest.raises(UnauthorizedError):
        await service.get_budget(budget.id, BOB_ID)
    with pytest.raises(UnauthorizedError):
        await service.delete_budget(budget.id, BOB_ID)

    await service.delete_budget(budget.id, ALICE_ID)
    with pytest.raises(NotFoundError):
        await service.get_budget(budget.id, ALICE_ID)


@pytest.mark.asyncio
async def test_list_budgets_order_and_month_filter(service):
    march_rent = await service.create_budget(_data(category_id=RENT), ALICE_ID)
    march_food = await service.create_budget(_data(), ALICE_ID)
    april_food = await service.create_budget(_data(month=APRIL), ALICE_ID)

    page = await service.list_budgets(ALICE_ID, page=1, page_size=10)
    assert [b.id for b in page["items"]] == [april_food.id, march_food.id, march_rent.id]
    assert page["total"] == 3

    march = await service.list_budgets(ALICE_ID, month=date(2024, 3, 20), page=1, page_size=10)
    assert [b.id for b in march["items"]] == [march_food.id, march_rent.id]

    with pytest.raises(ValidationError):
        await service.list_budgets(ALICE_ID, page=0, page_size=10)


@pytest.mark.asyncio
async def test_summary_and_monthly_overview(service):
    await service.create_budget(_data(spent_amount=Decimal("500")), ALICE_ID)
    await service.create_budget(
        _data(category_id=RENT, budgeted_amount=Decimal("1000"), spent_amount=Decimal("1100")), ALICE_ID
    )
    await service.create_budget(_data(category_id=SALARY, month=APRIL), ALICE_ID)

    summary = await service.summary(ALICE_ID, MARCH)
    assert summary["total_budgeted"] == Decimal("2000.00")
    assert summary["total_spent"] == Decimal("1600.00")
    assert summary["total_remaining"] == Decimal("400.00")
    assert summary["percentage_used"] == 80.0
    assert summary["categories_over_budget"] == 1
    assert summary["categories_with_alerts"] == 1

    everything = await service.summary(ALICE_ID)
    assert everything["total_budgeted"] == Decimal("3000.00")

    overview = await service.monthly_overview(ALICE_ID, date(2024, 3, 15))
    assert overview["month"] == MARCH
    assert len(overview["budgets"]) == 2
    assert overview["total_spent"] == Decimal("1600.00")


@pytest.mark.asyncio
async def test_summary_without_budgets(service):
    summary = await service.summary(ALICE_ID)
    assert summary["percentage_used"] == 0.0
    assert summary["total_budgeted"] == Decimal("0.00")


@pytest.mark.asyncio
async def test_alerts_and_over_budget(service):
    fine = await service.create_budget(_data(), ALICE_ID)
    near = await service.create_budget(_data(category_id=RENT, spent_amount=Decimal("950")), ALICE_ID)
    over = await service.create_budget(_data(month=APRIL, spent_amount=Decimal("1200")), ALICE_ID)

    alerts = await service.list_with_alerts(ALICE_ID)
    assert [b.id for b in alerts] == [over.id, near.id]

    over_budget = await service.list_over_budget(ALICE_ID)
    assert [b.id for b in over_budget] == [over.id]
    assert fine.id not in [b.id for b in alerts]


@pytest.mark.asyncio
async def test_record_spending(service):
    budget = await service.create_budget(_data(), ALICE_ID)

    updated = await service.record_spending(ALICE_ID, GROCERIES, date(2024, 3, 22), Decimal("950"))
    assert updated.id == budget.id
    assert updated.spent_amount == Decimal("950.00")
    assert updated.remaining == Decimal("50.00")
    assert updated.alert_triggered is True


@pytest.mark.asyncio
async def test_amounts_are_validated_after_rounding(service):
    budget = await service.create_budget(_data(), ALICE_ID)

    with pytest.raises(ValidationError) as exc_info:
        await service.update_budget(budget.id, BudgetUpdate(budgeted_amount=Decimal("0.001")), ALICE_ID)
    assert exc_info.value.message == "Budgeted amount must be greater than 0"

    with pytest.raises(ValidationError) as exc_info:
        await service.create_or_update(ALICE_ID, RENT, MARCH, Decimal("0.004"))
    assert exc_info.value.message == "Budgeted amount must be greater than 0"

    with pytest.raises(ValidationError) as exc_info:
        await service.record_spending(ALICE_ID, GROCERIES, MARCH, Decimal("0.001"))
    assert exc_info.value.message == "Additional spent must be greater than 0"

    unchanged = await service.get_budget(budget.id, ALICE_ID)
    assert unchanged.budgeted_amount == Decimal("1000.00")
    assert unchanged.spent_amount == Decimal("0.00")


@pytest.mark.asyncio
async def test_record_spending_without_budget_is_noop(service):
    assert await service.record_spending(ALICE_ID, GROCERIES, MARCH, Decimal("10")) is None


@pytest.mark.asyncio
async def test_create_or_update(service):
    created = await service.create_or_update(ALICE_ID, GROCERIES, MARCH, Decimal("300"))
    assert created.budgeted_amount == Decimal("300.00")
    assert created.spent_amount == Decimal("0.00")

    await service.record_spending(ALICE_ID, GROCERIES, MARCH, Decimal("100"))
    updated = await service.create_or_update(ALICE_ID, GROCERIES, date(2024, 3, 9), Decimal("500"))
    assert updated.id == created.id
    assert updated.budgeted_amount == Decimal("500.00")
    assert updated.remaining == Decimal("400.00")


@pytest.mark.parametrize(
    "remaining, budgeted, expected",
    [
        ("1000", "1000", False),
        ("100", "1000", False),
        ("99.99", "1000", True),
        ("0", "1000", True),
        ("-1", "1000", True),
    ],
)
def test_is_alert_triggered(remaining, budgeted, expected):
    assert is_alert_triggered(Decimal(remaining), Decimal(budgeted)) is expected


def test_budget_view_derived_fields():
    budget = SimpleNamespace(
        id=1,
        month=date(2024, 2, 1),
        budgeted_amount=Decimal("200"),
        spent_amount=Decimal("250"),
        remaining=Decimal("-50"),
        alert_triggered=True,
        category_id=GROCERIES,
        user_id=ALICE_ID,
        created_at=datetime(2024, 2, 1, 9, 0),
        category=None,
    )

    view = budget_view(budget, today=date(2024, 2, 19))
    assert view.percentage_used == 125.0
    assert view.is_over_budget is True
    assert view.days_remaining_in_month == 10

    assert budget_view(budget, today=date(2024, 3, 5)).days_remaining_in_month == 0
