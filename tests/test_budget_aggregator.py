"""Tests for budget aggregation: spent amount, active window and partial failures."""
from datetime import date
from decimal import Decimal

import pytest

from models.budget import BudgetBase
from models.category import CategoryBase
from models.transaction import TransactionBase
from services.budget_aggregator import (SPENT_AMOUNT_ERROR, UNKNOWN_CATEGORY,
                                        BudgetAggregator,
                                        calculate_spent_amount,
                                        is_budget_active)
from utils.exceptions import DependencyError


def make_budget(**overrides):
    values = {
        "owner_id": "user-a",
        "category_id": "cat-food",
        "budget_amount": Decimal("200"),
        "period": "monthly",
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 31),
    }
    values.update(overrides)
    return BudgetBase(**values)


def make_transaction(day, amount, kind="expense", category_id="cat-food", owner_id="user-a"):
    return TransactionBase(
        owner_id=owner_id,
        kind=kind,
        amount=Decimal(amount),
        category_id=category_id,
        date=day,
    )


class StubTable:
    """Stands in for FinanceTable; filters transactions the way the query does."""

    def __init__(self, categories=(), transactions=(), failing_categories=()):
        self.categories = list(categories)
        self.transactions = list(transactions)
        self.failing_categories = set(failing_categories)
        self.category_lookups = 0

    def list_categories(self, owner_id):
        self.category_lookups += 1
        return [c for c in self.categories if c.owner_id == owner_id]

    def list_category_expenses(self, owner_id, category_id, start_date, end_date):
        if category_id in self.failing_categories:
            raise DependencyError("Failed to list category expenses")
        return [
            t
            for t in self.transactions
            if t.owner_id == owner_id
            and t.kind == "expense"
            and t.category_id == category_id
            and start_date <= t.date <= end_date
        ]


def test_spent_amount_sums_matching_expenses_exactly():
    budget = make_budget()
    transactions = [
        make_transaction(date(2024, 1, 5), "20"),
        make_transaction(date(2024, 1, 20), "15"),
        make_transaction(date(2024, 2, 1), "99"),
        make_transaction(date(2024, 1, 10), "5", kind="income"),
    ]
    assert calculate_spent_amount(transactions, budget) == Decimal("35.00")


def test_spent_amount_includes_both_boundary_dates():
    budget = make_budget()
    transactions = [
        make_transaction(date(2024, 1, 1), "1.10"),
        make_transaction(date(2024, 1, 31), "2.20"),
        make_transaction(date(2023, 12, 31), "100"),
    ]
    assert calculate_spent_amount(transactions, budget) == Decimal("3.30")


def test_spent_amount_ignores_other_categories_and_owners():
    budget = make_budget()
    transactions = [
        make_transaction(date(2024, 1, 5), "10", category_id="cat-rent"),
        make_transaction(date(2024, 1, 5), "10", owner_id="user-b"),
    ]
    assert calculate_spent_amount(transactions, budget) == Decimal("0")


def test_spent_amount_has_no_float_drift():
    budget = make_budget()
    transactions = [make_transaction(date(2024, 1, 2), "0.1") for _ in range(3)]
    assert calculate_spent_amount(transactions, budget) == Decimal("0.3")


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 1, 1), True),
        (date(2024, 1, 15), True),
        (date(2024, 1, 31), True),
        (date(2023, 12, 31), False),
        (date(2024, 2, 1), False),
    ],
)
def test_active_window_is_inclusive(today, expected):
    assert is_budget_active(make_budget(), today) is expected


def test_enrich_attaches_category_name_and_derived_fields():
    food = CategoryBase(category_id="cat-food", owner_id="user-a", name="Food")
    table = StubTable(
        categories=[food],
        transactions=[make_transaction(date(2024, 1, 5), "12.50")],
    )
    budget = make_budget()

    [summary] = BudgetAggregator(table).enrich("user-a", [budget], today=date(2024, 1, 31))

    data = summary.to_dict()
    assert data["category"] == "Food"
    assert data["spentAmount"] == Decimal("12.50")
    assert data["isActive"] is True
    assert "spentAmountError" not in data


def test_enrich_renders_unknown_for_missing_category():
    table = StubTable()
    [summary] = BudgetAggregator(table).enrich(
        "user-a", [make_budget()], today=date(2024, 3, 1)
    )
    assert summary.category_name == UNKNOWN_CATEGORY
    assert summary.spent_amount == Decimal("0")
    assert summary.is_active is False


def test_enrich_marks_only_the_failing_budget():
    food = CategoryBase(category_id="cat-food", owner_id="user-a", name="Food")
    rent = CategoryBase(category_id="cat-rent", owner_id="user-a", name="Rent")
    table = StubTable(
        categories=[food, rent],
        transactions=[make_transaction(date(2024, 1, 5), "40")],
        failing_categories={"cat-rent"},
    )
    budgets = [make_budget(), make_budget(category_id="cat-rent")]

    food_summary, rent_summary = BudgetAggregator(table).enrich(
        "user-a", budgets, today=date(2024, 1, 10)
    )

    assert food_summary.spent_amount == Decimal("40")
    assert food_summary.error is None

    assert rent_summary.spent_amount is None
    assert rent_summary.error == SPENT_AMOUNT_ERROR
    rendered = rent_summary.to_dict()
    assert rendered["spentAmount"] is None
    assert rendered["spentAmountError"] == SPENT_AMOUNT_ERROR
    assert rendered["category"] == "Rent"


def test_enrich_looks_categories_up_once():
    table = StubTable()
    BudgetAggregator(table).enrich(
        "user-a", [make_budget(), make_budget(), make_budget()], today=date(2024, 1, 1)
    )
    assert table.category_lookups == 1


def test_enrich_with_no_budgets_skips_lookups():
    table = StubTable()
    assert BudgetAggregator(table).enrich("user-a", []) == []
    assert table.category_lookups == 0
