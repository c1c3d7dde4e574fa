"""
Budget aggregation: derives ``spentAmount`` and ``isActive`` for budgets.

Neither value is stored. ``spentAmount`` is the exact Decimal sum of the
owner's expense transactions in the budget's category dated within the
budget's range (both ends inclusive). ``isActive`` compares calendar dates
only, so time zones and time of day never matter.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from models.budget import BudgetBase, budget_to_dict
from models.transaction import TransactionBase
from utils.exceptions import DependencyError
from utils.logging import log_error, setup_logger

logger = setup_logger(__name__)

UNKNOWN_CATEGORY = "Unknown"
SPENT_AMOUNT_ERROR = "Failed to calculate spent amount"


def calculate_spent_amount(
    transactions: Iterable[TransactionBase], budget: BudgetBase
) -> Decimal:
    """Sum the expenses that count against ``budget``; 0 when none match."""
    total = Decimal("0")
    for transaction in transactions:
        if (
            transaction.owner_id == budget.owner_id
            and transaction.kind == "expense"
            and transaction.category_id == budget.category_id
            and budget.start_date <= transaction.date <= budget.end_date
        ):
            total += transaction.amount
    return total


def is_budget_active(budget: BudgetBase, today: date) -> bool:
    return budget.start_date <= today <= budget.end_date


class BudgetSummary(BaseModel):
    """A budget together with its derived fields."""

    budget: BudgetBase
    category_name: str
    spent_amount: Optional[Decimal]
    is_active: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return budget_to_dict(
            self.budget,
            category_name=self.category_name,
            spent_amount=self.spent_amount,
            is_active=self.is_active,
            spent_amount_error=self.error,
        )


class BudgetAggregator:
    """Enriches stored budgets with their derived fields."""

    def __init__(self, table):
        self.table = table

    def enrich(
        self,
        owner_id: str,
        budgets: List[BudgetBase],
        today: Optional[date] = None,
    ) -> List[BudgetSummary]:
        """
        Build one summary per budget, in the order given.

        A failed transaction query marks only that budget's entry: its
        spent amount becomes ``None`` with an error message instead of a
        misleading zero. A failed category lookup fails the whole call.
        """
        today = today or date.today()
        if not budgets:
            return []

        category_names = {
            category.category_id: category.name
            for category in self.table.list_categories(owner_id)
        }

        summaries = []
        for budget in budgets:
            spent_amount = None
            error = None
            try:
                transactions = self.table.list_category_expenses(
                    owner_id, budget.category_id, budget.start_date, budget.end_date
                )
                spent_amount = calculate_spent_amount(transactions, budget)
            except DependencyError as e:
                log_error(
                    logger,
                    e,
                    {
                        "operation": "calculate_spent_amount",
                        "budget_id": budget.budget_id,
                        "owner_id": owner_id,
                    },
                )
                error = SPENT_AMOUNT_ERROR

            summaries.append(
                BudgetSummary(
                    budget=budget,
                    category_name=category_names.get(
                        budget.category_id, UNKNOWN_CATEGORY
                    ),
                    spent_amount=spent_amount,
                    is_active=is_budget_active(budget, today),
                    error=error,
                )
            )

        return summaries
