"""DynamoDB data models for the money tracker.

All items live in one table. The partition key is always the owner
(``USER#{owner_id}``) and the sort key names the entity.
"""

from typing import Optional

from pydantic import BaseModel

TRANSACTION_PREFIX = "TRANSACTION#"
BUDGET_PREFIX = "BUDGET#"
CATEGORY_PREFIX = "CATEGORY#"
SAVINGS_PREFIX = "SAVINGS#"
SUBSCRIPTION_PREFIX = "SUBSCRIPTION#"


def owner_key(owner_id: str) -> str:
    return f"USER#{owner_id}"


class DynamoDBItem(BaseModel):
    """Base class for all DynamoDB items."""

    PK: str
    SK: str
    entity_type: str


class TransactionItem(DynamoDBItem):
    """Represents a transaction item in DynamoDB."""

    entity_type: str = "TRANSACTION"
    transaction_id: str
    kind: str
    amount: str  # Stored as string to preserve precision
    category_id: str
    description: str = ""
    date: str
    created_at: str
    updated_at: str


class BudgetItem(DynamoDBItem):
    """Represents a budget item in DynamoDB."""

    entity_type: str = "BUDGET"
    budget_id: str
    category_id: str
    budget_amount: str
    period: str
    start_date: str
    end_date: str
    created_at: str
    updated_at: str


class CategoryItem(DynamoDBItem):
    """Represents a category item; SK is CATEGORY#{name}."""

    entity_type: str = "CATEGORY"
    category_id: str
    name: str
    created_at: str


class SavingsGoalItem(DynamoDBItem):
    """Represents a savings goal item in DynamoDB."""

    entity_type: str = "SAVINGS_GOAL"
    goal_id: str
    title: str
    description: str = ""
    target_amount: str
    current_amount: str
    category: str
    target_date: Optional[str] = None
    priority: str
    is_completed: bool
    created_at: str
    updated_at: str


class SubscriptionItem(DynamoDBItem):
    """Represents a subscription item in DynamoDB."""

    entity_type: str = "SUBSCRIPTION"
    subscription_id: str
    name: str
    category: str
    amount: str
    billing_cycle: str
    next_billing_date: str
    is_active: bool
    description: Optional[str] = None
    website: Optional[str] = None
    reminder_days: int
    created_at: str
    updated_at: str
