"""
Models package for data structures and database entities.

This package contains Pydantic models for request validation, the persisted
records and their DynamoDB item representations.
"""

from .budget import BudgetBase
from .category import CategoryBase
from .dynamodb import DynamoDBItem
from .principal import Principal
from .savings import SavingsGoalBase
from .subscription import SubscriptionBase
from .transaction import TransactionBase

__all__ = [
    "BudgetBase",
    "CategoryBase",
    "DynamoDBItem",
    "Principal",
    "SavingsGoalBase",
    "SubscriptionBase",
    "TransactionBase",
]
