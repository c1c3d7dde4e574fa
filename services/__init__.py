"""
Services package for business logic and external integrations.

This package contains configuration loading, the Supabase identity
verifier, the authentication gate, DynamoDB access and budget aggregation.
"""

from .budget_aggregator import BudgetAggregator
from .dynamodb import FinanceTable

__all__ = [
    "BudgetAggregator",
    "FinanceTable",
]
