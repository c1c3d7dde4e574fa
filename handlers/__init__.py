"""
Handlers package for Lambda function handlers.

This package contains the API endpoint handlers for transactions, budgets,
categories, savings goals, subscriptions and the user profile.
"""

from . import budgets, categories, savings, subscriptions, transactions, users

__all__ = [
    "budgets",
    "categories",
    "savings",
    "subscriptions",
    "transactions",
    "users",
]
