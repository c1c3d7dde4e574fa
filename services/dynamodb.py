"""
DynamoDB service for the money tracker.

Every record lives under its owner's partition (``PK = USER#{owner_id}``),
so every read and write below is scoped to one principal by construction:
there is no code path that can address another owner's items.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from models.budget import BudgetBase
from models.category import CategoryBase
from models.dynamodb import (BUDGET_PREFIX, CATEGORY_PREFIX, SAVINGS_PREFIX,
                             SUBSCRIPTION_PREFIX, TRANSACTION_PREFIX,
                             owner_key)
from models.savings import SavingsGoalBase
from models.subscription import SubscriptionBase
from models.transaction import TransactionBase, TransactionFilters
from utils.exceptions import DependencyError
from utils.logging import setup_logger

logger = setup_logger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"

# Shared across warm invocations; created on first use
_dynamodb_resource = None


def get_dynamodb_resource():
    """Get or create the shared DynamoDB resource."""
    global _dynamodb_resource
    if _dynamodb_resource is None:
        _dynamodb_resource = boto3.resource("dynamodb")
    return _dynamodb_resource


def _is_conditional_failure(err: ClientError) -> bool:
    return err.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED


class FinanceTable:
    """
    Encapsulates operations on the money tracker DynamoDB table.
    """

    def __init__(self, table_name: Optional[str] = None, dynamodb_resource=None):
        """
        :param table_name: Name of the DynamoDB table; defaults to settings.
        :param dynamodb_resource: boto3 DynamoDB resource; defaults to the shared one.
        """
        if table_name is None:
            from services.config import settings

            table_name = settings.table_name

        self.table_name = table_name
        self._dynamodb_resource = dynamodb_resource
        self._table = None

    @property
    def table(self):
        if self._table is None:
            resource = self._dynamodb_resource or get_dynamodb_resource()
            self._table = resource.Table(self.table_name)
        return self._table

    # ------------------------------------------------------------------
    # Low level helpers
    # ------------------------------------------------------------------

    def _fail(self, operation: str, err: ClientError, **context) -> DependencyError:
        logger.error(
            "Couldn't %s in table %s. Error: %s: %s",
            operation,
            self.table_name,
            err.response["Error"]["Code"],
            err.response["Error"]["Message"],
            extra={"operation": operation, **context},
        )
        return DependencyError(f"Failed to {operation}", details={"operation": operation})

    def _put(self, item: Dict[str, Any], operation: str, **context) -> None:
        try:
            self.table.put_item(Item=item)
        except ClientError as err:
            raise self._fail(operation, err, **context) from err

    def _replace(self, item: Dict[str, Any], operation: str, **context) -> bool:
        """Overwrite an existing item; returns False if it no longer exists."""
        try:
            self.table.put_item(
                Item=item, ConditionExpression=Attr("PK").exists()
            )
            return True
        except ClientError as err:
            if _is_conditional_failure(err):
                return False
            raise self._fail(operation, err, **context) from err

    def _get(
        self, owner_id: str, sort_key: str, operation: str, **context
    ) -> Optional[Dict[str, Any]]:
        try:
            response = self.table.get_item(
                Key={"PK": owner_key(owner_id), "SK": sort_key}
            )
        except ClientError as err:
            raise self._fail(operation, err, owner_id=owner_id, **context) from err
        return response.get("Item")

    def _query(
        self,
        owner_id: str,
        prefix: str,
        operation: str,
        filter_expression=None,
        **context,
    ) -> List[Dict[str, Any]]:
        """Fetch every item under the owner's partition with an SK prefix."""
        kwargs = {
            "KeyConditionExpression": Key("PK").eq(owner_key(owner_id))
            & Key("SK").begins_with(prefix)
        }
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items = []
        try:
            while True:
                response = self.table.query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as err:
            raise self._fail(operation, err, owner_id=owner_id, **context) from err
        return items

    def _delete(self, owner_id: str, sort_key: str, operation: str, **context) -> None:
        # Deleting a missing key is a no-op in DynamoDB
        try:
            self.table.delete_item(Key={"PK": owner_key(owner_id), "SK": sort_key})
        except ClientError as err:
            raise self._fail(operation, err, owner_id=owner_id, **context) from err

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def put_transaction(self, transaction: TransactionBase) -> None:
        self._put(
            transaction.to_dynamodb_item().model_dump(),
            "create transaction",
            owner_id=transaction.owner_id,
            transaction_id=transaction.transaction_id,
        )

    def get_transaction(
        self, owner_id: str, transaction_id: str
    ) -> Optional[TransactionBase]:
        item = self._get(
            owner_id,
            f"{TRANSACTION_PREFIX}{transaction_id}",
            "get transaction",
            transaction_id=transaction_id,
        )
        return TransactionBase.from_dynamodb_item(item) if item else None

    def list_transactions(
        self, owner_id: str, filters: Optional[TransactionFilters] = None
    ) -> List[TransactionBase]:
        """List the owner's transactions, newest date first."""
        items = self._query(owner_id, TRANSACTION_PREFIX, "list transactions")
        transactions = [TransactionBase.from_dynamodb_item(item) for item in items]
        if filters is not None:
            transactions = [t for t in transactions if filters.matches(t)]
        return sorted(
            transactions,
            key=lambda t: (t.date, t.created_at.isoformat() if t.created_at else ""),
            reverse=True,
        )

    def list_category_expenses(
        self, owner_id: str, category_id: str, start_date: date, end_date: date
    ) -> List[TransactionBase]:
        """Expense transactions of one category dated within [start, end]."""
        items = self._query(
            owner_id,
            TRANSACTION_PREFIX,
            "list category expenses",
            filter_expression=Attr("kind").eq("expense")
            & Attr("category_id").eq(category_id)
            & Attr("date").between(start_date.isoformat(), end_date.isoformat()),
            category_id=category_id,
        )
        return [TransactionBase.from_dynamodb_item(item) for item in items]

    def update_transaction(self, transaction: TransactionBase) -> bool:
        return self._replace(
            transaction.to_dynamodb_item().model_dump(),
            "update transaction",
            owner_id=transaction.owner_id,
            transaction_id=transaction.transaction_id,
        )

    def delete_transaction(self, owner_id: str, transaction_id: str) -> None:
        self._delete(
            owner_id,
            f"{TRANSACTION_PREFIX}{transaction_id}",
            "delete transaction",
            transaction_id=transaction_id,
        )

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def put_budget(self, budget: BudgetBase) -> None:
        self._put(
            budget.to_dynamodb_item().model_dump(),
            "create budget",
            owner_id=budget.owner_id,
            budget_id=budget.budget_id,
        )

    def get_budget(self, owner_id: str, budget_id: str) -> Optional[BudgetBase]:
        item = self._get(
            owner_id, f"{BUDGET_PREFIX}{budget_id}", "get budget", budget_id=budget_id
        )
        return BudgetBase.from_dynamodb_item(item) if item else None

    def list_budgets(self, owner_id: str) -> List[BudgetBase]:
        """List the owner's budgets, most recently created first."""
        items = self._query(owner_id, BUDGET_PREFIX, "list budgets")
        budgets = [BudgetBase.from_dynamodb_item(item) for item in items]
        return sorted(budgets, key=_created_at_key, reverse=True)

    def update_budget(self, budget: BudgetBase) -> bool:
        return self._replace(
            budget.to_dynamodb_item().model_dump(),
            "update budget",
            owner_id=budget.owner_id,
            budget_id=budget.budget_id,
        )

    def delete_budget(self, owner_id: str, budget_id: str) -> None:
        self._delete(
            owner_id, f"{BUDGET_PREFIX}{budget_id}", "delete budget", budget_id=budget_id
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_category(self, owner_id: str, name: str) -> Optional[CategoryBase]:
        item = self._get(
            owner_id, f"{CATEGORY_PREFIX}{name}", "get category", category_name=name
        )
        return CategoryBase.from_dynamodb_item(item) if item else None

    def list_categories(self, owner_id: str) -> List[CategoryBase]:
        items = self._query(owner_id, CATEGORY_PREFIX, "list categories")
        categories = [CategoryBase.from_dynamodb_item(item) for item in items]
        return sorted(categories, key=lambda c: c.name)

    def get_or_create_category(self, owner_id: str, name: str) -> CategoryBase:
        """
        Return the owner's category called ``name``, creating it if needed.

        Two concurrent requests may both miss the lookup and race to create
        the category. The conditional put lets exactly one of them win; the
        loser reads back the winner's record, so both return the same id.
        """
        name = name.strip()
        existing = self.get_category(owner_id, name)
        if existing:
            return existing

        category = CategoryBase(owner_id=owner_id, name=name)
        try:
            self.table.put_item(
                Item=category.to_dynamodb_item().model_dump(),
                ConditionExpression=Attr("PK").not_exists(),
            )
            logger.info(
                "Category created",
                extra={"owner_id": owner_id, "category_id": category.category_id},
            )
            return category
        except ClientError as err:
            if not _is_conditional_failure(err):
                raise self._fail(
                    "create category", err, owner_id=owner_id, category_name=name
                ) from err

        logger.info(
            "Category created concurrently, reusing existing record",
            extra={"owner_id": owner_id, "category_name": name},
        )
        existing = self.get_category(owner_id, name)
        if existing is None:
            raise DependencyError("Failed to create category")
        return existing

    # ------------------------------------------------------------------
    # Savings goals
    # ------------------------------------------------------------------

    def put_savings_goal(self, goal: SavingsGoalBase) -> None:
        self._put(
            goal.to_dynamodb_item().model_dump(),
            "create savings goal",
            owner_id=goal.owner_id,
            goal_id=goal.goal_id,
        )

    def get_savings_goal(self, owner_id: str, goal_id: str) -> Optional[SavingsGoalBase]:
        item = self._get(
            owner_id, f"{SAVINGS_PREFIX}{goal_id}", "get savings goal", goal_id=goal_id
        )
        return SavingsGoalBase.from_dynamodb_item(item) if item else None

    def list_savings_goals(self, owner_id: str) -> List[SavingsGoalBase]:
        """List the owner's savings goals, most recently created first."""
        items = self._query(owner_id, SAVINGS_PREFIX, "list savings goals")
        goals = [SavingsGoalBase.from_dynamodb_item(item) for item in items]
        return sorted(goals, key=_created_at_key, reverse=True)

    def update_savings_goal(self, goal: SavingsGoalBase) -> bool:
        return self._replace(
            goal.to_dynamodb_item().model_dump(),
            "update savings goal",
            owner_id=goal.owner_id,
            goal_id=goal.goal_id,
        )

    def delete_savings_goal(self, owner_id: str, goal_id: str) -> None:
        self._delete(
            owner_id, f"{SAVINGS_PREFIX}{goal_id}", "delete savings goal", goal_id=goal_id
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def put_subscription(self, subscription: SubscriptionBase) -> None:
        self._put(
            subscription.to_dynamodb_item().model_dump(),
            "create subscription",
            owner_id=subscription.owner_id,
            subscription_id=subscription.subscription_id,
        )

    def get_subscription(
        self, owner_id: str, subscription_id: str
    ) -> Optional[SubscriptionBase]:
        item = self._get(
            owner_id,
            f"{SUBSCRIPTION_PREFIX}{subscription_id}",
            "get subscription",
            subscription_id=subscription_id,
        )
        return SubscriptionBase.from_dynamodb_item(item) if item else None

    def list_subscriptions(self, owner_id: str) -> List[SubscriptionBase]:
        """List the owner's subscriptions, next billing date first."""
        items = self._query(owner_id, SUBSCRIPTION_PREFIX, "list subscriptions")
        subscriptions = [SubscriptionBase.from_dynamodb_item(item) for item in items]
        return sorted(subscriptions, key=lambda s: s.next_billing_date)

    def update_subscription(self, subscription: SubscriptionBase) -> bool:
        return self._replace(
            subscription.to_dynamodb_item().model_dump(),
            "update subscription",
            owner_id=subscription.owner_id,
            subscription_id=subscription.subscription_id,
        )

    def delete_subscription(self, owner_id: str, subscription_id: str) -> None:
        self._delete(
            owner_id,
            f"{SUBSCRIPTION_PREFIX}{subscription_id}",
            "delete subscription",
            subscription_id=subscription_id,
        )


def _created_at_key(record) -> str:
    return record.created_at.isoformat() if record.created_at else ""
