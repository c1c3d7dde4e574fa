"""Budget models for the money tracker."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from models.common import (BUDGET_PERIOD_PATTERN, CamelModel, Money,
                           PatchModel, parse_timestamp, utc_now)
from models.dynamodb import BUDGET_PREFIX, BudgetItem, owner_key


def _check_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise ValueError("startDate must be on or before endDate")


class BudgetBase(BaseModel):
    """
    A spending limit for one category over a date range.

    ``spentAmount`` and ``isActive`` are not stored; see
    services.budget_aggregator.
    """

    budget_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    budget_amount: Money = Field(..., gt=0)
    period: str = Field(..., pattern=BUDGET_PERIOD_PATTERN)
    start_date: date
    end_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_date_range(self):
        _check_date_range(self.start_date, self.end_date)
        return self

    def to_dynamodb_item(self) -> BudgetItem:
        """Convert to DynamoDB item format."""
        now = utc_now().isoformat()
        return BudgetItem(
            PK=owner_key(self.owner_id),
            SK=f"{BUDGET_PREFIX}{self.budget_id}",
            budget_id=self.budget_id,
            category_id=self.category_id,
            budget_amount=str(self.budget_amount),
            period=self.period,
            start_date=self.start_date.isoformat(),
            end_date=self.end_date.isoformat(),
            created_at=self.created_at.isoformat() if self.created_at else now,
            updated_at=self.updated_at.isoformat() if self.updated_at else now,
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "BudgetBase":
        """Create a BudgetBase instance from a DynamoDB item."""
        return cls(
            budget_id=item["budget_id"],
            owner_id=item["PK"].replace("USER#", "", 1),
            category_id=item["category_id"],
            budget_amount=Decimal(item["budget_amount"]),
            period=item["period"],
            start_date=date.fromisoformat(item["start_date"]),
            end_date=date.fromisoformat(item["end_date"]),
            created_at=parse_timestamp(item.get("created_at")),
            updated_at=parse_timestamp(item.get("updated_at")),
        )


class BudgetCreate(CamelModel):
    """Request body for POST /api/budgets. ``category`` is a category name."""

    category: str = Field(..., min_length=1, max_length=100)
    budget_amount: Money = Field(
        ..., gt=0, validation_alias=AliasChoices("budgetAmount", "amount")
    )
    period: str = Field(..., pattern=BUDGET_PERIOD_PATTERN)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_date_range(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class BudgetUpdate(PatchModel):
    """Request body for PUT /api/budgets/{budget_id}."""

    category: Optional[str] = Field(None, min_length=1, max_length=100)
    budget_amount: Optional[Money] = Field(
        None, gt=0, validation_alias=AliasChoices("budgetAmount", "amount")
    )
    period: Optional[str] = Field(None, pattern=BUDGET_PERIOD_PATTERN)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def budget_to_dict(
    budget: BudgetBase,
    category_name: str,
    spent_amount: Optional[Decimal],
    is_active: bool,
    spent_amount_error: Optional[str] = None,
) -> Dict[str, Any]:
    """Convert a budget and its derived fields to the API representation."""
    data = {
        "id": budget.budget_id,
        "category": category_name,
        "categoryId": budget.category_id,
        "budgetAmount": budget.budget_amount,
        "spentAmount": spent_amount,
        "period": budget.period,
        "startDate": budget.start_date.isoformat(),
        "endDate": budget.end_date.isoformat(),
        "isActive": is_active,
        "createdAt": budget.created_at,
        "updatedAt": budget.updated_at,
    }
    if spent_amount_error:
        data["spentAmountError"] = spent_amount_error
    return data
