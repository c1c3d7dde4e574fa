"""Savings goal models for the money tracker."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from models.common import (PRIORITY_PATTERN, CamelModel, Money, PatchModel,
                           parse_timestamp, utc_now)
from models.dynamodb import SAVINGS_PREFIX, SavingsGoalItem, owner_key


class SavingsGoalBase(BaseModel):
    """A savings target. ``is_completed`` is derived on every validation."""

    goal_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    target_amount: Money = Field(..., gt=0)
    current_amount: Money = Field(Decimal("0"), ge=0)
    category: str = "General"
    target_date: Optional[date] = None
    priority: str = Field("medium", pattern=PRIORITY_PATTERN)
    is_completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def derive_completion(self):
        self.is_completed = self.current_amount >= self.target_amount
        return self

    def to_dynamodb_item(self) -> SavingsGoalItem:
        """Convert to DynamoDB item format."""
        now = utc_now().isoformat()
        return SavingsGoalItem(
            PK=owner_key(self.owner_id),
            SK=f"{SAVINGS_PREFIX}{self.goal_id}",
            goal_id=self.goal_id,
            title=self.title,
            description=self.description,
            target_amount=str(self.target_amount),
            current_amount=str(self.current_amount),
            category=self.category,
            target_date=self.target_date.isoformat() if self.target_date else None,
            priority=self.priority,
            is_completed=self.is_completed,
            created_at=self.created_at.isoformat() if self.created_at else now,
            updated_at=self.updated_at.isoformat() if self.updated_at else now,
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "SavingsGoalBase":
        """Create a SavingsGoalBase instance from a DynamoDB item."""
        return cls(
            goal_id=item["goal_id"],
            owner_id=item["PK"].replace("USER#", "", 1),
            title=item["title"],
            description=item.get("description") or "",
            target_amount=Decimal(item["target_amount"]),
            current_amount=Decimal(item.get("current_amount") or "0"),
            category=item.get("category") or "General",
            target_date=(
                date.fromisoformat(item["target_date"])
                if item.get("target_date")
                else None
            ),
            priority=item.get("priority") or "medium",
            created_at=parse_timestamp(item.get("created_at")),
            updated_at=parse_timestamp(item.get("updated_at")),
        )


class SavingsGoalCreate(CamelModel):
    """Request body for POST /api/savings."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    target_amount: Money = Field(..., gt=0)
    current_amount: Money = Field(Decimal("0"), ge=0)
    category: str = "General"
    target_date: Optional[date] = None
    priority: str = Field("medium", pattern=PRIORITY_PATTERN)


class SavingsGoalUpdate(PatchModel):
    """Request body for PUT /api/savings/{goal_id}."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    target_amount: Optional[Money] = Field(None, gt=0)
    current_amount: Optional[Money] = Field(None, ge=0)
    category: Optional[str] = None
    target_date: Optional[date] = None
    priority: Optional[str] = Field(None, pattern=PRIORITY_PATTERN)


def savings_goal_to_dict(goal: SavingsGoalBase) -> Dict[str, Any]:
    """Convert a savings goal to its API representation."""
    return {
        "id": goal.goal_id,
        "title": goal.title,
        "description": goal.description,
        "targetAmount": goal.target_amount,
        "currentAmount": goal.current_amount,
        "category": goal.category,
        "targetDate": goal.target_date.isoformat() if goal.target_date else None,
        "priority": goal.priority,
        "isCompleted": goal.is_completed,
        "createdAt": goal.created_at,
        "updatedAt": goal.updated_at,
    }
