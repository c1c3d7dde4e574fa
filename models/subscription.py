"""Subscription models for the money tracker."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models.common import (BILLING_CYCLE_PATTERN, CamelModel, Money,
                           PatchModel, parse_timestamp, utc_now)
from models.dynamodb import SUBSCRIPTION_PREFIX, SubscriptionItem, owner_key


class SubscriptionBase(BaseModel):
    """A recurring charge such as a streaming service or gym membership."""

    subscription_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    category: str = "Other"
    amount: Money = Field(..., gt=0)
    billing_cycle: str = Field(..., pattern=BILLING_CYCLE_PATTERN)
    next_billing_date: date
    is_active: bool = True
    description: Optional[str] = None
    website: Optional[str] = None
    reminder_days: int = Field(3, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dynamodb_item(self) -> SubscriptionItem:
        """Convert to DynamoDB item format."""
        now = utc_now().isoformat()
        return SubscriptionItem(
            PK=owner_key(self.owner_id),
            SK=f"{SUBSCRIPTION_PREFIX}{self.subscription_id}",
            subscription_id=self.subscription_id,
            name=self.name,
            category=self.category,
            amount=str(self.amount),
            billing_cycle=self.billing_cycle,
            next_billing_date=self.next_billing_date.isoformat(),
            is_active=self.is_active,
            description=self.description,
            website=self.website,
            reminder_days=self.reminder_days,
            created_at=self.created_at.isoformat() if self.created_at else now,
            updated_at=self.updated_at.isoformat() if self.updated_at else now,
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "SubscriptionBase":
        """Create a SubscriptionBase instance from a DynamoDB item."""
        return cls(
            subscription_id=item["subscription_id"],
            owner_id=item["PK"].replace("USER#", "", 1),
            name=item["name"],
            category=item.get("category") or "Other",
            amount=Decimal(item["amount"]),
            billing_cycle=item["billing_cycle"],
            next_billing_date=date.fromisoformat(item["next_billing_date"]),
            is_active=bool(item.get("is_active", True)),
            description=item.get("description"),
            website=item.get("website"),
            # DynamoDB returns numbers as Decimal
            reminder_days=int(item.get("reminder_days", 3)),
            created_at=parse_timestamp(item.get("created_at")),
            updated_at=parse_timestamp(item.get("updated_at")),
        )


class SubscriptionCreate(CamelModel):
    """Request body for POST /api/subscriptions."""

    name: str = Field(..., min_length=1, max_length=200)
    category: str = "Other"
    amount: Money = Field(..., gt=0)
    billing_cycle: str = Field(..., pattern=BILLING_CYCLE_PATTERN)
    next_billing_date: date
    description: Optional[str] = None
    website: Optional[str] = None
    reminder_days: int = Field(3, ge=0)


class SubscriptionUpdate(PatchModel):
    """Request body for PUT /api/subscriptions/{subscription_id}."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = None
    amount: Optional[Money] = Field(None, gt=0)
    billing_cycle: Optional[str] = Field(None, pattern=BILLING_CYCLE_PATTERN)
    next_billing_date: Optional[date] = None
    is_active: Optional[bool] = None
    description: Optional[str] = None
    website: Optional[str] = None
    reminder_days: Optional[int] = Field(None, ge=0)


def subscription_to_dict(subscription: SubscriptionBase) -> Dict[str, Any]:
    """Convert a subscription to its API representation."""
    return {
        "id": subscription.subscription_id,
        "name": subscription.name,
        "category": subscription.category,
        "amount": subscription.amount,
        "billingCycle": subscription.billing_cycle,
        "nextBillingDate": subscription.next_billing_date.isoformat(),
        "isActive": subscription.is_active,
        "description": subscription.description,
        "website": subscription.website,
        "reminderDays": subscription.reminder_days,
        "createdAt": subscription.created_at,
        "updatedAt": subscription.updated_at,
    }
