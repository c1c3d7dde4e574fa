"""Transaction models for the money tracker."""

import datetime as dt
import uuid
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from models.common import (TRANSACTION_KIND_PATTERN, CamelModel, Money,
                           PatchModel, parse_timestamp, utc_now)
from models.dynamodb import TRANSACTION_PREFIX, TransactionItem, owner_key


class TransactionBase(BaseModel):
    """A single income or expense entry. The kind carries the sign."""

    transaction_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str = Field(..., min_length=1)
    kind: str = Field(..., pattern=TRANSACTION_KIND_PATTERN)
    amount: Money = Field(..., ge=0)
    category_id: str = Field(..., min_length=1)
    description: str = ""
    date: dt.date
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    def to_dynamodb_item(self) -> TransactionItem:
        """Convert to DynamoDB item format."""
        now = utc_now().isoformat()
        return TransactionItem(
            PK=owner_key(self.owner_id),
            SK=f"{TRANSACTION_PREFIX}{self.transaction_id}",
            transaction_id=self.transaction_id,
            kind=self.kind,
            amount=str(self.amount),
            category_id=self.category_id,
            description=self.description,
            date=self.date.isoformat(),
            created_at=self.created_at.isoformat() if self.created_at else now,
            updated_at=self.updated_at.isoformat() if self.updated_at else now,
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "TransactionBase":
        """Create a TransactionBase instance from a DynamoDB item."""
        return cls(
            transaction_id=item["transaction_id"],
            owner_id=item["PK"].replace("USER#", "", 1),
            kind=item["kind"],
            amount=Decimal(item["amount"]),
            category_id=item["category_id"],
            description=item.get("description") or "",
            date=dt.date.fromisoformat(item["date"]),
            created_at=parse_timestamp(item.get("created_at")),
            updated_at=parse_timestamp(item.get("updated_at")),
        )


class TransactionCreate(CamelModel):
    """Request body for POST /api/transactions."""

    kind: str = Field(
        ...,
        pattern=TRANSACTION_KIND_PATTERN,
        validation_alias=AliasChoices("kind", "type"),
    )
    amount: Money = Field(..., ge=0)
    category_id: str = Field(..., min_length=1)
    description: str = ""
    date: dt.date


class TransactionUpdate(PatchModel):
    """Request body for PUT /api/transactions/{transaction_id}."""

    kind: Optional[str] = Field(
        None,
        pattern=TRANSACTION_KIND_PATTERN,
        validation_alias=AliasChoices("kind", "type"),
    )
    amount: Optional[Money] = Field(None, ge=0)
    category_id: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    date: Optional[dt.date] = None


class TransactionFilters(CamelModel):
    """Query string filters for GET /api/transactions."""

    kind: Optional[str] = Field(
        None,
        pattern=TRANSACTION_KIND_PATTERN,
        validation_alias=AliasChoices("kind", "type"),
    )
    category_id: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    @model_validator(mode="after")
    def check_ranges(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must be on or before endDate")
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValueError("minAmount must not exceed maxAmount")
        return self

    def matches(self, transaction: TransactionBase) -> bool:
        if self.kind and transaction.kind != self.kind:
            return False
        if self.category_id and transaction.category_id != self.category_id:
            return False
        if self.start_date and transaction.date < self.start_date:
            return False
        if self.end_date and transaction.date > self.end_date:
            return False
        if self.min_amount is not None and transaction.amount < self.min_amount:
            return False
        if self.max_amount is not None and transaction.amount > self.max_amount:
            return False
        return True


def transaction_to_dict(transaction: TransactionBase) -> Dict[str, Any]:
    """Convert a transaction to its API representation."""
    return {
        "id": transaction.transaction_id,
        "kind": transaction.kind,
        "amount": transaction.amount,
        "categoryId": transaction.category_id,
        "description": transaction.description,
        "date": transaction.date.isoformat(),
        "createdAt": transaction.created_at,
        "updatedAt": transaction.updated_at,
    }
