"""Category models. Categories are unique per owner by name."""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models.common import CamelModel, parse_timestamp, utc_now
from models.dynamodb import CATEGORY_PREFIX, CategoryItem, owner_key


class CategoryBase(BaseModel):
    category_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    created_at: Optional[datetime] = None

    def to_dynamodb_item(self) -> CategoryItem:
        """Convert to DynamoDB item format. The name is the sort key."""
        return CategoryItem(
            PK=owner_key(self.owner_id),
            SK=f"{CATEGORY_PREFIX}{self.name}",
            category_id=self.category_id,
            name=self.name,
            created_at=(self.created_at or utc_now()).isoformat(),
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "CategoryBase":
        return cls(
            category_id=item["category_id"],
            owner_id=item["PK"].replace("USER#", "", 1),
            name=item["name"],
            created_at=parse_timestamp(item.get("created_at")),
        )


class CategoryCreate(CamelModel):
    """Request body for POST /api/categories."""

    name: str = Field(..., min_length=1, max_length=100)


def category_to_dict(category: CategoryBase) -> Dict[str, Any]:
    return {
        "id": category.category_id,
        "name": category.name,
        "createdAt": category.created_at,
    }
