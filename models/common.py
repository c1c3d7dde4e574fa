"""Shared pieces for request models and record updates."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ModelT = TypeVar("ModelT", bound=BaseModel)

TRANSACTION_KIND_PATTERN = "^(income|expense)$"
BUDGET_PERIOD_PATTERN = "^(weekly|monthly|yearly)$"
BILLING_CYCLE_PATTERN = "^(weekly|monthly|quarterly|yearly)$"
PRIORITY_PATTERN = "^(low|medium|high)$"

# Cent precision, at most 15 significant digits
Money = Annotated[Decimal, Field(max_digits=15, decimal_places=2)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class CamelModel(BaseModel):
    """Request model that accepts camelCase JSON and ignores unknown keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class PatchModel(CamelModel):
    """
    Partial update: one optional field per mutable attribute.

    Only the fields present in the request body are applied.
    """

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def apply_changes(record: ModelT, changes: Dict[str, Any]) -> ModelT:
    """
    Merge ``changes`` into ``record`` and validate the result again.

    Re-validation runs every field constraint and model validator, so derived
    fields and cross-field invariants hold for the updated record. Raises
    pydantic.ValidationError if they don't.
    """
    data = record.model_dump()
    data.update(changes)
    data["updated_at"] = utc_now()
    return type(record).model_validate(data)
