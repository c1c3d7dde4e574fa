"""The authenticated caller of a request."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class Principal(BaseModel):
    """
    Resolved identity of the caller.

    Built by the authentication gate for one request and never persisted.
    ``id`` is the identity provider's subject and scopes every data access.
    """

    id: str = Field(..., min_length=1)
    email: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email}
