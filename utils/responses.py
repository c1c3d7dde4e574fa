"""
Lambda proxy responses in the money tracker envelope.

Every body has the shape ``{"success": bool, "data"?, "message"?, "error"?}``;
error bodies may also carry ``details``.
"""

import json
import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union


class HTTPStatus(Enum):
    """Status codes the API answers with."""

    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500


StatusCode = Union[int, HTTPStatus]

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


class APIJSONEncoder(json.JSONEncoder):
    """
    Money is Decimal and renders as a JSON number. Values a float cannot
    hold, such as an echoed invalid input, render as strings. Dates and
    timestamps render as ISO-8601 strings.
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            as_float = float(obj)
            return as_float if math.isfinite(as_float) else str(obj)
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, "model_dump"):
            return obj.model_dump()
        return super().default(obj)


def create_response(
    status_code: StatusCode,
    body: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Build the dict API Gateway expects back from a proxy integration."""
    if isinstance(status_code, HTTPStatus):
        status_code = status_code.value

    response: Dict[str, Any] = {
        "statusCode": status_code,
        "headers": {**DEFAULT_HEADERS, **(headers or {})},
    }
    if body is not None:
        response["body"] = json.dumps(body, cls=APIJSONEncoder)
    return response


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: StatusCode = HTTPStatus.OK,
) -> Dict[str, Any]:
    """
    Wrap ``data`` in a success envelope.

    ``data`` is omitted only when it is None, so empty lists still appear.
    """
    envelope: Dict[str, Any] = {"success": True}
    if data is not None:
        envelope["data"] = data
    if message:
        envelope["message"] = message
    return create_response(status_code, envelope)


def error_response(
    message: str,
    status_code: StatusCode = HTTPStatus.INTERNAL_SERVER_ERROR,
    details: Optional[Any] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Wrap an error in the envelope.

    ``message`` goes under ``error``; the optional human readable
    ``description`` goes under ``message``.
    """
    envelope: Dict[str, Any] = {"success": False, "error": message}
    if description:
        envelope["message"] = description
    if details:
        envelope["details"] = details
    return create_response(status_code, envelope)


def validation_error_response(
    message: str = "Validation failed", errors: Optional[Any] = None
) -> Dict[str, Any]:
    """400 with the individual field errors under ``details``."""
    return error_response(message, HTTPStatus.BAD_REQUEST, details=errors)
