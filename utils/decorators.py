"""
Decorators for Lambda function handlers.

This module provides decorators that add consistent logging, error handling,
authentication and request parsing to Lambda functions.
"""

import base64
import json
import time
from decimal import Decimal
from functools import wraps
from typing import Any, Callable, Dict, Optional

import pydantic

from .exceptions import APIError, ValidationError
from .logging import (log_error, log_lambda_event, log_lambda_response,
                      setup_logger)
from .responses import HTTPStatus, error_response, validation_error_response


def _non_production() -> bool:
    from services.config import settings

    return settings.is_non_production


def _request_context(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    principal = event.get("auth")
    return {
        "function_name": getattr(context, "function_name", "unknown"),
        "request_id": getattr(context, "aws_request_id", "unknown"),
        "event_path": event.get("rawPath") or event.get("path"),
        "event_method": event.get("requestContext", {})
        .get("http", {})
        .get("method")
        or event.get("httpMethod"),
        "path_params": event.get("pathParameters"),
        "owner_id": getattr(principal, "id", None),
    }


def _api_error_response(
    logger, error: APIError, event: Dict[str, Any], context: Any
) -> Dict[str, Any]:
    if error.status.value >= 500:
        log_error(logger, error, _request_context(event, context))
        details = None
        if _non_production():
            cause = error.__cause__ or error
            details = {"reason": str(cause)}
        return error_response(error.message, error.status, details=details)

    logger.warning(
        f"Request rejected: {error.message}",
        extra={"status_code": error.status.value, **_request_context(event, context)},
    )
    return error_response(error.message, error.status, details=error.details)


def lambda_handler(
    logger_name: Optional[str] = None,
    log_event: bool = True,
    log_response: bool = True,
) -> Callable:
    """
    Decorator for Lambda function handlers that provides:
    - Consistent logging setup
    - Automatic event/response logging
    - Mapping of APIError and pydantic validation errors to responses
    - A generic 500 for anything unexpected
    - Execution time tracking

    Args:
        logger_name: Logger name (defaults to function module name)
        log_event: Whether to log incoming events
        log_response: Whether to log responses

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            logger = setup_logger(logger_name or func.__module__)

            start_time = time.perf_counter()

            try:
                if log_event:
                    log_lambda_event(logger, event, context)

                response = func(event, context)

                if not isinstance(response, dict) or "statusCode" not in response:
                    logger.error("Handler did not return a proxy response")
                    response = error_response(
                        "Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR
                    )

            except APIError as e:
                response = _api_error_response(logger, e, event, context)

            except pydantic.ValidationError as e:
                logger.warning(
                    "Request validation failed",
                    extra={"error_count": e.error_count()},
                )
                response = validation_error_response(
                    "Validation failed",
                    e.errors(include_url=False, include_context=False),
                )

            except Exception as e:
                log_error(logger, e, _request_context(event, context))
                details = {"reason": str(e)} if _non_production() else None
                response = error_response(
                    "Internal server error",
                    HTTPStatus.INTERNAL_SERVER_ERROR,
                    details=details,
                )

            if log_response:
                execution_time = (time.perf_counter() - start_time) * 1000
                log_lambda_response(logger, response, execution_time)

            return response

        return wrapper

    return decorator


def require_auth(func: Callable) -> Callable:
    """
    Decorator that authenticates the request before the handler runs.

    The resolved ``Principal`` is stored in ``event["auth"]``. Failures raise
    before the handler, so no data access happens for rejected requests.
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        from services.authentication import auth_gate

        event["auth"] = auth_gate.authenticate(event.get("headers") or {})
        return func(event, context)

    return wrapper


def _reject_constant(name: str):
    raise ValueError(f"{name} is not a valid JSON number")


def validate_json_body(func: Callable) -> Callable:
    """
    Decorator that parses the JSON request body into ``event["json_body"]``.

    Numbers with a fraction are parsed as Decimal; NaN and Infinity are
    rejected. The body must be a JSON object.
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        body_str = event.get("body") or "{}"

        try:
            if event.get("isBase64Encoded"):
                body_str = base64.b64decode(body_str).decode("utf-8")
            body = json.loads(
                body_str, parse_float=Decimal, parse_constant=_reject_constant
            )
        except ValueError as e:
            raise ValidationError(
                "Invalid JSON in request body", {"json_error": str(e)}
            ) from e

        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        event["json_body"] = body
        return func(event, context)

    return wrapper


def extract_path_params(*param_names: str) -> Callable:
    """
    Decorator that extracts and validates path parameters.

    Args:
        param_names: Names of path parameters to extract

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            path_params = event.get("pathParameters") or {}

            missing_params = [name for name in param_names if not path_params.get(name)]

            if missing_params:
                raise ValidationError(
                    f"Missing path parameters: {', '.join(missing_params)}",
                    {"missing_parameters": missing_params},
                )

            event["path_params"] = {name: path_params[name] for name in param_names}

            return func(event, context)

        return wrapper

    return decorator
