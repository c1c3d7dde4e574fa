"""
Service-level endpoints for the money tracker API.

``healthz`` answers load balancer and monitoring checks without
authentication. ``not_found`` is attached to the API Gateway ``$default``
route and answers every request no other route matched.
"""

from datetime import datetime, timezone

from services.config import settings
from utils.decorators import lambda_handler
from utils.responses import HTTPStatus, error_response, success_response


@lambda_handler()
def healthz(event, context):
    """
    Health check endpoint.

    GET /health
    """
    return success_response(
        data={
            "status": "OK",
            "service": settings.service_name,
            "version": settings.service_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        message="Service is running",
    )


@lambda_handler()
def not_found(event, context):
    """Fallback for unmatched routes."""
    method = event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("rawPath") or event.get("path") or "/"
    route = f"{method} {path}".strip()

    return error_response(
        "Not found",
        HTTPStatus.NOT_FOUND,
        description=f"Route {route} not found",
    )
