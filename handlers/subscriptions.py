"""
Subscription handlers for the money tracker API.
"""

from models.common import apply_changes, utc_now
from models.subscription import (SubscriptionBase, SubscriptionCreate,
                                 SubscriptionUpdate, subscription_to_dict)
from services.dynamodb import FinanceTable
from utils.decorators import (extract_path_params, lambda_handler,
                              require_auth, validate_json_body)
from utils.exceptions import NotFoundError
from utils.logging import setup_logger
from utils.responses import HTTPStatus, success_response

logger = setup_logger(__name__)
table = FinanceTable()


@lambda_handler()
@require_auth
def list_subscriptions(event, context):
    """
    List the authenticated user's subscriptions, next billing date first.

    GET /api/subscriptions
    """
    principal = event["auth"]
    subscriptions = table.list_subscriptions(principal.id)
    return success_response(
        data=[subscription_to_dict(subscription) for subscription in subscriptions]
    )


@lambda_handler()
@require_auth
@validate_json_body
def create_subscription(event, context):
    """
    Create a subscription.

    POST /api/subscriptions
    """
    principal = event["auth"]
    payload = SubscriptionCreate.model_validate(event["json_body"])

    now = utc_now()
    subscription = SubscriptionBase(
        owner_id=principal.id,
        created_at=now,
        updated_at=now,
        **payload.model_dump(),
    )
    table.put_subscription(subscription)

    logger.info(
        "Subscription created",
        extra={
            "owner_id": principal.id,
            "subscription_id": subscription.subscription_id,
        },
    )
    return success_response(
        data=subscription_to_dict(subscription),
        message="Subscription created successfully",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
@require_auth
@extract_path_params("subscription_id")
def get_subscription(event, context):
    """GET /api/subscriptions/{subscription_id}"""
    principal = event["auth"]
    subscription_id = event["path_params"]["subscription_id"]

    subscription = table.get_subscription(principal.id, subscription_id)
    if not subscription:
        raise NotFoundError("Subscription", subscription_id)

    return success_response(data=subscription_to_dict(subscription))


@lambda_handler()
@require_auth
@validate_json_body
@extract_path_params("subscription_id")
def update_subscription(event, context):
    """
    Update some fields of a subscription.

    PUT /api/subscriptions/{subscription_id}
    """
    principal = event["auth"]
    subscription_id = event["path_params"]["subscription_id"]
    patch = SubscriptionUpdate.model_validate(event["json_body"])

    existing = table.get_subscription(principal.id, subscription_id)
    if not existing:
        raise NotFoundError("Subscription", subscription_id)

    updated = apply_changes(existing, patch.changes())

    if not table.update_subscription(updated):
        raise NotFoundError("Subscription", subscription_id)

    return success_response(
        data=subscription_to_dict(updated),
        message="Subscription updated successfully",
    )


@lambda_handler()
@require_auth
@extract_path_params("subscription_id")
def delete_subscription(event, context):
    """DELETE /api/subscriptions/{subscription_id}. Idempotent."""
    principal = event["auth"]
    subscription_id = event["path_params"]["subscription_id"]

    table.delete_subscription(principal.id, subscription_id)

    return success_response(
        data={"id": subscription_id},
        message="Subscription deleted successfully",
    )
