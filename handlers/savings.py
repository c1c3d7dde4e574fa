"""
Savings goal handlers for the money tracker API.

``isCompleted`` is never taken from the request: the savings goal model
derives it from the current and target amounts whenever it is built.
"""

from models.common import apply_changes, utc_now
from models.savings import (SavingsGoalBase, SavingsGoalCreate,
                            SavingsGoalUpdate, savings_goal_to_dict)
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
def list_savings_goals(event, context):
    """
    List the authenticated user's savings goals, most recently created first.

    GET /api/savings
    """
    principal = event["auth"]
    goals = table.list_savings_goals(principal.id)
    return success_response(data=[savings_goal_to_dict(goal) for goal in goals])


@lambda_handler()
@require_auth
@validate_json_body
def create_savings_goal(event, context):
    """
    Create a savings goal.

    POST /api/savings
    """
    principal = event["auth"]
    payload = SavingsGoalCreate.model_validate(event["json_body"])

    now = utc_now()
    goal = SavingsGoalBase(
        owner_id=principal.id,
        created_at=now,
        updated_at=now,
        **payload.model_dump(),
    )
    table.put_savings_goal(goal)

    logger.info(
        "Savings goal created",
        extra={"owner_id": principal.id, "goal_id": goal.goal_id},
    )
    return success_response(
        data=savings_goal_to_dict(goal),
        message="Savings goal created successfully",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
@require_auth
@extract_path_params("goal_id")
def get_savings_goal(event, context):
    """GET /api/savings/{goal_id}"""
    principal = event["auth"]
    goal_id = event["path_params"]["goal_id"]

    goal = table.get_savings_goal(principal.id, goal_id)
    if not goal:
        raise NotFoundError("Savings goal", goal_id)

    return success_response(data=savings_goal_to_dict(goal))


@lambda_handler()
@require_auth
@validate_json_body
@extract_path_params("goal_id")
def update_savings_goal(event, context):
    """
    Update some fields of a savings goal.

    PUT /api/savings/{goal_id}

    Changing either amount re-derives ``isCompleted`` against the other
    amount's stored or newly supplied value.
    """
    principal = event["auth"]
    goal_id = event["path_params"]["goal_id"]
    patch = SavingsGoalUpdate.model_validate(event["json_body"])

    existing = table.get_savings_goal(principal.id, goal_id)
    if not existing:
        raise NotFoundError("Savings goal", goal_id)

    updated = apply_changes(existing, patch.changes())

    if not table.update_savings_goal(updated):
        raise NotFoundError("Savings goal", goal_id)

    if updated.is_completed and not existing.is_completed:
        logger.info(
            "Savings goal completed",
            extra={"owner_id": principal.id, "goal_id": goal_id},
        )

    return success_response(
        data=savings_goal_to_dict(updated),
        message="Savings goal updated successfully",
    )


@lambda_handler()
@require_auth
@extract_path_params("goal_id")
def delete_savings_goal(event, context):
    """DELETE /api/savings/{goal_id}. Idempotent."""
    principal = event["auth"]
    goal_id = event["path_params"]["goal_id"]

    table.delete_savings_goal(principal.id, goal_id)

    return success_response(
        data={"id": goal_id},
        message="Savings goal deleted successfully",
    )
