"""
Budget handlers for the money tracker API.

Budgets reference their category by id but are created and updated with a
category name, resolved through get-or-create. Every budget in a response
carries its derived ``spentAmount`` and ``isActive``.
"""

from datetime import date

from models.budget import BudgetBase, BudgetCreate, BudgetUpdate
from models.common import apply_changes, utc_now
from services.budget_aggregator import BudgetAggregator
from services.dynamodb import FinanceTable
from utils.decorators import (extract_path_params, lambda_handler,
                              require_auth, validate_json_body)
from utils.exceptions import NotFoundError, ValidationError
from utils.logging import setup_logger
from utils.responses import HTTPStatus, success_response

logger = setup_logger(__name__)
table = FinanceTable()


def _summarize(owner_id, budgets):
    aggregator = BudgetAggregator(table)
    return [
        summary.to_dict()
        for summary in aggregator.enrich(owner_id, budgets, today=date.today())
    ]


@lambda_handler()
@require_auth
def list_budgets(event, context):
    """
    List the authenticated user's budgets, most recently created first.

    GET /api/budgets
    """
    principal = event["auth"]
    budgets = table.list_budgets(principal.id)
    return success_response(data=_summarize(principal.id, budgets))


@lambda_handler()
@require_auth
@validate_json_body
def create_budget(event, context):
    """
    Create a budget, creating its category on first use.

    POST /api/budgets
    """
    principal = event["auth"]
    payload = BudgetCreate.model_validate(event["json_body"])

    category = table.get_or_create_category(principal.id, payload.category)

    now = utc_now()
    budget = BudgetBase(
        owner_id=principal.id,
        category_id=category.category_id,
        budget_amount=payload.budget_amount,
        period=payload.period,
        start_date=payload.start_date,
        end_date=payload.end_date,
        created_at=now,
        updated_at=now,
    )
    table.put_budget(budget)

    logger.info(
        "Budget created",
        extra={"owner_id": principal.id, "budget_id": budget.budget_id},
    )
    return success_response(
        data=_summarize(principal.id, [budget])[0],
        message="Budget created successfully",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
@require_auth
@extract_path_params("budget_id")
def get_budget(event, context):
    """
    Get a single budget.

    GET /api/budgets/{budget_id}
    """
    principal = event["auth"]
    budget_id = event["path_params"]["budget_id"]

    budget = table.get_budget(principal.id, budget_id)
    if not budget:
        raise NotFoundError("Budget", budget_id)

    return success_response(data=_summarize(principal.id, [budget])[0])


@lambda_handler()
@require_auth
@validate_json_body
@extract_path_params("budget_id")
def update_budget(event, context):
    """
    Update some fields of a budget.

    PUT /api/budgets/{budget_id}

    A new category name is resolved only after the rest of the update has
    validated, so a rejected update never creates a category.
    """
    principal = event["auth"]
    budget_id = event["path_params"]["budget_id"]
    changes = BudgetUpdate.model_validate(event["json_body"]).changes()

    category_name = changes.pop("category", None)
    if "category" in event["json_body"] and category_name is None:
        raise ValidationError("category cannot be null")

    existing = table.get_budget(principal.id, budget_id)
    if not existing:
        raise NotFoundError("Budget", budget_id)

    updated = apply_changes(existing, changes)

    if category_name is not None:
        category = table.get_or_create_category(principal.id, category_name)
        updated = updated.model_copy(update={"category_id": category.category_id})

    if not table.update_budget(updated):
        raise NotFoundError("Budget", budget_id)

    return success_response(
        data=_summarize(principal.id, [updated])[0],
        message="Budget updated successfully",
    )


@lambda_handler()
@require_auth
@extract_path_params("budget_id")
def delete_budget(event, context):
    """
    Delete a budget. Idempotent.

    DELETE /api/budgets/{budget_id}
    """
    principal = event["auth"]
    budget_id = event["path_params"]["budget_id"]

    table.delete_budget(principal.id, budget_id)

    return success_response(
        data={"id": budget_id},
        message="Budget deleted successfully",
    )
