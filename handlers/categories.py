"""
Category handlers for the money tracker API.

Categories are created implicitly by budgets, or explicitly here so
clients can obtain a category id for their transactions.
"""

from models.category import CategoryCreate, category_to_dict
from services.dynamodb import FinanceTable
from utils.decorators import lambda_handler, require_auth, validate_json_body
from utils.responses import HTTPStatus, success_response

table = FinanceTable()


@lambda_handler()
@require_auth
def list_categories(event, context):
    """GET /api/categories"""
    principal = event["auth"]
    categories = table.list_categories(principal.id)
    return success_response(data=[category_to_dict(c) for c in categories])


@lambda_handler()
@require_auth
@validate_json_body
def create_category(event, context):
    """
    Get or create a category by name.

    POST /api/categories

    Posting an existing name returns the existing category.
    """
    principal = event["auth"]
    payload = CategoryCreate.model_validate(event["json_body"])

    category = table.get_or_create_category(principal.id, payload.name)

    return success_response(
        data=category_to_dict(category),
        status_code=HTTPStatus.CREATED,
    )
