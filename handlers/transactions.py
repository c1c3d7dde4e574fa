"""
Transaction handlers for the money tracker API.

All operations are scoped to the authenticated principal. Another owner's
transaction is indistinguishable from one that does not exist.
"""

from models.common import apply_changes, utc_now
from models.transaction import (TransactionBase, TransactionCreate,
                                TransactionFilters, TransactionUpdate,
                                transaction_to_dict)
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
def list_transactions(event, context):
    """
    List the authenticated user's transactions, newest date first.

    GET /api/transactions

    Optional query parameters: kind (or type), categoryId, startDate,
    endDate, minAmount, maxAmount.
    """
    principal = event["auth"]
    filters = TransactionFilters.model_validate(
        event.get("queryStringParameters") or {}
    )

    transactions = table.list_transactions(principal.id, filters)

    return success_response(
        data=[transaction_to_dict(transaction) for transaction in transactions]
    )


@lambda_handler()
@require_auth
@validate_json_body
def create_transaction(event, context):
    """
    Create a new transaction for the authenticated user.

    POST /api/transactions
    """
    principal = event["auth"]
    payload = TransactionCreate.model_validate(event["json_body"])

    now = utc_now()
    transaction = TransactionBase(
        owner_id=principal.id,
        created_at=now,
        updated_at=now,
        **payload.model_dump(),
    )
    table.put_transaction(transaction)

    logger.info(
        "Transaction created",
        extra={"owner_id": principal.id, "transaction_id": transaction.transaction_id},
    )
    return success_response(
        data=transaction_to_dict(transaction),
        message="Transaction created successfully",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
@require_auth
@extract_path_params("transaction_id")
def get_transaction(event, context):
    """
    Get a single transaction.

    GET /api/transactions/{transaction_id}
    """
    principal = event["auth"]
    transaction_id = event["path_params"]["transaction_id"]

    transaction = table.get_transaction(principal.id, transaction_id)
    if not transaction:
        raise NotFoundError("Transaction", transaction_id)

    return success_response(data=transaction_to_dict(transaction))


@lambda_handler()
@require_auth
@validate_json_body
@extract_path_params("transaction_id")
def update_transaction(event, context):
    """
    Update some fields of a transaction.

    PUT /api/transactions/{transaction_id}

    Only the fields present in the body change.
    """
    principal = event["auth"]
    transaction_id = event["path_params"]["transaction_id"]
    patch = TransactionUpdate.model_validate(event["json_body"])

    existing = table.get_transaction(principal.id, transaction_id)
    if not existing:
        raise NotFoundError("Transaction", transaction_id)

    updated = apply_changes(existing, patch.changes())

    if not table.update_transaction(updated):
        raise NotFoundError("Transaction", transaction_id)

    return success_response(
        data=transaction_to_dict(updated),
        message="Transaction updated successfully",
    )


@lambda_handler()
@require_auth
@extract_path_params("transaction_id")
def delete_transaction(event, context):
    """
    Delete a transaction.

    DELETE /api/transactions/{transaction_id}

    Idempotent: deleting a missing transaction also succeeds.
    """
    principal = event["auth"]
    transaction_id = event["path_params"]["transaction_id"]

    table.delete_transaction(principal.id, transaction_id)

    return success_response(
        data={"id": transaction_id},
        message="Transaction deleted successfully",
    )
