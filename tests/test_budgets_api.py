"""End-to-end tests for the budget handlers."""
from datetime import date, timedelta

from conftest import make_event, parse
from handlers import budgets, transactions


def create_budget(token, context, **overrides):
    body = {
        "category": "Food",
        "budgetAmount": 300,
        "period": "monthly",
        "startDate": "2024-01-01",
        "endDate": "2024-01-31",
    }
    body.update(overrides)
    return parse(
        budgets.create_budget(
            make_event("POST", "/api/budgets", body=body, token=token), context
        )
    )


def create_transaction(token, context, **body):
    status, payload = parse(
        transactions.create_transaction(
            make_event("POST", "/api/transactions", body=body, token=token), context
        )
    )
    assert status == 201
    return payload["data"]


def list_budgets(token, context):
    status, payload = parse(
        budgets.list_budgets(make_event("GET", "/api/budgets", token=token), context)
    )
    assert status == 200
    return payload["data"]


def update_budget(token, context, budget_id, body):
    return parse(
        budgets.update_budget(
            make_event(
                "PUT",
                f"/api/budgets/{budget_id}",
                body=body,
                token=token,
                path_params={"budget_id": budget_id},
            ),
            context,
        )
    )


def test_create_budget_returns_derived_fields(finance_table, token_a, lambda_context):
    status, payload = create_budget(token_a, lambda_context)
    assert status == 201
    data = payload["data"]
    assert data["category"] == "Food"
    assert data["categoryId"]
    assert data["budgetAmount"] == 300
    assert data["spentAmount"] == 0
    assert data["isActive"] is False
    assert data["period"] == "monthly"


def test_spent_amount_counts_only_matching_expenses(finance_table, token_a, lambda_context):
    _, payload = create_budget(token_a, lambda_context)
    food_id = payload["data"]["categoryId"]

    for day, amount, kind in (
        ("2024-01-05", 20, "expense"),
        ("2024-01-20", 15, "expense"),
        ("2024-02-01", 99, "expense"),
        ("2024-01-10", 5, "income"),
    ):
        create_transaction(
            token_a, lambda_context, kind=kind, amount=amount, categoryId=food_id, date=day
        )

    [budget] = list_budgets(token_a, lambda_context)
    assert budget["spentAmount"] == 35.0


def test_budget_ending_today_is_active(finance_table, token_a, lambda_context):
    today = date.today()
    _, payload = create_budget(
        token_a,
        lambda_context,
        startDate=(today - timedelta(days=30)).isoformat(),
        endDate=today.isoformat(),
    )
    assert payload["data"]["isActive"] is True

    _, payload = create_budget(
        token_a,
        lambda_context,
        startDate=(today + timedelta(days=1)).isoformat(),
        endDate=(today + timedelta(days=30)).isoformat(),
    )
    assert payload["data"]["isActive"] is False


def test_same_category_name_is_reused_per_owner(
    finance_table, token_a, token_b, lambda_context
):
    _, first = create_budget(token_a, lambda_context)
    _, second = create_budget(token_a, lambda_context, budgetAmount=50)
    _, other = create_budget(token_b, lambda_context)

    assert first["data"]["categoryId"] == second["data"]["categoryId"]
    assert other["data"]["categoryId"] != first["data"]["categoryId"]
    assert len(finance_table.list_categories("user-a")) == 1
    assert len(finance_table.list_categories("user-b")) == 1


def test_invalid_budget_creates_nothing(finance_table, token_a, lambda_context):
    for overrides in (
        {"budgetAmount": 0},
        {"period": "daily"},
        {"startDate": "2024-02-01", "endDate": "2024-01-01"},
        {"category": "   "},
    ):
        status, payload = create_budget(token_a, lambda_context, **overrides)
        assert status == 400, overrides
        assert payload["success"] is False

    assert finance_table.list_budgets("user-a") == []
    assert finance_table.list_categories("user-a") == []


def test_amount_is_accepted_as_an_alias(finance_table, token_a, lambda_context):
    status, payload = parse(
        budgets.create_budget(
            make_event(
                "POST",
                "/api/budgets",
                body={
                    "category": "Fun",
                    "amount": 75,
                    "period": "weekly",
                    "startDate": "2024-01-01",
                    "endDate": "2024-01-07",
                },
                token=token_a,
            ),
            lambda_context,
        )
    )
    assert status == 201
    assert payload["data"]["budgetAmount"] == 75


def test_update_changes_category_by_name(finance_table, token_a, lambda_context):
    _, payload = create_budget(token_a, lambda_context)
    budget_id = payload["data"]["id"]

    status, payload = update_budget(
        token_a, lambda_context, budget_id, {"category": "Groceries", "budgetAmount": 120}
    )
    assert status == 200
    data = payload["data"]
    assert data["category"] == "Groceries"
    assert data["budgetAmount"] == 120
    assert data["startDate"] == "2024-01-01"

    names = [c.name for c in finance_table.list_categories("user-a")]
    assert names == ["Food", "Groceries"]


def test_rejected_update_creates_no_category(finance_table, token_a, lambda_context):
    _, payload = create_budget(token_a, lambda_context)
    budget_id = payload["data"]["id"]

    status, _ = update_budget(
        token_a, lambda_context, budget_id, {"category": "Travel", "endDate": "2023-12-01"}
    )
    assert status == 400
    assert [c.name for c in finance_table.list_categories("user-a")] == ["Food"]

    status, payload = update_budget(token_a, lambda_context, budget_id, {"category": None})
    assert status == 400
    assert payload["error"] == "category cannot be null"


def test_update_of_another_owners_budget_is_not_found(
    finance_table, token_a, token_b, lambda_context
):
    _, payload = create_budget(token_a, lambda_context)
    budget_id = payload["data"]["id"]

    status, payload = update_budget(token_b, lambda_context, budget_id, {"budgetAmount": 1})
    assert status == 404
    assert payload["error"] == f"Budget '{budget_id}' not found"
    assert finance_table.list_budgets("user-b") == []
    assert list_budgets(token_a, lambda_context)[0]["budgetAmount"] == 300


def test_budget_with_missing_category_renders_unknown(finance_table, token_a, lambda_context):
    _, payload = create_budget(token_a, lambda_context)
    finance_table.table.delete_item(Key={"PK": "USER#user-a", "SK": "CATEGORY#Food"})

    [budget] = list_budgets(token_a, lambda_context)
    assert budget["category"] == "Unknown"


def test_get_and_delete_budget(finance_table, token_a, lambda_context):
    _, payload = create_budget(token_a, lambda_context)
    budget_id = payload["data"]["id"]
    params = {"budget_id": budget_id}

    status, payload = parse(
        budgets.get_budget(
            make_event("GET", f"/api/budgets/{budget_id}", token=token_a, path_params=params),
            lambda_context,
        )
    )
    assert status == 200
    assert payload["data"]["id"] == budget_id

    for _ in range(2):
        status, payload = parse(
            budgets.delete_budget(
                make_event("DELETE", f"/api/budgets/{budget_id}", token=token_a, path_params=params),
                lambda_context,
            )
        )
        assert status == 200

    status, _ = parse(
        budgets.get_budget(
            make_event("GET", f"/api/budgets/{budget_id}", token=token_a, path_params=params),
            lambda_context,
        )
    )
    assert status == 404


def test_spent_amount_failure_is_reported_per_budget(
    finance_table, monkeypatch, token_a, lambda_context
):
    from utils.exceptions import DependencyError

    create_budget(token_a, lambda_context)

    def failing_query(*args, **kwargs):
        raise DependencyError("Failed to list category expenses")

    monkeypatch.setattr(finance_table, "list_category_expenses", failing_query)

    [budget] = list_budgets(token_a, lambda_context)
    assert budget["spentAmount"] is None
    assert budget["spentAmountError"] == "Failed to calculate spent amount"
