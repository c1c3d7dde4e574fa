"""End-to-end tests for the subscription handlers."""
from conftest import make_event, parse
from handlers import subscriptions


def create_subscription(token, context, **overrides):
    body = {
        "name": "Streaming",
        "amount": 12.99,
        "billingCycle": "monthly",
        "nextBillingDate": "2024-06-15",
    }
    body.update(overrides)
    return parse(
        subscriptions.create_subscription(
            make_event("POST", "/api/subscriptions", body=body, token=token), context
        )
    )


def test_create_subscription_applies_defaults(finance_table, token_a, lambda_context):
    status, payload = create_subscription(token_a, lambda_context)
    assert status == 201
    data = payload["data"]
    assert data["category"] == "Other"
    assert data["isActive"] is True
    assert data["reminderDays"] == 3
    assert data["amount"] == 12.99
    assert data["nextBillingDate"] == "2024-06-15"


def test_invalid_subscription_is_rejected(finance_table, token_a, lambda_context):
    for overrides in (
        {"amount": 0},
        {"billingCycle": "daily"},
        {"reminderDays": -1},
        {"name": ""},
    ):
        status, _ = create_subscription(token_a, lambda_context, **overrides)
        assert status == 400, overrides
    assert finance_table.list_subscriptions("user-a") == []


def test_list_is_ordered_by_next_billing_date(finance_table, token_a, lambda_context):
    create_subscription(token_a, lambda_context, name="Gym", nextBillingDate="2024-07-01")
    create_subscription(token_a, lambda_context, name="Music", nextBillingDate="2024-06-01")

    _, payload = parse(
        subscriptions.list_subscriptions(
            make_event("GET", "/api/subscriptions", token=token_a), lambda_context
        )
    )
    assert [s["name"] for s in payload["data"]] == ["Music", "Gym"]


def test_update_and_deactivate(finance_table, token_a, lambda_context):
    _, payload = create_subscription(token_a, lambda_context)
    subscription_id = payload["data"]["id"]
    params = {"subscription_id": subscription_id}

    status, payload = parse(
        subscriptions.update_subscription(
            make_event(
                "PUT",
                f"/api/subscriptions/{subscription_id}",
                body={"isActive": False, "reminderDays": 7},
                token=token_a,
                path_params=params,
            ),
            lambda_context,
        )
    )
    assert status == 200
    assert payload["data"]["isActive"] is False
    assert payload["data"]["reminderDays"] == 7
    assert payload["data"]["name"] == "Streaming"

    status, payload = parse(
        subscriptions.get_subscription(
            make_event("GET", f"/api/subscriptions/{subscription_id}", token=token_a, path_params=params),
            lambda_context,
        )
    )
    assert payload["data"]["isActive"] is False


def test_other_owner_cannot_touch_subscription(
    finance_table, token_a, token_b, lambda_context
):
    _, payload = create_subscription(token_a, lambda_context)
    subscription_id = payload["data"]["id"]
    params = {"subscription_id": subscription_id}
    path = f"/api/subscriptions/{subscription_id}"

    status, _ = parse(
        subscriptions.get_subscription(
            make_event("GET", path, token=token_b, path_params=params), lambda_context
        )
    )
    assert status == 404

    status, _ = parse(
        subscriptions.delete_subscription(
            make_event("DELETE", path, token=token_b, path_params=params), lambda_context
        )
    )
    assert status == 200
    assert len(finance_table.list_subscriptions("user-a")) == 1
