"""End-to-end tests for the savings goal handlers."""
import pytest

from conftest import make_event, parse
from handlers import savings


def create_goal(token, context, **overrides):
    body = {"title": "Emergency fund", "targetAmount": 100}
    body.update(overrides)
    return parse(
        savings.create_savings_goal(
            make_event("POST", "/api/savings", body=body, token=token), context
        )
    )


def update_goal(token, context, goal_id, body):
    return parse(
        savings.update_savings_goal(
            make_event(
                "PUT",
                f"/api/savings/{goal_id}",
                body=body,
                token=token,
                path_params={"goal_id": goal_id},
            ),
            context,
        )
    )


def test_create_goal_applies_defaults(finance_table, token_a, lambda_context):
    status, payload = create_goal(token_a, lambda_context)
    assert status == 201
    data = payload["data"]
    assert data["currentAmount"] == 0
    assert data["priority"] == "medium"
    assert data["category"] == "General"
    assert data["description"] == ""
    assert data["isCompleted"] is False


@pytest.mark.parametrize("target", [0, -5])
def test_non_positive_target_is_rejected_without_writing(
    finance_table, token_a, lambda_context, target
):
    status, payload = create_goal(token_a, lambda_context, targetAmount=target)
    assert status == 400
    assert payload["success"] is False
    assert finance_table.list_savings_goals("user-a") == []


def test_client_cannot_set_completion(finance_table, token_a, lambda_context):
    _, payload = create_goal(token_a, lambda_context, isCompleted=True, currentAmount=10)
    assert payload["data"]["isCompleted"] is False


def test_completion_follows_amount_updates(finance_table, token_a, lambda_context):
    _, payload = create_goal(token_a, lambda_context)
    goal_id = payload["data"]["id"]

    _, payload = update_goal(token_a, lambda_context, goal_id, {"currentAmount": 100})
    assert payload["data"]["isCompleted"] is True

    _, payload = update_goal(token_a, lambda_context, goal_id, {"currentAmount": 99.99})
    assert payload["data"]["isCompleted"] is False

    _, payload = update_goal(token_a, lambda_context, goal_id, {"targetAmount": 50})
    assert payload["data"]["isCompleted"] is True
    assert payload["data"]["currentAmount"] == 99.99

    stored = finance_table.get_savings_goal("user-a", goal_id)
    assert stored.is_completed is True


def test_update_of_another_owners_goal_is_not_found(
    finance_table, token_a, token_b, lambda_context
):
    _, payload = create_goal(token_a, lambda_context)
    goal_id = payload["data"]["id"]

    status, _ = update_goal(token_b, lambda_context, goal_id, {"currentAmount": 100})
    assert status == 404
    assert finance_table.list_savings_goals("user-b") == []
    assert finance_table.get_savings_goal("user-a", goal_id).current_amount == 0


def test_list_get_and_delete_goals(finance_table, token_a, lambda_context):
    create_goal(token_a, lambda_context, title="First")
    _, payload = create_goal(token_a, lambda_context, title="Second", priority="high")
    goal_id = payload["data"]["id"]

    _, listed = parse(
        savings.list_savings_goals(make_event("GET", "/api/savings", token=token_a), lambda_context)
    )
    assert [g["title"] for g in listed["data"]] == ["Second", "First"]

    params = {"goal_id": goal_id}
    status, payload = parse(
        savings.get_savings_goal(
            make_event("GET", f"/api/savings/{goal_id}", token=token_a, path_params=params),
            lambda_context,
        )
    )
    assert status == 200
    assert payload["data"]["priority"] == "high"

    status, _ = parse(
        savings.delete_savings_goal(
            make_event("DELETE", f"/api/savings/{goal_id}", token=token_a, path_params=params),
            lambda_context,
        )
    )
    assert status == 200
    assert len(finance_table.list_savings_goals("user-a")) == 1


def test_invalid_priority_is_rejected(finance_table, token_a, lambda_context):
    status, _ = create_goal(token_a, lambda_context, priority="urgent")
    assert status == 400
