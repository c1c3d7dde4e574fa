"""Shared fixtures: a mocked DynamoDB table, signed tokens and API Gateway events."""
import base64
import json
import os
from datetime import datetime, timedelta, timezone

# Settings are read once at import time, so the environment must be ready
# before any application module is imported.
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["APP_ENV"] = "test"
os.environ["TABLE_NAME"] = "MoneyTrackerTable"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-for-money-tracker-tests"
os.environ.pop("PARAMETER_STORE_PREFIX", None)
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)
os.environ.pop("ALLOW_UNVERIFIED_TOKENS", None)

import boto3
import jwt
import pytest
from moto import mock_aws

from services.dynamodb import FinanceTable

TEST_SECRET = os.environ["SUPABASE_JWT_SECRET"]
TABLE_NAME = os.environ["TABLE_NAME"]

HANDLER_MODULES = [
    "handlers.transactions",
    "handlers.budgets",
    "handlers.categories",
    "handlers.savings",
    "handlers.subscriptions",
]


def make_token(
    sub="user-a",
    email="a@example.com",
    expires_in=timedelta(hours=1),
    secret=TEST_SECRET,
    **claims,
):
    """Mint a Supabase-style HS256 access token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def make_event(
    method="GET",
    path="/",
    body=None,
    token=None,
    headers=None,
    path_params=None,
    query=None,
    base64_body=False,
):
    """Build an API Gateway HTTP API (payload 2.0) event."""
    event_headers = {"content-type": "application/json"}
    if token is not None:
        event_headers["authorization"] = f"Bearer {token}"
    if headers:
        event_headers.update(headers)

    if body is not None and not isinstance(body, str):
        body = json.dumps(body)
    if body is not None and base64_body:
        body = base64.b64encode(body.encode("utf-8")).decode("ascii")

    return {
        "version": "2.0",
        "rawPath": path,
        "headers": event_headers,
        "pathParameters": path_params,
        "queryStringParameters": query,
        "body": body,
        "isBase64Encoded": base64_body,
        "requestContext": {"http": {"method": method, "path": path}},
    }


def parse(response):
    """Return (status code, decoded body) of a Lambda proxy response."""
    return response["statusCode"], json.loads(response["body"])


class FakeContext:
    function_name = "money-tracker-test"
    aws_request_id = "test-request-id"


@pytest.fixture
def lambda_context():
    return FakeContext()


@pytest.fixture
def dynamodb():
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")
        resource.create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        yield resource


@pytest.fixture
def finance_table(dynamodb, monkeypatch):
    """A FinanceTable on the mocked table, wired into every handler module."""
    import importlib

    table = FinanceTable(TABLE_NAME, dynamodb_resource=dynamodb)
    for module_name in HANDLER_MODULES:
        module = importlib.import_module(module_name)
        monkeypatch.setattr(module, "table", table)
    return table


@pytest.fixture
def token_a():
    return make_token(sub="user-a", email="a@example.com")


@pytest.fixture
def token_b():
    return make_token(sub="user-b", email="b@example.com")
