import json
import os
import subprocess
import sys
from datetime import datetime

import pulumi
import pulumi_aws as aws
from components.lambda_function import DockerLambdaFunction

config = pulumi.Config()
app_env = config.get("appEnv") or "production"
parameter_prefix = config.get("parameterPrefix") or "/money-tracker"

current = aws.get_caller_identity()
current_region = aws.get_region()

# One image serves every function; only the handler differs
ecr_repository = aws.ecr.Repository(
    "money-tracker-repo", name="money-tracker-backend", force_delete=True
)


def get_content_hash():
    """Tag images by source content so code changes roll the functions."""
    try:
        result = subprocess.run(
            [sys.executable, "get_image_tag.py"],
            capture_output=True,
            text=True,
            cwd=os.path.dirname(__file__),
        )
    except OSError as e:
        pulumi.log.warn(f"Could not compute image tag: {e}")
        return datetime.now().strftime("%Y%m%d-%H%M%S")

    if result.returncode != 0:
        pulumi.log.warn(f"get_image_tag.py failed: {result.stderr.strip()}")
        return datetime.now().strftime("%Y%m%d-%H%M%S")
    return result.stdout.strip()


# image_tag.txt is written by the build step when it already pushed an image
tag_file = "image_tag.txt"
if os.path.exists(tag_file):
    with open(tag_file, "r") as f:
        image_tag = f.read().strip()
else:
    image_tag = get_content_hash()

image_uri = ecr_repository.repository_url.apply(lambda url: f"{url}:{image_tag}")

# Single table keyed by USER#<owner> so every query is owner scoped
dynamodb_table = aws.dynamodb.Table(
    "money-tracker-table",
    name="MoneyTrackerTable",
    billing_mode="PAY_PER_REQUEST",
    attributes=[
        {"name": "PK", "type": "S"},
        {"name": "SK", "type": "S"},
    ],
    hash_key="PK",
    range_key="SK",
)

dynamodb_policy = dynamodb_table.arn.apply(
    lambda arn: json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Action": [
                        "dynamodb:PutItem",
                        "dynamodb:GetItem",
                        "dynamodb:DeleteItem",
                        "dynamodb:Query",
                    ],
                    "Resource": [arn],
                }
            ],
        }
    )
)

# Supabase settings are uploaded by scripts/upload_env_to_parameter_store.py
parameter_store_policy = pulumi.Output.concat(
    "arn:aws:ssm:",
    current_region.name,
    ":",
    current.account_id,
    ":parameter",
    parameter_prefix,
    "/*",
).apply(
    lambda arn: json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Action": ["ssm:GetParameter"],
                    "Resource": arn,
                }
            ],
        }
    )
)

lambda_env_vars = {
    "TABLE_NAME": dynamodb_table.name,
    "APP_ENV": app_env,
    "PARAMETER_STORE_PREFIX": parameter_prefix,
}

# (module, singular, plural, url segment, id path parameter)
CRUD_RESOURCES = [
    ("transactions", "transaction", "transactions", "transactions", "transaction_id"),
    ("budgets", "budget", "budgets", "budgets", "budget_id"),
    ("savings", "savings_goal", "savings_goals", "savings", "goal_id"),
    ("subscriptions", "subscription", "subscriptions", "subscriptions", "subscription_id"),
]

routes = [
    ("healthz", "main.healthz", "GET", "/health"),
    ("get-profile", "handlers.users.get_profile", "GET", "/api/users/profile"),
    ("list-categories", "handlers.categories.list_categories", "GET", "/api/categories"),
    ("create-category", "handlers.categories.create_category", "POST", "/api/categories"),
]

for module, singular, plural, path, id_param in CRUD_RESOURCES:
    collection = f"/api/{path}"
    item = f"{collection}/{{{id_param}}}"
    routes += [
        (f"list-{path}", f"handlers.{module}.list_{plural}", "GET", collection),
        (f"create-{path}", f"handlers.{module}.create_{singular}", "POST", collection),
        (f"get-{path}", f"handlers.{module}.get_{singular}", "GET", item),
        (f"update-{path}", f"handlers.{module}.update_{singular}", "PUT", item),
        (f"delete-{path}", f"handlers.{module}.delete_{singular}", "DELETE", item),
    ]

functions = {}
for name, handler, _, _ in routes:
    functions[name] = DockerLambdaFunction(
        f"money-tracker-{name}",
        handler=handler,
        shared_image_uri=image_uri,
        environment_vars=lambda_env_vars,
        additional_policies=[dynamodb_policy, parameter_store_policy],
    )

functions["not-found"] = DockerLambdaFunction(
    "money-tracker-not-found",
    handler="main.not_found",
    shared_image_uri=image_uri,
    environment_vars=lambda_env_vars,
    additional_policies=[parameter_store_policy],
)

api = aws.apigatewayv2.Api(
    "money-tracker-api",
    protocol_type="HTTP",
    cors_configuration={
        "allow_origins": ["*"],
        "allow_headers": ["*"],
        "allow_methods": ["*"],
    },
)

stage = aws.apigatewayv2.Stage(
    "money-tracker-stage",
    api_id=api.id,
    name="$default",
    auto_deploy=True,
    access_log_settings={
        "destination_arn": pulumi.Output.concat(
            "arn:aws:logs:",
            current_region.name,
            ":",
            current.account_id,
            ":log-group:/aws/apigateway/money-tracker-api",
        ),
        "format": "$context.requestId $context.status $context.error.message $context.integrationErrorMessage",
    },
)

# Authentication happens inside each handler, so no route carries an authorizer
route_keys = [(name, f"{method} {path}") for name, _, method, path in routes]
route_keys.append(("not-found", "$default"))

for function_name, route_key in route_keys:
    resource_name = function_name.replace("-", "_")

    aws.lambda_.Permission(
        f"{resource_name}-permission",
        action="lambda:InvokeFunction",
        function=functions[function_name].name,
        principal="apigateway.amazonaws.com",
        source_arn=pulumi.Output.concat(api.execution_arn, "/*/*"),
    )

    integration = aws.apigatewayv2.Integration(
        f"{resource_name}-integration",
        api_id=api.id,
        integration_type="AWS_PROXY",
        integration_uri=functions[function_name].invoke_arn,
        integration_method="POST",
        payload_format_version="2.0",
    )

    aws.apigatewayv2.Route(
        f"{resource_name}-route",
        api_id=api.id,
        route_key=route_key,
        target=pulumi.Output.concat("integrations/", integration.id),
    )

pulumi.export("ecr_repository_url", ecr_repository.repository_url)
pulumi.export("image_tag", image_tag)
pulumi.export("image_uri", image_uri)
pulumi.export("api_url", api.api_endpoint)
pulumi.export("api_id", api.id)
pulumi.export("dynamodb_table_name", dynamodb_table.name)
pulumi.export("dynamodb_table_arn", dynamodb_table.arn)
