import json
from typing import Dict, List, Optional

import pulumi
import pulumi_aws as aws

LAMBDA_ASSUME_ROLE_POLICY = json.dumps(
    {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Action": "sts:AssumeRole",
                "Effect": "Allow",
                "Principal": {"Service": "lambda.amazonaws.com"},
            }
        ],
    }
)

BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


class DockerLambdaFunction(pulumi.ComponentResource):
    """
    One money tracker endpoint: a Lambda function running the shared API
    image with its own handler, log group and execution role.

    ``additional_policies`` are inline policy documents, typically table and
    Parameter Store access.
    """

    def __init__(
        self,
        name: str,
        handler: str,
        shared_image_uri: pulumi.Input[str],
        environment_vars: Optional[Dict[str, pulumi.Input[str]]] = None,
        additional_policies: Optional[List[pulumi.Input[str]]] = None,
        timeout: int = 15,
        memory_size: int = 256,
        log_retention_days: int = 30,
        opts: Optional[pulumi.ResourceOptions] = None,
    ):
        super().__init__("money-tracker:aws:DockerLambdaFunction", name, None, opts)
        child = pulumi.ResourceOptions(parent=self)

        self.log_group = aws.cloudwatch.LogGroup(
            f"{name}-log-group",
            name=f"/aws/lambda/{name}",
            retention_in_days=log_retention_days,
            opts=child,
        )

        self.role = aws.iam.Role(
            f"{name}-role",
            assume_role_policy=LAMBDA_ASSUME_ROLE_POLICY,
            opts=child,
        )

        aws.iam.RolePolicyAttachment(
            f"{name}-basic-policy",
            role=self.role.name,
            policy_arn=BASIC_EXECUTION_POLICY_ARN,
            opts=child,
        )

        self.inline_policies = [
            aws.iam.RolePolicy(
                f"{name}-policy-{index}",
                role=self.role.id,
                policy=document,
                opts=child,
            )
            for index, document in enumerate(additional_policies or [])
        ]

        self.function = aws.lambda_.Function(
            f"{name}-function",
            package_type="Image",
            image_uri=shared_image_uri,
            role=self.role.arn,
            timeout=timeout,
            memory_size=memory_size,
            environment={"variables": environment_vars or {}},
            image_config={"commands": [handler]},
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.log_group]),
        )

        self.arn = self.function.arn
        self.name = self.function.name
        self.invoke_arn = self.function.invoke_arn

        self.register_outputs(
            {
                "arn": self.arn,
                "name": self.name,
                "invoke_arn": self.invoke_arn,
                "role_arn": self.role.arn,
            }
        )
