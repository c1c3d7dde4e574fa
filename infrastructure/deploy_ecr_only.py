"""
Bootstrap program that creates only the image repository.

Run it before the first image push; the main program then finds the
repository already in place.
"""

import pulumi
import pulumi_aws as aws

ecr_repository = aws.ecr.Repository(
    "money-tracker-repo",
    name="money-tracker-backend",
    force_delete=True,
    image_scanning_configuration={"scan_on_push": True},
)

pulumi.export("ecr_repository_url", ecr_repository.repository_url)
