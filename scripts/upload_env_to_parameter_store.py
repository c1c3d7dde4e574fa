#!/usr/bin/env python3
"""
Upload Supabase settings from a .env file to AWS Parameter Store.

The deployed functions read these parameters at startup through
``services.config`` whenever ``PARAMETER_STORE_PREFIX`` is set.
"""

import sys
from pathlib import Path

import boto3
import click
from botocore.exceptions import ClientError
from dotenv import dotenv_values

# Parameter key -> .env variable
SUPABASE_PARAMETERS = {
    "supabase/url": "SUPABASE_URL",
    "supabase/jwt-secret": "SUPABASE_JWT_SECRET",
    "supabase/anon-key": "SUPABASE_ANON_KEY",
}

SECURE_PARAMETERS = frozenset({"supabase/jwt-secret", "supabase/anon-key"})


def load_env_file(env_file_path: str = ".env") -> dict:
    """
    Read the Supabase settings from a .env file.

    Returns:
        Mapping of parameter key to value, for the settings that are present
    """
    if not Path(env_file_path).exists():
        click.secho(f"Error: {env_file_path} file not found", fg="red", err=True)
        sys.exit(1)

    values = dotenv_values(env_file_path)
    parameters = {
        key: values[env_name]
        for key, env_name in SUPABASE_PARAMETERS.items()
        if values.get(env_name)
    }

    missing = [
        env_name
        for key, env_name in SUPABASE_PARAMETERS.items()
        if key not in parameters
    ]
    if missing:
        click.secho(f"Warning: not set in {env_file_path}: {', '.join(missing)}", fg="yellow")

    return parameters


def mask(value: str) -> str:
    return value[:6] + "..." if len(value) > 6 else "***"


def upload_parameters(
    parameters: dict, parameter_prefix: str = "/money-tracker", dry_run: bool = False
) -> int:
    """
    Upload parameters, storing secrets as SecureString.

    Returns:
        Number of parameters that failed to upload
    """
    if dry_run:
        click.secho("DRY RUN - Would upload the following parameters:", fg="blue")
        for key, value in parameters.items():
            click.echo(f"  {parameter_prefix}/{key} = {mask(value)}")
        return 0

    ssm = boto3.client("ssm")
    failures = 0

    for key, value in parameters.items():
        full_name = f"{parameter_prefix}/{key}"
        parameter_type = "SecureString" if key in SECURE_PARAMETERS else "String"

        try:
            response = ssm.put_parameter(
                Name=full_name,
                Value=value,
                Type=parameter_type,
                Description=f"Money tracker setting: {key}",
                Overwrite=True,
            )
        except ClientError as e:
            failures += 1
            click.secho(f"Failed to upload {full_name}: {e}", fg="red", err=True)
            continue

        click.secho(
            f"Uploaded {full_name} ({parameter_type}, version {response['Version']})",
            fg="green",
        )

    return failures


def verify_parameters(parameters: dict, parameter_prefix: str = "/money-tracker") -> None:
    """Check that every uploaded parameter can be read back."""
    click.secho("\nVerifying uploaded parameters...", fg="blue")
    ssm = boto3.client("ssm")

    for key in parameters:
        full_name = f"{parameter_prefix}/{key}"

        try:
            response = ssm.get_parameter(Name=full_name, WithDecryption=True)
        except ClientError as e:
            if e.response["Error"]["Code"] == "ParameterNotFound":
                click.secho(f"{full_name} not found", fg="red")
            else:
                click.secho(f"Error checking {full_name}: {e}", fg="red")
            continue

        click.secho(
            f"{full_name} exists (version {response['Parameter']['Version']})",
            fg="green",
        )


@click.command()
@click.option("--env-file", default=".env", help="Path to .env file", show_default=True)
@click.option(
    "--prefix",
    default="/money-tracker",
    help="Parameter Store prefix",
    show_default=True,
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option("--verify", is_flag=True, help="Verify parameters after upload")
def main(env_file: str, prefix: str, dry_run: bool, verify: bool):
    """
    Upload SUPABASE_URL, SUPABASE_JWT_SECRET and SUPABASE_ANON_KEY to
    Parameter Store under PREFIX.
    """
    parameters = load_env_file(env_file)

    if not parameters:
        click.secho("No Supabase settings found to upload", fg="red", err=True)
        sys.exit(1)

    failures = upload_parameters(parameters, prefix.rstrip("/"), dry_run)

    if dry_run:
        return

    if verify:
        verify_parameters(parameters, prefix.rstrip("/"))

    if failures:
        sys.exit(1)

    click.secho("\nParameter upload complete!", fg="green")
    click.echo(f"Deploy with PARAMETER_STORE_PREFIX={prefix} to use them.")


if __name__ == "__main__":
    main()
