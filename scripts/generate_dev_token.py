#!/usr/bin/env python3
"""
Mint a Supabase-style access token for local development.

The token is signed with SUPABASE_JWT_SECRET (HS256, audience
``authenticated``) so the API accepts it exactly like one issued by
Supabase Auth.
"""

import sys
from datetime import datetime, timedelta, timezone

import click
import jwt
from dotenv import load_dotenv

load_dotenv()


def build_claims(user_id: str, email: str, expires_in: timedelta) -> dict:
    now = datetime.now(timezone.utc)
    return {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
    }


@click.command()
@click.option("--user-id", default="dev-user-123", show_default=True)
@click.option("--email", default="dev@example.com", show_default=True)
@click.option(
    "--hours", default=24, type=int, show_default=True, help="Token lifetime"
)
@click.option(
    "--secret",
    envvar="SUPABASE_JWT_SECRET",
    help="Signing secret (defaults to $SUPABASE_JWT_SECRET)",
)
def main(user_id: str, email: str, hours: int, secret: str):
    """Print a signed bearer token for USER_ID."""
    if not secret:
        click.secho("SUPABASE_JWT_SECRET is not set", fg="red", err=True)
        sys.exit(1)

    token = jwt.encode(
        build_claims(user_id, email, timedelta(hours=hours)), secret, algorithm="HS256"
    )
    click.echo(token)
    click.secho(f"\nAuthorization: Bearer {token}", fg="blue", err=True)


if __name__ == "__main__":
    main()
