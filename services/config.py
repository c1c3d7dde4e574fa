"""
Application configuration.

Settings are read once per Lambda process into an explicit ``Settings``
object and handed to the services that need them. Values come from the
environment (a ``.env`` file is loaded for local development). Secrets can
also be kept in AWS Systems Manager Parameter Store: when
``PARAMETER_STORE_PREFIX`` is set, missing secrets are looked up under that
prefix.
"""

import os
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv
from pydantic import BaseModel

from utils.logging import setup_logger

logger = setup_logger(__name__)

NON_PRODUCTION_ENVIRONMENTS = frozenset({"development", "dev", "test", "local"})

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

_ssm_client = None


def get_ssm_client():
    """Get or create SSM client with caching."""
    global _ssm_client
    if _ssm_client is None:
        _ssm_client = boto3.client("ssm")
    return _ssm_client


@lru_cache(maxsize=128)
def get_parameter(parameter_name: str, decrypt: bool = True) -> Optional[str]:
    """
    Get a parameter from AWS Parameter Store with caching.

    Args:
        parameter_name: Full name of the parameter, e.g. /money-tracker/supabase/url
        decrypt: Whether to decrypt SecureString parameters

    Returns:
        Parameter value or None if not found
    """
    try:
        response = get_ssm_client().get_parameter(
            Name=parameter_name, WithDecryption=decrypt
        )
        logger.debug(f"Retrieved parameter {parameter_name} from Parameter Store")
        return response["Parameter"]["Value"]

    except ClientError as e:
        error_code = e.response["Error"]["Code"]

        if error_code == "ParameterNotFound":
            logger.warning(f"Parameter {parameter_name} not found in Parameter Store")
        else:
            logger.error(f"Error retrieving parameter {parameter_name}: {e}")

        return None


class ParameterStoreConfig:
    """
    Looks up configuration keys in the environment first and Parameter Store
    second.

    A key such as ``supabase/jwt-secret`` maps to the environment variable
    ``SUPABASE_JWT_SECRET`` and to the parameter ``{prefix}/supabase/jwt-secret``.
    """

    def __init__(self, parameter_prefix: Optional[str] = None):
        self.parameter_prefix = (parameter_prefix or "").rstrip("/") or None

    @staticmethod
    def env_name(key: str) -> str:
        return key.replace("/", "_").replace("-", "_").upper()

    def get(self, key: str, default: Any = None) -> Any:
        value = os.getenv(self.env_name(key))
        if value:
            return value

        if self.parameter_prefix:
            value = get_parameter(f"{self.parameter_prefix}/{key}")
            if value is not None:
                return value

        return default

    def get_flag(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return str(value).strip().lower() in _TRUE_VALUES


class Settings(BaseModel):
    """Process-wide settings, constructed once at startup."""

    app_env: str = "production"
    table_name: str = "MoneyTrackerTable"
    supabase_url: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    # Dev-only escape hatch: accept tokens whose signature cannot be checked.
    # Ignored unless the environment is non-production.
    allow_unverified_tokens: bool = False
    service_name: str = "money-tracker-api"
    service_version: str = "1.0.0"

    @property
    def is_non_production(self) -> bool:
        return self.app_env.strip().lower() in NON_PRODUCTION_ENVIRONMENTS

    @property
    def unverified_tokens_enabled(self) -> bool:
        return self.allow_unverified_tokens and self.is_non_production


def load_settings(config: Optional[ParameterStoreConfig] = None) -> Settings:
    """
    Build ``Settings`` from the environment and, if configured, Parameter Store.
    """
    load_dotenv()
    config = config or ParameterStoreConfig(os.getenv("PARAMETER_STORE_PREFIX"))

    settings = Settings(
        app_env=config.get("app-env", "production"),
        table_name=config.get("table-name", "MoneyTrackerTable"),
        supabase_url=config.get("supabase/url"),
        supabase_jwt_secret=config.get("supabase/jwt-secret"),
        supabase_anon_key=config.get("supabase/anon-key"),
        allow_unverified_tokens=config.get_flag("allow-unverified-tokens"),
    )

    logger.info(
        "Settings loaded",
        extra={
            "app_env": settings.app_env,
            "table_name": settings.table_name,
            "supabase_url_configured": bool(settings.supabase_url),
            "jwt_secret_configured": bool(settings.supabase_jwt_secret),
            "unverified_tokens_enabled": settings.unverified_tokens_enabled,
        },
    )
    return settings


# Built once per Lambda process
settings = load_settings()
