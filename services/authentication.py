"""
Request authentication.

The ``AuthenticationGate`` turns the headers of an API Gateway event into a
``Principal`` or raises. It is built once per Lambda process from explicit
settings; see ``auth_gate`` at the bottom of this module.
"""

from typing import Any, Dict, Mapping, Optional

from models.principal import Principal
from services.config import Settings, settings
from services.supabase_auth import (SupabaseAuth, TokenErrorKind,
                                    TokenVerificationError, VerifiedIdentity)
from utils.exceptions import AuthenticationError, ConfigurationError
from utils.logging import setup_logger

logger = setup_logger(__name__)

BEARER_PREFIX = "Bearer "

MISSING_CREDENTIAL_MESSAGE = "Authorization header required. Format: Bearer <token>"
EMPTY_CREDENTIAL_MESSAGE = "Authentication token is required"
NOT_CONFIGURED_MESSAGE = "Authentication not configured"

TOKEN_ERROR_MESSAGES = {
    TokenErrorKind.EXPIRED: "Authentication token has expired. Please log in again.",
    TokenErrorKind.MALFORMED: "Invalid authentication token format.",
    TokenErrorKind.REVOKED: "Authentication token has been revoked. Please log in again.",
    TokenErrorKind.INVALID: "Invalid or expired authentication token",
}

DEVELOPMENT_PRINCIPAL = Principal(id="dev-user-123", email="dev@example.com")


def extract_bearer_token(headers: Optional[Mapping[str, Any]]) -> str:
    """
    Pull the token out of the Authorization header.

    The header name is matched case-insensitively (API Gateway lowercases
    it); the value must start with exactly ``"Bearer "``.
    """
    authorization = None
    for name, value in (headers or {}).items():
        if name.lower() == "authorization":
            authorization = value
            break

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError(MISSING_CREDENTIAL_MESSAGE)

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError(EMPTY_CREDENTIAL_MESSAGE)

    return token


class AuthenticationGate:
    def __init__(self, settings: Settings, verifier: Optional[SupabaseAuth] = None):
        self.settings = settings
        self.verifier = verifier or SupabaseAuth(settings)

    def authenticate(self, headers: Optional[Mapping[str, Any]]) -> Principal:
        """
        Resolve the caller of a request.

        Raises:
            AuthenticationError: credential missing, empty or rejected (401)
            ConfigurationError: verifier unconfigured in production (500)
        """
        if not self.verifier.is_configured:
            if self.settings.is_non_production:
                logger.warning(
                    "Identity verifier not configured, using development principal",
                    extra={"app_env": self.settings.app_env},
                )
                return DEVELOPMENT_PRINCIPAL

            logger.error("Identity verifier not configured in production")
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        token = extract_bearer_token(headers)

        try:
            identity = self.verifier.verify_token(token)
        except TokenVerificationError as e:
            identity = self._unverified_fallback(token, e)
            if identity is None:
                logger.warning(
                    "Token verification failed",
                    extra={"reason": e.kind.value, "detail": e.message},
                )
                raise AuthenticationError(
                    TOKEN_ERROR_MESSAGES[e.kind],
                    details=self._error_details(e),
                ) from e

        principal = Principal(id=identity.subject_id, email=identity.email or "")
        logger.info("User authenticated", extra={"owner_id": principal.id})
        return principal

    def _unverified_fallback(
        self, token: str, error: TokenVerificationError
    ) -> Optional[VerifiedIdentity]:
        """
        Development-only escape hatch for tokens of the wrong format, such
        as tokens minted by local tooling. Off unless the environment is
        non-production AND ``allow_unverified_tokens`` is set.
        """
        if error.kind is not TokenErrorKind.MALFORMED:
            return None
        if not self.settings.unverified_tokens_enabled:
            return None

        identity = self.verifier.decode_unverified(token)
        if identity is not None:
            logger.warning(
                "Accepted token WITHOUT signature verification",
                extra={"owner_id": identity.subject_id, "app_env": self.settings.app_env},
            )
        return identity

    def _error_details(self, error: TokenVerificationError) -> Optional[Dict[str, Any]]:
        if self.settings.is_non_production:
            return {"reason": error.message}
        return None


# Built once per Lambda process
auth_gate = AuthenticationGate(settings)
