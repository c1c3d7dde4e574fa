"""
Supabase authentication service for validating JWT tokens.

Normalizes every verification outcome into either a ``VerifiedIdentity`` or
a ``TokenVerificationError`` with a ``TokenErrorKind``, so callers never deal
with PyJWT or HTTP specifics.
"""

from enum import Enum
from typing import Any, Dict, Optional

import jwt
import requests
from jwt.exceptions import (DecodeError, ExpiredSignatureError,
                            InvalidAlgorithmError, InvalidAudienceError,
                            InvalidSignatureError, InvalidTokenError,
                            MissingRequiredClaimError)
from pydantic import BaseModel, Field

from services.config import Settings
from utils.exceptions import DependencyError
from utils.logging import setup_logger

logger = setup_logger(__name__)

SUPABASE_AUDIENCE = "authenticated"
API_TIMEOUT_SECONDS = 10


class TokenErrorKind(str, Enum):
    EXPIRED = "expired"
    MALFORMED = "malformed"
    REVOKED = "revoked"
    INVALID = "invalid"


class TokenVerificationError(Exception):
    """The identity provider rejected a token."""

    def __init__(self, kind: TokenErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


class VerifiedIdentity(BaseModel):
    subject_id: str
    email: Optional[str] = None
    claims: Dict[str, Any] = Field(default_factory=dict)


class SupabaseAuth:
    def __init__(self, settings: Settings):
        self.supabase_url = (settings.supabase_url or "").rstrip("/") or None
        self.supabase_jwt_secret = settings.supabase_jwt_secret
        self.supabase_anon_key = settings.supabase_anon_key

        if not self.supabase_jwt_secret:
            if self.supabase_url and self.supabase_anon_key:
                logger.warning(
                    "Supabase JWT secret not configured. Will use API-based verification."
                )
            else:
                logger.warning("Supabase authentication not configured")

    @property
    def is_configured(self) -> bool:
        return bool(
            self.supabase_jwt_secret or (self.supabase_url and self.supabase_anon_key)
        )

    def verify_token(self, token: str) -> VerifiedIdentity:
        """
        Verify a Supabase access token.

        Raises:
            TokenVerificationError: the token was rejected
            DependencyError: the Supabase API could not be reached
        """
        if self.supabase_jwt_secret:
            return self._verify_jwt_locally(token)

        if self.supabase_url and self.supabase_anon_key:
            logger.info("Using API-based token verification (no JWT secret available)")
            return self._verify_jwt_via_api(token)

        raise TokenVerificationError(
            TokenErrorKind.INVALID, "Supabase authentication not configured"
        )

    def _verify_jwt_locally(self, token: str) -> VerifiedIdentity:
        """Verify the HS256 signature and standard claims with the JWT secret."""
        try:
            payload = jwt.decode(
                token,
                self.supabase_jwt_secret,
                algorithms=["HS256"],
                audience=SUPABASE_AUDIENCE,
                options={"require": ["exp", "sub"]},
            )
        except ExpiredSignatureError as e:
            raise TokenVerificationError(TokenErrorKind.EXPIRED, str(e)) from e
        except InvalidSignatureError as e:
            # Subclass of DecodeError; a forged token is not a format problem
            raise TokenVerificationError(TokenErrorKind.INVALID, str(e)) from e
        except (
            DecodeError,
            InvalidAlgorithmError,
            InvalidAudienceError,
            MissingRequiredClaimError,
        ) as e:
            raise TokenVerificationError(TokenErrorKind.MALFORMED, str(e)) from e
        except InvalidTokenError as e:
            raise TokenVerificationError(TokenErrorKind.INVALID, str(e)) from e

        return self._identity_from_claims(payload)

    def _verify_jwt_via_api(self, token: str) -> VerifiedIdentity:
        """Ask the Supabase Auth API who the token belongs to."""
        headers = {
            "Authorization": f"Bearer {token}",
            "apikey": self.supabase_anon_key,
            "Content-Type": "application/json",
        }

        try:
            response = requests.get(
                f"{self.supabase_url}/auth/v1/user",
                headers=headers,
                timeout=API_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"Error validating JWT token via API: {str(e)}")
            raise DependencyError("Failed to verify authentication token") from e

        if response.status_code == 200:
            user_data = response.json()
            if not user_data.get("id"):
                raise TokenVerificationError(
                    TokenErrorKind.INVALID, "Supabase returned no user id"
                )
            return VerifiedIdentity(
                subject_id=user_data["id"],
                email=user_data.get("email"),
                claims=user_data,
            )

        if response.status_code in (400, 401, 403, 404):
            raise self._classify_api_rejection(response)

        logger.error(f"Token validation failed via API: {response.status_code}")
        raise DependencyError("Failed to verify authentication token")

    @staticmethod
    def _classify_api_rejection(response) -> TokenVerificationError:
        try:
            body = response.json()
        except ValueError:
            body = {}

        error_code = str(body.get("error_code") or body.get("code") or "")
        message = str(body.get("msg") or body.get("message") or response.text)
        logger.warning(
            f"Token rejected by Supabase API: {response.status_code}",
            extra={"error_code": error_code},
        )

        if error_code == "session_not_found":
            return TokenVerificationError(TokenErrorKind.REVOKED, message)
        if "expired" in message.lower():
            return TokenVerificationError(TokenErrorKind.EXPIRED, message)
        if error_code == "bad_jwt" or response.status_code == 400:
            return TokenVerificationError(TokenErrorKind.MALFORMED, message)
        return TokenVerificationError(TokenErrorKind.INVALID, message)

    def decode_unverified(self, token: str) -> Optional[VerifiedIdentity]:
        """
        Read the claims of a token WITHOUT checking its signature.

        Anyone can mint a token this method accepts. Only the development
        fallback of the authentication gate may call it.
        """
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except InvalidTokenError:
            return None

        subject_id = payload.get("sub") or payload.get("uid")
        # Local tooling may mint numeric ids; anything else is unusable
        if not subject_id or isinstance(subject_id, bool):
            return None
        if not isinstance(subject_id, (str, int)):
            return None

        nested = payload.get("claims")
        email = payload.get("email") or (
            nested.get("email") if isinstance(nested, dict) else None
        )
        return VerifiedIdentity(
            subject_id=str(subject_id),
            email=email if isinstance(email, str) else None,
            claims=payload,
        )

    @staticmethod
    def _identity_from_claims(payload: Dict[str, Any]) -> VerifiedIdentity:
        return VerifiedIdentity(
            subject_id=payload["sub"],
            email=payload.get("email"),
            claims=payload,
        )
