"""JWT token utilities.

Two audiences share one signing secret:

- ``api``: access tokens sent on every authenticated request (1 hour)
- ``auth``: refresh tokens, only accepted by the refresh endpoint (30 days)

Tokens are stateless. Nothing is stored server side and there is no revocation.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Literal, Optional, Union
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel, ConfigDict, ValidationError

from ..config import get_settings

ACCESS_AUDIENCE = "api"
REFRESH_AUDIENCE = "auth"


class VerificationFailure(str, Enum):
    MALFORMED = "malformed"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    INVALID_ISSUED_AT = "invalid_issued_at"
    ISSUER_MISMATCH = "issuer_mismatch"
    AUDIENCE_MISMATCH = "audience_mismatch"
    INVALID_PAYLOAD = "invalid_payload"


# Stable public error codes for each failure kind
ERROR_CODES: dict[VerificationFailure, tuple[str, str]] = {
    VerificationFailure.MALFORMED: ("invalid_token", "The token is invalid."),
    VerificationFailure.UNSUPPORTED_ALGORITHM: (
        "unsupported_token_algorithm",
        "The token algorithm is not supported.",
    ),
    VerificationFailure.SIGNATURE_MISMATCH: ("invalid_signature", "The token signature is invalid."),
    VerificationFailure.EXPIRED: ("token_expired", "The token has expired."),
    VerificationFailure.NOT_YET_VALID: ("token_not_active", "The token is not active yet."),
    VerificationFailure.INVALID_ISSUED_AT: (
        "invalid_issued_at",
        "The token issued-at time is invalid.",
    ),
    VerificationFailure.ISSUER_MISMATCH: ("invalid_issuer", "The token issuer is invalid."),
    VerificationFailure.AUDIENCE_MISMATCH: (
        "token_verification_failed",
        "Token verification failed.",
    ),
    VerificationFailure.INVALID_PAYLOAD: (
        "token_verification_failed",
        "Token verification failed.",
    ),
}


class TokenVerificationError(Exception):
    """Raised when a token fails any verification stage."""

    def __init__(self, kind: VerificationFailure, detail: Optional[str] = None):
        super().__init__(detail or kind.value)
        self.kind = kind

    @property
    def code(self) -> str:
        return ERROR_CODES[self.kind][0]

    @property
    def message(self) -> str:
        return ERROR_CODES[self.kind][1]


class _Claims(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    iss: str
    sub: UUID
    iat: int
    exp: int


class AccessTokenClaims(_Claims):
    aud: Literal["api"]


class RefreshTokenClaims(_Claims):
    aud: Literal["auth"]


TokenClaims = Union[AccessTokenClaims, RefreshTokenClaims]

CLAIMS_SCHEMAS: dict[str, type[_Claims]] = {
    ACCESS_AUDIENCE: AccessTokenClaims,
    REFRESH_AUDIENCE: RefreshTokenClaims,
}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def create_token(
    subject: Union[str, UUID],
    audience: str,
    expires_delta: timedelta,
    now: Optional[datetime] = None,
) -> str:
    """Sign a token for one audience."""
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "iss": settings.app_url,
        "aud": audience,
        "sub": str(subject),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_delta).timestamp()),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def issue_token_pair(user_id: Union[str, UUID], now: Optional[datetime] = None) -> TokenPair:
    """Create an access token and a refresh token for the same subject."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    return TokenPair(
        access_token=create_token(
            user_id,
            ACCESS_AUDIENCE,
            timedelta(minutes=settings.access_token_expire_minutes),
            now,
        ),
        refresh_token=create_token(
            user_id,
            REFRESH_AUDIENCE,
            timedelta(days=settings.refresh_token_expire_days),
            now,
        ),
    )


def _classify_claims_error(exc: JWTClaimsError) -> VerificationFailure:
    message = str(exc)
    if "nbf" in message:
        return VerificationFailure.NOT_YET_VALID
    if "iat" in message:
        return VerificationFailure.INVALID_ISSUED_AT
    return VerificationFailure.MALFORMED


def verify_token(token: str, audience: str = ACCESS_AUDIENCE) -> TokenClaims:
    """Verify a token for the expected audience and return its claims.

    Stages run in order: header, algorithm, signature and time claims,
    issuer, audience, then the payload shape for that audience.
    Raises TokenVerificationError on the first failing stage.
    """
    schema = CLAIMS_SCHEMAS.get(audience)
    if schema is None:
        raise ValueError(f"Unknown token audience: {audience!r}")

    settings = get_settings()

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise TokenVerificationError(VerificationFailure.MALFORMED, str(exc)) from exc

    if header.get("alg") != settings.algorithm:
        raise TokenVerificationError(
            VerificationFailure.UNSUPPORTED_ALGORITHM, f"alg={header.get('alg')!r}"
        )

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            # issuer, audience and subject are checked below
            options={"verify_aud": False, "verify_iss": False, "verify_sub": False},
        )
    except ExpiredSignatureError as exc:
        raise TokenVerificationError(VerificationFailure.EXPIRED, str(exc)) from exc
    except JWTClaimsError as exc:
        raise TokenVerificationError(_classify_claims_error(exc), str(exc)) from exc
    except JWTError as exc:
        kind = (
            VerificationFailure.SIGNATURE_MISMATCH
            if "Signature verification failed" in str(exc)
            else VerificationFailure.MALFORMED
        )
        raise TokenVerificationError(kind, str(exc)) from exc

    iat = payload.get("iat")
    if isinstance(iat, (int, float)) and iat > datetime.now(timezone.utc).timestamp() + 1:
        raise TokenVerificationError(VerificationFailure.INVALID_ISSUED_AT, "iat in the future")

    if payload.get("iss") != settings.app_url:
        raise TokenVerificationError(VerificationFailure.ISSUER_MISMATCH)

    if payload.get("aud") != audience:
        raise TokenVerificationError(VerificationFailure.AUDIENCE_MISMATCH)

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise TokenVerificationError(VerificationFailure.INVALID_PAYLOAD, str(exc)) from exc
