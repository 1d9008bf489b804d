"""JWT encoding and decoding for access and refresh tokens.

Both token kinds share one claims layout and differ only in their
``token_type`` claim, their lifetime and the secret that signs them. The
caller always names the kind it expects when decoding; the matching secret is
selected from that expectation and the ``token_type`` claim is checked again
after the signature, so a refresh token can never stand in for an access
token (or the reverse).
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

import jwt

from src.config.settings import settings

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["exp", "iat", "nbf", "iss", "sub"]


class TokenKind(StrEnum):
    """Discriminator stored in the ``token_type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token codec failures."""


class TokenSigningError(TokenError):
    """Raised when a token cannot be signed. Always a server fault."""


class TokenDecodeError(TokenError):
    """Raised when a token cannot be accepted.

    ``reason`` tells expired, bad signature, wrong kind and so on apart for
    logging. Callers must not surface it to clients.
    """

    def __init__(self, reason: str):
        super().__init__(f"Invalid token ({reason})")
        self.reason = reason


@dataclass(frozen=True)
class TokenClaims:
    """Decoded claims of an access or refresh token."""

    user_id: int
    username: str
    email: str
    session_id: str
    token_type: TokenKind
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    issuer: str
    subject: str


def token_lifetime(kind: TokenKind) -> timedelta:
    """Lifetime of a freshly issued token of the given kind."""
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(days=settings.refresh_token_expire_days)


def _secret_for(kind: TokenKind) -> str:
    if kind is TokenKind.ACCESS:
        return settings.access_token_secret_key
    return settings.refresh_token_secret_key


def build_payload(
    kind: TokenKind,
    user_id: int,
    username: str,
    email: str,
    session_id: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Assemble the claim set for a token of ``kind`` issued at ``now``."""
    issued_at = now or datetime.now(UTC)
    return {
        "user_id": user_id,
        "username": username,
        "email": email,
        "session_id": session_id,
        "token_type": kind.value,
        "iat": issued_at,
        "nbf": issued_at,
        "exp": issued_at + token_lifetime(kind),
        "iss": settings.jwt_issuer,
        "sub": username,
    }


def encode_token(
    kind: TokenKind,
    user_id: int,
    username: str,
    email: str,
    session_id: str,
    now: datetime | None = None,
) -> str:
    """Sign a token of ``kind`` with that kind's secret.

    Args:
        kind: Access or refresh
        user_id: Owner of the session
        username: Also used as the ``sub`` claim
        email: User email at issue time
        session_id: Opaque session token the token is bound to
        now: Issue time, defaults to the current time

    Returns:
        Encoded JWT string

    Raises:
        TokenSigningError: If the signing backend fails

    """
    payload = build_payload(kind, user_id, username, email, session_id, now)
    try:
        return jwt.encode(payload, _secret_for(kind), algorithm=settings.jwt_algorithm)
    except (jwt.PyJWTError, TypeError, ValueError) as err:
        logger.error(f"Failed to sign {kind.value} token for user {user_id}: {err}")
        raise TokenSigningError(f"Failed to sign {kind.value} token") from err


def decode_token(token: str | None, expected_kind: TokenKind) -> TokenClaims:
    """Verify a token and return its claims.

    The secret is chosen from ``expected_kind``, only the configured HMAC
    algorithm is accepted, the time window and issuer are enforced, and the
    ``token_type`` claim must equal ``expected_kind``.

    Raises:
        TokenDecodeError: On any failure, with an internal ``reason``

    """
    if not token:
        raise TokenDecodeError("missing")

    try:
        payload = jwt.decode(
            token,
            _secret_for(expected_kind),
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as err:
        raise TokenDecodeError("expired") from err
    except jwt.ImmatureSignatureError as err:
        raise TokenDecodeError("not_yet_valid") from err
    except jwt.InvalidSignatureError as err:
        raise TokenDecodeError("bad_signature") from err
    except jwt.InvalidAlgorithmError as err:
        raise TokenDecodeError("bad_algorithm") from err
    except jwt.InvalidIssuerError as err:
        raise TokenDecodeError("bad_issuer") from err
    except jwt.MissingRequiredClaimError as err:
        raise TokenDecodeError(f"missing_claim:{err.claim}") from err
    except jwt.InvalidTokenError as err:
        raise TokenDecodeError("malformed") from err

    if payload.get("token_type") != expected_kind.value:
        raise TokenDecodeError("wrong_kind")

    try:
        return TokenClaims(
            user_id=int(payload["user_id"]),
            username=str(payload["username"]),
            email=str(payload["email"]),
            session_id=str(payload["session_id"]),
            token_type=expected_kind,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            not_before=datetime.fromtimestamp(payload["nbf"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            issuer=payload["iss"],
            subject=payload["sub"],
        )
    except (KeyError, TypeError, ValueError) as err:
        raise TokenDecodeError("malformed_claims") from err
