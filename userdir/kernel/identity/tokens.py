"""
JWT token management for authentication.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Union

from jose import JWTError, jwt

from userdir.kernel.errors import ValidationError
from userdir.kernel.identity.interfaces import TokenService

DEFAULT_SECRET = "demo-secret-key"
DEFAULT_EXPIRES_IN = "24h"
TOKEN_ISSUER = "userdir"
BEARER_PREFIX = "Bearer "

# Registered claims that jose validates on decode; a caller value would not survive verify
RESERVED_CLAIMS = frozenset({"iss", "exp", "iat", "aud", "sub", "nbf", "jti"})

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}

Duration = Union[str, int, timedelta]


def parse_duration(value: Duration) -> timedelta:
    """
    Convert a token lifetime into a timedelta.

    Accepts ``timedelta`` objects, integer seconds, or strings such as
    ``"45s"``, ``"30m"``, ``"24h"`` and ``"7d"`` (bare digits are seconds).

    Raises:
        ValueError: If the value cannot be parsed or is not positive
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, int) and not isinstance(value, bool):
        delta = timedelta(seconds=value)
    elif isinstance(value, str):
        match = _DURATION_PATTERN.match(value)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        delta = timedelta(**{_DURATION_UNITS[unit]: int(amount)})
    else:
        raise ValueError(f"Invalid duration: {value!r}")

    if delta <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


class JWTTokenService(TokenService):
    """
    JWT token creation and verification.

    Tokens are HS256-signed and carry the caller's claim alongside the
    issuer tag, issue time and expiry.
    """

    def __init__(
        self,
        secret_key: str = DEFAULT_SECRET,
        expires_in: Duration = DEFAULT_EXPIRES_IN,
        algorithm: str = "HS256",
        issuer: str = TOKEN_ISSUER,
    ):
        if not secret_key:
            raise ValueError("Token secret must not be empty")
        self.secret_key = secret_key
        self.expires_in = parse_duration(expires_in)
        self.algorithm = algorithm
        self.issuer = issuer

    def issue(
        self,
        claim: Mapping[str, Any],
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed token for a claim.

        Args:
            claim: Structured payload to embed
            expires_delta: Optional custom lifetime for this token

        Returns:
            Encoded JWT

        Raises:
            ValidationError: If the claim is empty, not a mapping, uses a
                reserved claim name, or holds values JSON cannot encode
        """
        if not isinstance(claim, Mapping) or not claim:
            raise ValidationError("Token claim must be a non-empty object")
        reserved = RESERVED_CLAIMS.intersection(claim)
        if reserved:
            raise ValidationError(
                f"Token claim uses reserved names: {', '.join(sorted(reserved))}"
            )

        now = datetime.now(timezone.utc)
        payload = dict(claim)
        payload.update(
            {
                "iss": self.issuer,
                "iat": now,
                "exp": now + (expires_delta if expires_delta is not None else self.expires_in),
            }
        )
        try:
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Token claim must be JSON-serializable") from exc

    def verify(self, token: str) -> Optional[dict]:
        """
        Verify and decode a token.

        Args:
            token: Encoded JWT

        Returns:
            The embedded claim if valid, None otherwise
        """
        if not token or not isinstance(token, str):
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require_exp": True, "require_iss": True},
            )
        except (JWTError, ValueError, TypeError):
            return None

        if not isinstance(payload, dict):
            return None
        return {key: value for key, value in payload.items() if key not in RESERVED_CLAIMS}

    def extract_from_auth_header(self, header: Optional[str]) -> Optional[str]:
        """Return the token following ``Bearer `` or None."""
        if not isinstance(header, str) or not header.startswith(BEARER_PREFIX):
            return None
        return header[len(BEARER_PREFIX):]
