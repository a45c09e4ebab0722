"""Signed, expiring bearer tokens."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from jose import ExpiredSignatureError, JWTError, jwt

from src.config import get_settings
from src.errors import ExpiredTokenError, InvalidTokenError


@dataclass(frozen=True)
class TokenPayload:
    """Decoded contents of a session token."""

    user_id: int
    issued_at: float  # epoch seconds, sub-second precision


class TokenCodec:
    """Issue and verify JWTs that carry a user id.

    The codec holds the signing secret and TTL it was built with; nothing is
    read from global state after construction.
    """

    def __init__(self, secret: str, algorithm: str, expires_in: timedelta) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in

    def issue(self, user_id: int, issued_at: datetime | None = None) -> str:
        """Create a token for ``user_id``."""
        issued_at = issued_at or datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "iat": issued_at.timestamp(),
            "exp": int((issued_at + self._expires_in).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenPayload:
        """Decode ``token`` and return its payload.

        Raises:
            ExpiredTokenError: the token is past its expiry.
            InvalidTokenError: bad signature, malformed token or claims.
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredTokenError() from e
        except JWTError as e:
            raise InvalidTokenError() from e

        try:
            return TokenPayload(user_id=int(claims["sub"]), issued_at=float(claims["iat"]))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError() from e


@lru_cache
def get_token_codec() -> TokenCodec:
    """Get the process-wide codec built from settings."""
    settings = get_settings()
    return TokenCodec(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_in=timedelta(minutes=settings.jwt_expiration_minutes),
    )
