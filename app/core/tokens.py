"""
JWT bearer tokens: signing key, issuance, validation and claim extraction.

The signing key is built once from JWT_SECRET at application startup and
handed to a TokenProvider; both are immutable afterwards and shared by all
requests. A secret shorter than 256 bits is a configuration error and stops
the token subsystem from starting.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from app.core.config import JWT_SECRET_MIN_BYTES

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
USER_ID_CLAIM = "userId"
DEFAULT_EXPIRATION_MS = 86_400_000


class SigningKeyError(RuntimeError):
    """Configured JWT secret cannot be used as an HS256 signing key."""


@dataclass(frozen=True)
class SigningKey:
    """HMAC key material derived from the configured secret."""

    material: bytes

    @classmethod
    def from_secret(cls, secret: str) -> "SigningKey":
        """Build the key from the UTF-8 bytes of secret. Raises SigningKeyError if under 32 bytes."""
        material = secret.encode("utf-8")
        if len(material) < JWT_SECRET_MIN_BYTES:
            raise SigningKeyError(
                f"JWT secret must be at least 256 bits ({JWT_SECRET_MIN_BYTES} bytes), "
                f"got {len(material)} bytes"
            )
        return cls(material=material)

    def __repr__(self) -> str:
        return f"SigningKey(<{len(self.material)} bytes>)"


def _coerce_user_id(raw: Any) -> int | None:
    """Normalize a userId claim (any JSON number, truncated, or numeric string) to int."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        logger.warning("Unable to parse userId from token: %r", raw)
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            logger.warning("Unable to parse userId from token: %r", raw)
            return None
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning("Unable to parse userId from token: %r", raw)
        return None


class TokenProvider:
    """Issue and verify HS256 bearer tokens carrying sub (username) and userId."""

    def __init__(
        self,
        signing_key: SigningKey,
        expiration_ms: int = DEFAULT_EXPIRATION_MS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._key = signing_key
        self._lifetime = timedelta(milliseconds=expiration_ms)
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenProvider":
        """Build a provider from JWT_SECRET and JWT_EXPIRATION_MS."""
        key = SigningKey.from_secret(settings.JWT_SECRET.get_secret_value())
        return cls(key, expiration_ms=settings.JWT_EXPIRATION_MS)

    @property
    def expiration_ms(self) -> int:
        return int(self._lifetime.total_seconds() * 1000)

    def generate_token(self, username: str, user_id: int) -> str:
        """Create a signed token with sub, userId, iat and exp."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": username,
            USER_ID_CLAIM: user_id,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._key.material, algorithm=JWT_ALGORITHM)

    def _decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature, structure and expiry; return the claims.
        Raises jwt.PyJWTError on any failure.
        """
        return jwt.decode(
            token,
            self._key.material,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )

    def validate_token(self, token: str | None) -> bool:
        """Return True only for a well-formed, correctly signed, unexpired token. Never raises."""
        if not token or not isinstance(token, str) or not token.strip():
            logger.warning("JWT claims string is empty")
            return False
        try:
            self._decode(token)
            return True
        except jwt.ExpiredSignatureError as e:
            logger.warning("Expired JWT token: %s", e)
        except jwt.InvalidSignatureError as e:
            logger.warning("Invalid JWT signature: %s", e)
        except jwt.InvalidAlgorithmError as e:
            logger.warning("Unsupported JWT token: %s", e)
        except jwt.DecodeError as e:
            logger.warning("Malformed JWT token: %s", e)
        except jwt.PyJWTError as e:
            logger.warning("Invalid JWT token: %s", e)
        return False

    def get_username_from_token(self, token: str) -> str | None:
        """Return the sub claim. Raises jwt.PyJWTError if the token does not verify."""
        return self._decode(token).get("sub")

    def get_user_id_from_token(self, token: str) -> int | None:
        """
        Return the userId claim as int, or None if absent or unparsable.
        Raises jwt.PyJWTError if the token does not verify.
        """
        return _coerce_user_id(self._decode(token).get(USER_ID_CLAIM))
