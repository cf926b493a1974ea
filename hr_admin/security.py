"""Password hashing and signed access tokens."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Optional

import jwt
from passlib.context import CryptContext

from hr_admin.exceptions import AuthenticationError
from hr_admin.models import Principal, PublicUser, Role

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison; malformed stored hashes never match."""
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            logger.error("Stored password hash could not be parsed")
            return False

    def dummy_verify(self) -> None:
        """Spend one verify's worth of work without a stored hash."""
        self._context.dummy_verify()


class TokenIssuer:
    """Issues and verifies HS256 JWTs carrying ``sub``, ``username`` and ``role``.

    Tokens are stateless: nothing is revoked, expiry is checked on verify.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(minutes=60),
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._expires_delta = expires_delta

    def issue(self, user: PublicUser, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(UTC)
        payload = {
            # PyJWT requires ``sub`` to be a string
            "sub": str(user.id),
            "username": user.username,
            "role": user.role.value,
            "iat": now,
            "exp": now + (expires_delta or self._expires_delta),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired") from None
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected token: %s", exc)
            raise AuthenticationError("Invalid token") from None

        try:
            return Principal(
                user_id=int(payload["sub"]),
                username=payload["username"],
                role=Role(payload["role"]),
            )
        except (KeyError, ValueError, TypeError):
            raise AuthenticationError("Invalid token") from None
