from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import TokenBadSignature, TokenError, TokenExpired, TokenMalformed


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordHasher:
    """Salted one-way bcrypt hashing.

    ``bcrypt_sha256`` pre-hashes the password, so bytes past bcrypt's 72-byte
    input limit still count. ``verify`` never raises: an unknown or corrupt
    digest simply fails.
    """

    def __init__(self, rounds: int | None = None) -> None:
        self._context = CryptContext(
            schemes=["bcrypt_sha256", "bcrypt"],
            deprecated="auto",
            bcrypt_sha256__rounds=rounds or settings.bcrypt_rounds,
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str | None) -> bool:
        if not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            return False


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenValidation:
    ok: bool
    reason: Optional[str] = None
    claims: dict[str, Any] = field(default_factory=dict)


class TokenService:
    """Issues and checks HS256 bearer tokens carrying subject and roles."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        ttl: timedelta | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.ttl = ttl or timedelta(minutes=settings.access_token_expire_minutes)
        self.clock = clock

    def issue(self, identity: dict[str, Any]) -> IssuedToken:
        issued_at = self.clock()
        expires_at = issued_at + self.ttl
        to_encode: dict[str, Any] = {
            "sub": identity["username"],
            "roles": sorted(identity.get("roles", [])),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": uuid4().hex,
        }
        token = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def decode(self, token: str) -> dict[str, Any]:
        """Return verified claims or raise the matching ``TokenError``.

        Structure is checked first, then the signature, then expiry, so the
        three failure kinds stay distinguishable.
        """
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise TokenMalformed() from exc

        if not isinstance(claims.get("sub"), str) or not isinstance(claims.get("exp"), (int, float)):
            raise TokenMalformed()

        try:
            jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise TokenBadSignature() from exc

        if self.clock().timestamp() >= claims["exp"]:
            raise TokenExpired()

        return claims

    def validate(self, token: str) -> TokenValidation:
        try:
            claims = self.decode(token)
        except TokenError as exc:
            return TokenValidation(ok=False, reason=exc.reason)
        return TokenValidation(ok=True, claims=claims)

    @staticmethod
    def subject_of(token: str) -> str:
        return jwt.get_unverified_claims(token)["sub"]

    @staticmethod
    def roles_of(token: str) -> set[str]:
        roles = jwt.get_unverified_claims(token).get("roles") or []
        if isinstance(roles, str):
            roles = [r for r in roles.split(",") if r]
        return set(roles)
