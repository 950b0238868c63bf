"""
Identity primitives: signed access tokens and password hashing.

Tokens are stateless HS256 JWTs.  Nothing about an issued token is stored
server-side; every request re-verifies the signature, issuer and expiry
and rebuilds the claim from the token alone.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from blog_api.config import settings
from blog_api.exceptions import ExpiredTokenError, InvalidTokenError
from blog_api.schemas import TokenClaim, TokenPayload

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub", "email", "iat", "exp", "iss"]


class TokenService:
    """Issue and verify signed, time-bounded identity claims."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "blog-api",
        lifetime: timedelta = timedelta(days=7),
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._lifetime = lifetime

    def issue(self, payload: TokenPayload, expires_in: timedelta | None = None) -> str:
        """
        Return a signed token for *payload*.

        ``exp`` is ``iat`` plus *expires_in* (or the configured lifetime),
        so two tokens for the same payload issued at different times differ.
        """
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + (expires_in if expires_in is not None else self._lifetime)
        claims = {
            "sub": str(payload.subject_id),
            "email": payload.email,
            "iss": self._issuer,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaim:
        """
        Return the claim carried by *token*.

        Raises ``ExpiredTokenError`` once ``exp`` has passed and
        ``InvalidTokenError`` for anything else that fails verification:
        bad signature, foreign algorithm or issuer, missing claims or a
        token that is not a JWT at all.
        """
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.InvalidTokenError as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidTokenError() from exc

        try:
            return TokenClaim(
                subject_id=int(decoded["sub"]),
                email=decoded["email"],
                issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc


token_service = TokenService(
    secret=settings.JWT_SECRET,
    algorithm=settings.JWT_ALGORITHM,
    issuer=settings.JWT_ISSUER,
    lifetime=timedelta(seconds=settings.JWT_EXPIRES_IN_SECONDS),
)


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)
