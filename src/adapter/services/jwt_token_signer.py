from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from src.app.services.token_signer import InvalidTokenError, ITokenSigner


class JoseTokenSigner(ITokenSigner):
    """HMAC-signed JWTs using python-jose"""

    def __init__(self, secret: str, issuer: str, algorithm: str = "HS256"):
        self.secret = secret
        self.issuer = issuer
        self.algorithm = algorithm

    def sign(
        self, claims: dict, ttl: timedelta, issued_at: Optional[datetime] = None
    ) -> str:
        """
        Sign claims as a JWT.

        Args:
            claims: Token-specific claims (sub, sid, typ, jti, ...)
            ttl: Lifetime of the token from issued_at
            issued_at: Naive UTC issue time, defaults to now

        Returns:
            JWT token string
        """
        now = issued_at or datetime.now(UTC).replace(tzinfo=None)
        payload = {
            **claims,
            "iss": self.issuer,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, verify_expiry: bool = True) -> dict:
        """
        Verify and decode a JWT.

        Raises:
            InvalidTokenError: malformed token, bad signature, wrong issuer,
                or expired (when verify_expiry is set)
        """
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": verify_expiry},
            )
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e
