from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class InvalidTokenError(Exception):
    """Raised when a token is malformed, badly signed or from another issuer."""


class ITokenSigner(ABC):
    """Compact signed tokens carrying issuer and expiry claims"""

    @abstractmethod
    def sign(
        self, claims: dict, ttl: timedelta, issued_at: Optional[datetime] = None
    ) -> str:
        """Sign ``claims``; ``iss``, ``iat`` and ``exp`` are added by the signer"""
        pass

    @abstractmethod
    def verify(self, token: str, verify_expiry: bool = True) -> dict:
        """Return the token's claims or raise InvalidTokenError"""
        pass
