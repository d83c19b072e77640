from abc import ABC, abstractmethod


class ISecretHasher(ABC):
    """Salted one-way hashing of secrets (passwords, refresh tokens)"""

    @abstractmethod
    async def hash(self, secret: str) -> str:
        """Return a salted hash of ``secret``"""
        pass

    @abstractmethod
    async def verify(self, secret: str, hashed: str) -> bool:
        """Check ``secret`` against a hash produced by ``hash``"""
        pass
