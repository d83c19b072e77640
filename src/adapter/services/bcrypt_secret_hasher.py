import asyncio
import hashlib

import bcrypt

from src.app.services.secret_hasher import ISecretHasher


class BcryptSecretHasher(ISecretHasher):
    """
    Bcrypt hashing, run in a worker thread.

    Secrets are pre-digested with SHA-256 because bcrypt only reads the
    first 72 bytes and JWT refresh tokens are longer than that.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    @staticmethod
    def _digest(secret: str) -> bytes:
        return hashlib.sha256(secret.encode("utf-8")).hexdigest().encode("ascii")

    def _hash_sync(self, secret: str) -> str:
        return bcrypt.hashpw(self._digest(secret), bcrypt.gensalt(self.rounds)).decode()

    def _verify_sync(self, secret: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(self._digest(secret), hashed.encode())
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    async def hash(self, secret: str) -> str:
        return await asyncio.to_thread(self._hash_sync, secret)

    async def verify(self, secret: str, hashed: str) -> bool:
        return await asyncio.to_thread(self._verify_sync, secret, hashed)
