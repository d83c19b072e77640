from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.bcrypt_secret_hasher import BcryptSecretHasher
from src.adapter.services.jwt_token_signer import JoseTokenSigner
from tests.fixtures.in_memory_uow import FakeClock, InMemoryUnitOfWork


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def memory_uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def signer():
    return JoseTokenSigner(secret="unit-test-secret", issuer="autobe")


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return BcryptSecretHasher(rounds=4)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, 0))
