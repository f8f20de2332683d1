"""
Test configuration and fixtures
"""

import copy
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables BEFORE importing package modules
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"

from paywell_wallet.config import Settings  # noqa: E402
from paywell_wallet.repositories.hash_store import StoreClient  # noqa: E402
from paywell_wallet.services.wallet_service import WalletService  # noqa: E402


@pytest.fixture
def test_settings():
    """Settings with the package defaults."""
    return Settings(
        PREFIX="paywell",
        COLLECTION="wallets",
        QUEUE="wallets",
        COUNTRY="TZ",
        REDIS_URL="redis://localhost:6379/15",
    )


class FakePipeline:
    """
    Pipeline over the mock Redis client.

    Commands are queued and replayed through the client's mocked methods on
    ``execute``. A transactional pipeline restores the backing data when a
    command fails, like a MULTI/EXEC that never reached EXEC.
    """

    def __init__(self, redis_mock, transaction=True):
        self.redis_mock = redis_mock
        self.transaction = transaction
        self.commands = []

    def __getattr__(self, name):
        def queue(*args, **kwargs):
            self.commands.append((name, args, kwargs))
            return self

        return queue

    async def execute(self):
        hashes = self.redis_mock.hashes
        sets = self.redis_mock.sets
        snapshot = copy.deepcopy((hashes, sets))
        commands, self.commands = self.commands, []

        results = []
        try:
            for name, args, kwargs in commands:
                results.append(await getattr(self.redis_mock, name)(*args, **kwargs))
        except Exception:
            if self.transaction:
                hashes.clear()
                hashes.update(snapshot[0])
                sets.clear()
                sets.update(snapshot[1])
            raise
        return results


@pytest.fixture
def mock_redis():
    """
    Create mock Redis client backed by in-memory hashes and sets.

    The backing dicts are exposed as ``hashes`` and ``sets`` for assertions.
    ``pipeline()`` returns a :class:`FakePipeline`.
    """
    hashes = {}
    sets = {}
    redis_mock = AsyncMock()

    async def hset(key, mapping=None):
        hashes.setdefault(key, {}).update(mapping or {})
        return len(mapping or {})

    async def hget(key, field):
        return hashes.get(key, {}).get(field)

    async def hgetall(key):
        return dict(hashes.get(key, {}))

    async def delete(*keys):
        removed = 0
        for key in keys:
            removed += hashes.pop(key, None) is not None
            removed += sets.pop(key, None) is not None
        return removed

    async def sadd(key, *members):
        members_set = sets.setdefault(key, set())
        before = len(members_set)
        members_set.update(members)
        return len(members_set) - before

    async def srem(key, *members):
        members_set = sets.get(key, set())
        before = len(members_set)
        members_set.difference_update(members)
        if not members_set:
            sets.pop(key, None)
        return before - len(members_set)

    async def smembers(key):
        return set(sets.get(key, set()))

    async def sinter(keys, *args):
        all_keys = list(keys) + list(args)
        result = set(sets.get(all_keys[0], set()))
        for key in all_keys[1:]:
            result &= sets.get(key, set())
        return result

    redis_mock.hset.side_effect = hset
    redis_mock.hget.side_effect = hget
    redis_mock.hgetall.side_effect = hgetall
    redis_mock.delete.side_effect = delete
    redis_mock.sadd.side_effect = sadd
    redis_mock.srem.side_effect = srem
    redis_mock.smembers.side_effect = smembers
    redis_mock.sinter.side_effect = sinter
    redis_mock.pipeline = MagicMock(
        side_effect=lambda transaction=True: FakePipeline(redis_mock, transaction)
    )
    redis_mock.hashes = hashes
    redis_mock.sets = sets
    return redis_mock


@pytest.fixture
def store(mock_redis):
    """Store client over the mock Redis client."""
    return StoreClient(mock_redis, prefix="paywell")


@pytest.fixture
def wallet_service(store, test_settings):
    """Wallet service with an injected store client."""
    return WalletService(store=store, settings=test_settings)


@pytest.fixture
def sample_receipt():
    """Sample receipt as handed over by a payment provider."""
    return {
        "provider": "mpesa",
        "phoneNumber": "+255714123456",
        "amount": 15000,
        "currency": "TZS",
        "reference": "QWE123RTY",
        "payload": {"TransID": "QWE123RTY", "Note": "confidential"},
    }
