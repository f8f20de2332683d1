"""
Redis hash store.

Persists flat records as Redis hashes, one hash per record, and keeps a
word index in Redis sets for free text search. Each indexed record also
gets a set of the search sets it belongs to, so a re-save can drop stale
entries. Field values are stored JSON-encoded so numbers, booleans and
nested payloads survive the round trip. Errors raised by the Redis client
are not caught here.
"""

import json
import re
import uuid
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence, Union

import redis.asyncio as redis

from ..core.logging_config import get_logger
from ..domain.records import Record, is_blank

logger = get_logger(__name__)

KEY_SEPARATOR = ":"
SEARCH_NAMESPACE = "search"
TOKENS_NAMESPACE = "tokens"
DEFAULT_COLLECTION = "hash"
TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)


def tokenize(value: Any) -> List[str]:
    """
    Split a value into lower-cased search tokens.

    Nested dicts and lists are walked; datetimes and None yield nothing.
    """
    if value is None or isinstance(value, (datetime, date)):
        return []
    if isinstance(value, dict):
        return [token for item in value.values() for token in tokenize(item)]
    if isinstance(value, (list, tuple, set)):
        return [token for item in value for token in tokenize(item)]
    return TOKEN_PATTERN.findall(str(value).lower())


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _serialize_value(value: Any) -> str:
    return json.dumps(value, default=_json_default)


def _deserialize_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


class HashStore:
    """
    Hash operations of a :class:`StoreClient`.

    Accessed as ``client.hash``.
    """

    def __init__(self, client: "StoreClient"):
        self.client = client

    @property
    def redis(self) -> redis.Redis:
        return self.client.redis

    async def get(
        self, keys: Union[str, Sequence[str]]
    ) -> Union[Optional[Record], List[Optional[Record]]]:
        """
        Fetch one or many records by key.

        Args:
            keys: A single key or a list of keys

        Returns:
            The record (or None) for a single key; for a list, a list of the
            same length with None in place of missing records
        """
        if isinstance(keys, str):
            return self._decode(keys, await self.redis.hgetall(keys))

        keys = list(keys)
        if not keys:
            return []

        pipe = self.redis.pipeline(transaction=False)
        for key in keys:
            pipe.hgetall(key)
        results = await pipe.execute()

        return [self._decode(key, data) for key, data in zip(keys, results)]

    def _decode(self, key: str, data: Optional[dict]) -> Optional[Record]:
        if not data:
            logger.debug("Hash MISS", key=key)
            return None
        return {field: _deserialize_value(raw) for field, raw in data.items()}

    async def save(
        self,
        record: Record,
        collection: str = DEFAULT_COLLECTION,
        index: bool = False,
        ignore: Iterable[str] = (),
    ) -> Record:
        """
        Persist a record as a Redis hash.

        Saving replaces whatever was stored under the same ``_id``: fields
        missing from ``record`` are dropped and index entries for words that
        no longer appear are removed. The hash and its index entries are
        written in one MULTI/EXEC transaction.

        Args:
            record: Record to save; ``_id`` is generated when absent
            collection: Collection the record belongs to
            index: Whether to add the record to the search index
            ignore: Fields left out of the search index

        Returns:
            The record as stored
        """
        record = dict(record)
        if is_blank(record.get("_id")):
            record["_id"] = self.client.key(collection, str(uuid.uuid4()))
        key = record["_id"]

        now = datetime.now(timezone.utc)
        if is_blank(record.get("createdAt")):
            previous = await self.redis.hget(key, "createdAt")
            record["createdAt"] = _deserialize_value(previous) if previous else now
        record["updatedAt"] = now

        mapping = {field: _serialize_value(value) for field, value in record.items()}
        tokens_key = self.client.tokens_key(key)
        stale_index_keys = await self.redis.smembers(tokens_key)
        index_keys = self._index_keys(record, collection, set(ignore)) if index else []

        pipe = self.redis.pipeline(transaction=True)
        pipe.delete(key, tokens_key)
        pipe.hset(key, mapping=mapping)
        for index_key in sorted(set(stale_index_keys) - set(index_keys)):
            pipe.srem(index_key, key)
        for index_key in index_keys:
            pipe.sadd(index_key, key)
        if index_keys:
            pipe.sadd(tokens_key, *index_keys)
        await pipe.execute()

        logger.debug("Hash saved", key=key, collection=collection, indexed=index)
        return {field: _deserialize_value(raw) for field, raw in mapping.items()}

    def _index_keys(self, record: Record, collection: str, ignore: set) -> List[str]:
        tokens = set()
        for field, value in record.items():
            if field in ignore:
                continue
            tokens.update(tokenize(value))
        return [self.client.search_key(collection, token) for token in sorted(tokens)]

    async def search(self, q: str, collection: str = DEFAULT_COLLECTION) -> List[Record]:
        """
        Free text search within a collection.

        Every word of the query must match; results are ordered by key.

        Args:
            q: Search string
            collection: Collection to search

        Returns:
            Matching records
        """
        tokens = sorted(set(tokenize(q)))
        if not tokens:
            return []

        index_keys = [self.client.search_key(collection, token) for token in tokens]
        keys = await self.redis.sinter(index_keys)

        records = await self.get(sorted(keys))
        results = [record for record in records if record is not None]

        logger.debug("Hash search", collection=collection, tokens=len(tokens), hits=len(results))
        return results


class StoreClient:
    """
    Key-value store client over Redis.

    Builds namespaced keys and exposes hash operations as ``hash``.
    """

    def __init__(self, redis_client: redis.Redis, prefix: str = "paywell"):
        """
        Initialize store client.

        Args:
            redis_client: Async Redis client
            prefix: Namespace prepended to every key
        """
        self.redis = redis_client
        self.prefix = prefix
        self.hash = HashStore(self)

    def key(self, *parts: Any) -> str:
        """
        Build a namespaced key.

        Lists and tuples are flattened and empty parts dropped, so
        ``key("wallets", "1")`` and ``key(["wallets", "1"])`` both give
        ``paywell:wallets:1``.
        """
        flat = []
        for part in parts:
            if isinstance(part, (list, tuple)):
                flat.extend(part)
            else:
                flat.append(part)
        segments = [str(part) for part in flat if part is not None and str(part) != ""]
        return KEY_SEPARATOR.join([self.prefix, *segments])

    def search_key(self, collection: str, token: str) -> str:
        return self.key(SEARCH_NAMESPACE, collection, token)

    def tokens_key(self, key: str) -> str:
        """Key of the set listing the search sets a record is indexed under."""
        return self.key(TOKENS_NAMESPACE, key)
