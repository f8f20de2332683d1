"""
Wallet and receipt service.

Facade over the store client: normalizes phone numbers, builds storage
keys and forwards get/save/search calls, turning stored timestamps back
into datetimes on the way out.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..config import Settings
from ..config import settings as default_settings
from ..core.logging_config import get_logger
from ..core.redis_manager import RedisConnectionManager
from ..domain.records import DATE_FIELDS, Record, deserialize_dates, is_blank
from ..repositories.hash_store import StoreClient
from ..validators import PhoneNumberOptions, to_e164

logger = get_logger(__name__)

# Fields kept out of the receipt search index
RECEIPT_INDEX_IGNORE = ["_id", "payload"]


class WalletService:
    """
    Data access for wallets and receipts.

    The store client is either injected or built on first use from the
    settings through a :class:`RedisConnectionManager`.
    """

    def __init__(
        self,
        store: Optional[StoreClient] = None,
        settings: Optional[Settings] = None,
        redis_manager: Optional[RedisConnectionManager] = None,
    ):
        """
        Initialize wallet service.

        Args:
            store: Store client; built lazily when omitted
            settings: Configuration (defaults to environment settings)
            redis_manager: Redis connection manager used to build the store
        """
        self.settings = settings or default_settings
        self.redis_manager = redis_manager
        self._store = store

    def init(self) -> StoreClient:
        """Build the store client if it does not exist yet."""
        if self._store is None:
            if self.redis_manager is None:
                self.redis_manager = RedisConnectionManager(self.settings)
            self._store = StoreClient(
                self.redis_manager.get_client(), prefix=self.settings.PREFIX
            )
            logger.info(
                "Wallet store initialized",
                prefix=self.settings.PREFIX,
                collection=self.settings.COLLECTION,
            )
        return self._store

    @property
    def store(self) -> StoreClient:
        return self.init()

    def to_e164(
        self,
        phone_number: Any,
        options: Union[PhoneNumberOptions, Mapping[str, Any], str, None] = None,
    ) -> str:
        """Convert a phone number to E.164 using the configured country."""
        return to_e164(phone_number, options, default_country=self.settings.COUNTRY)

    def key(self, phone_number: Any) -> str:
        """
        Build the wallet storage key for a phone number.

        Raises:
            InvalidPhoneNumberException: If the phone number is invalid
        """
        number = self.to_e164(phone_number).lstrip("+")
        return self.store.key(self.settings.COLLECTION, number)

    async def get(
        self, keys: Union[str, Sequence[str]]
    ) -> Union[Optional[Record], List[Optional[Record]]]:
        """
        Get wallet(s) or receipt(s) by storage key.

        Args:
            keys: A key or a list of keys

        Returns:
            A single record for a single key, a list of the same length for
            a list; missing records are None
        """
        records = await self.store.hash.get(keys)
        if isinstance(keys, str):
            return deserialize_dates(records, DATE_FIELDS)
        return [deserialize_dates(record, DATE_FIELDS) for record in records]

    async def get_wallet(
        self, phone_numbers: Union[Any, Sequence[Any]]
    ) -> Union[Optional[Record], List[Optional[Record]]]:
        """Get wallet(s) by phone number(s)."""
        if isinstance(phone_numbers, (list, tuple)):
            return await self.get([self.key(number) for number in phone_numbers])
        return await self.get(self.key(phone_numbers))

    async def save(self, receipt: Optional[Mapping[str, Any]]) -> Record:
        """
        Persist a receipt.

        A UUID is generated when ``uuid`` is missing, None or empty, and a
        missing ``receivedAt`` defaults to the current time. Other falsy
        values such as 0 are kept.

        Args:
            receipt: Receipt fields; ``payload`` is stored but not indexed

        Returns:
            The stored receipt with its dates parsed
        """
        receipt = dict(receipt or {})
        if is_blank(receipt.get("uuid")):
            receipt["uuid"] = str(uuid.uuid1())
        if is_blank(receipt.get("receivedAt")):
            receipt["receivedAt"] = datetime.now(timezone.utc)

        store = self.store
        collection = self.settings.COLLECTION
        receipt["_id"] = store.key([collection, receipt["uuid"]])

        saved = await store.hash.save(
            receipt,
            collection=collection,
            index=True,
            ignore=RECEIPT_INDEX_IGNORE,
        )

        logger.info("Receipt saved", key=saved["_id"])
        return deserialize_dates(saved, DATE_FIELDS)

    create = save

    async def search(self, query: str) -> List[Record]:
        """Free text search of receipts; results are returned as stored."""
        return await self.store.hash.search(query, collection=self.settings.COLLECTION)

    async def get_pin(self, phone_number: Any) -> None:
        raise NotImplementedError("wallet pins are not supported yet")

    async def generate_paycode(self, phone_number: Any) -> None:
        raise NotImplementedError("paycodes are not supported yet")
