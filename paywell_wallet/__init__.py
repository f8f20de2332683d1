"""
paywell wallet store.

Save, get and search wallets and receipts kept in Redis, keyed by
E.164 phone numbers.
"""

from .config import Settings, settings
from .domain.exceptions import (
    InvalidPhoneNumberException,
    ValidationException,
    WalletServiceException,
)
from .repositories.hash_store import StoreClient
from .services.wallet_service import WalletService
from .validators import to_e164

__version__ = "0.1.0"

__all__ = [
    "InvalidPhoneNumberException",
    "Settings",
    "StoreClient",
    "ValidationException",
    "WalletService",
    "WalletServiceException",
    "settings",
    "to_e164",
]
