"""
Repository layer - Data access over Redis.

Provides the store client used by the wallet service: namespaced key
construction plus hash get/save/search.
"""

from .hash_store import HashStore, StoreClient, tokenize

__all__ = ["HashStore", "StoreClient", "tokenize"]
