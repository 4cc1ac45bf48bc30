"""Activity store adapters.

The services only see AbstractActivityStore; Redis is the production backend.
"""

from activity_connector.adapters.store.base import AbstractActivityStore, StoreResult
from activity_connector.adapters.store.factory import close_store, create_store, get_store
from activity_connector.adapters.store.redis_store import RedisActivityStore

__all__ = [
    "AbstractActivityStore",
    "RedisActivityStore",
    "StoreResult",
    "close_store",
    "create_store",
    "get_store",
]
