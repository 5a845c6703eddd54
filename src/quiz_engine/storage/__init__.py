"""
Persistence backends for quiz-engine

Session state goes through a small key-value interface so hosts can plug in
whatever storage they have.
Backends: in-memory, JSON file, Cloudflare Workers KV
"""

from .base import KeyValueStore, StorageError, StorageAuthenticationError
from .memory import MemoryStore
from .json_file import JSONFileStore
from .cloudflare import CloudflareKVStore

__all__ = [
    "KeyValueStore",
    "StorageError",
    "StorageAuthenticationError",
    "MemoryStore",
    "JSONFileStore",
    "CloudflareKVStore",
]


def get_store(name: str, **kwargs) -> KeyValueStore:
    """
    Factory function to get a store by name.

    Args:
        name: Backend name ('memory', 'file', 'cloudflare')
        **kwargs: Backend-specific options

    Returns:
        Configured KeyValueStore instance

    Raises:
        ValueError: If backend name is unknown
    """
    stores = {
        "memory": MemoryStore,
        "file": JSONFileStore,
        "cloudflare": CloudflareKVStore,
    }

    if name not in stores:
        raise ValueError(f"Unknown storage backend: {name}. Valid options: {list(stores.keys())}")

    return stores[name](**kwargs)
