"""
Storage Services Package

Provides the abstract interface and the JSON file implementation
of state storage.
"""

from spendqueue.services.storage.interface import (
    CorruptStateError,
    StateStorageInterface,
    StorageError,
)
from spendqueue.services.storage.json_file import (
    InMemoryStateStorage,
    JsonFileStateStorage,
)
from spendqueue.services.storage.legacy import (
    LEGACY_SCHEMAS,
    SingleQueueState,
    decode_legacy,
)

__all__ = [
    # Interfaces
    "StateStorageInterface",
    # Exceptions
    "CorruptStateError",
    "StorageError",
    # Implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    # Legacy schemas
    "LEGACY_SCHEMAS",
    "SingleQueueState",
    "decode_legacy",
]
