"""Services package."""

from spendqueue.services.opener import (
    UrlOpener,
    UrlOpenerError,
)
from spendqueue.services.storage import (
    CorruptStateError,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StateStorageInterface,
    StorageError,
)

__all__ = [
    # Opener
    "UrlOpener",
    "UrlOpenerError",
    # Storage services
    "CorruptStateError",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "StateStorageInterface",
    "StorageError",
]
