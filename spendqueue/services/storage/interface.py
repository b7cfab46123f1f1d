"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for state storage.
This allows us to:
1. Use an in-memory store in tests
2. Add file locking later without touching business logic
3. Keep the load → mutate → store discipline in one place

The interface is intentionally tiny: the whole State is read and
written at once, there are no partial updates.
"""

from abc import ABC, abstractmethod

from spendqueue.models.queue import State


class StateStorageInterface(ABC):
    """
    Abstract interface for state persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> State:
        """
        Load the entire state.

        Returns:
            The stored State, or the default State if nothing is stored yet

        Raises:
            StorageError: If the store exists but can't be read
            CorruptStateError: If the stored document can't be decoded
        """
        pass

    @abstractmethod
    def save(self, state: State) -> None:
        """
        Replace the stored state with `state`.

        Raises:
            StorageError: If the write fails
        """
        pass

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location, used in diagnostics."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStateError(StorageError):
    """
    The stored document matches neither the current nor any legacy schema.

    No recovery path: the file has to be fixed by hand.
    """
    pass
