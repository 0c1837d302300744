"""Abstract key/value store interface."""

from abc import ABC, abstractmethod
from typing import Optional


class Store(ABC):
    """Abstract text key/value store for givingbook.

    Values are opaque strings (JSON documents written by the mappers).
    Every ``set`` replaces the whole value of one key.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize store schema (create tables)."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored at key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value at key, overwriting any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key. Returns True if it existed."""
        pass

    @abstractmethod
    def enumerate_keys(self, prefix: Optional[str] = None) -> list[str]:
        """List stored keys, optionally only those starting with prefix."""
        pass
