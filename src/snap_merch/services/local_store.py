"""Local key-value storage with a hard capacity ceiling."""

from dataclasses import dataclass
from typing import Protocol

DEFAULT_CAPACITY_BYTES = 5_000_000


class StorageCapacityError(OSError):
    """Raised when a write would exceed the store's capacity."""


class LocalStore(Protocol):
    """Durable string storage keyed by name."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value, raising StorageCapacityError when full."""

    def remove_item(self, key: str) -> None:
        """Delete a stored value if present."""


def item_size(key: str, value: str) -> int:
    """Return the number of bytes an entry occupies."""
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


@dataclass
class InMemoryLocalStore(LocalStore):
    """In-memory store that enforces the same capacity as the durable one."""

    capacity_bytes: int
    _items: dict[str, str]

    def __init__(self, capacity_bytes: int = DEFAULT_CAPACITY_BYTES) -> None:
        self.capacity_bytes = capacity_bytes
        self._items = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        used = sum(item_size(k, v) for k, v in self._items.items() if k != key)
        if used + item_size(key, value) > self.capacity_bytes:
            raise StorageCapacityError(f"Storing {key!r} exceeds local capacity")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
