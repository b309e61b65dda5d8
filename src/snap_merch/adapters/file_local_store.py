"""File-backed local store with a capacity ceiling."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

from snap_merch.services.local_store import (
    DEFAULT_CAPACITY_BYTES,
    LocalStore,
    StorageCapacityError,
)


@dataclass
class FileLocalStore(LocalStore):
    """Stores each key as one JSON document in a directory."""

    directory: Path
    capacity_bytes: int = DEFAULT_CAPACITY_BYTES

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        used = sum(entry.stat().st_size for entry in self._entries() if entry != path)
        if used + len(value.encode("utf-8")) > self.capacity_bytes:
            raise StorageCapacityError(f"Storing {key!r} exceeds local capacity")
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def _entries(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return list(self.directory.glob("*.json"))

    def _path(self, key: str) -> Path:
        # Hashing keeps distinct keys in distinct files whatever their characters.
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"
