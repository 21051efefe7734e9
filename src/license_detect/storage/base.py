from __future__ import annotations
import glob
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..errors import MalformedInputError, StoreIOError


class StorageBackend(ABC):
    """Byte-level storage for fingerprint stores and license corpora.

    Reads and writes are blocking and complete-or-fail; failures surface as StoreIOError.
    """

    @abstractmethod
    def join(self, *parts: str) -> str:
        raise NotImplementedError()

    @abstractmethod
    def exists(self, path: str) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def list_files(self, path: str, pattern: Optional[str] = None) -> List[str]:
        raise NotImplementedError()

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        raise NotImplementedError()

    @abstractmethod
    def write_file(self, path: str, data: bytes) -> None:
        raise NotImplementedError()


class LocalStorageBackend(StorageBackend):
    """Filesystem-backed storage backend."""

    def join(self, *parts: str) -> str:
        return os.path.join(*parts) if parts else ""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def list_files(self, path: str, pattern: Optional[str] = None) -> List[str]:
        if not path or not os.path.isdir(path):
            return []
        if pattern:
            candidates = glob.glob(os.path.join(path, pattern))
        else:
            candidates = [os.path.join(path, entry) for entry in os.listdir(path)]
        return sorted(p for p in candidates if os.path.isfile(p))

    def read_file(self, path: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as exc:
            raise StoreIOError(f"cannot read {path}: {exc}") from exc

    def write_file(self, path: str, data: bytes) -> None:
        try:
            dirpath = os.path.dirname(path)
            if dirpath:
                os.makedirs(dirpath, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as exc:
            raise StoreIOError(f"cannot write {path}: {exc}") from exc


def get_storage_backend(storage_config: Optional[Dict[str, Any]]) -> StorageBackend:
    """Create a storage backend from configuration."""
    if not storage_config:
        return LocalStorageBackend()
    storage_type = str(storage_config.get("type", "local")).lower()
    if storage_type == "local":
        return LocalStorageBackend()
    raise MalformedInputError(f"Unknown storage type: {storage_type}")
