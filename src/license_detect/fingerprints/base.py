"""Base interface for license matchers.

A matcher owns a keyed registry of name -> fingerprint and answers "which known
license does this text resemble?" with a ranked list of Match objects.

Concrete matchers only decide how to fingerprint and how to score; registry upsert,
normalization and persistence are shared here so both backends behave identically.
Queries are read-only. Mutation (add/remove/load/clear) expects a single writer.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import pyarrow as pa

from ..errors import MalformedInputError, NormalizationMismatchError
from ..storage.base import LocalStorageBackend, StorageBackend
from ..utils.text import NormalizationFn, normalize_license_text
from .codec import DecodedStore, decode_json, decode_parquet, encode_json, encode_parquet, is_parquet
from .metrics import MatchMetrics
from .schema import LicenseEntry, Match, StoreFormat

logger = logging.getLogger(__name__)


class LicenseMatcher(ABC):
    """Unified matching contract. One subclass per similarity backend."""

    def __init__(
        self,
        normalization_fn: Optional[NormalizationFn] = None,
        storage: Optional[StorageBackend] = None,
    ):
        self._normalization_fn: NormalizationFn = normalization_fn or normalize_license_text
        self.storage = storage or LocalStorageBackend()
        self._entries: Dict[str, Any] = {}
        self.metrics = MatchMetrics()

    # -- backend hooks -----------------------------------------------------

    @property
    @abstractmethod
    def fingerprint_type(self) -> str:
        """blockhash | minhash."""

    @abstractmethod
    def params_dict(self) -> Dict[str, Any]:
        """Parameters persisted alongside the entries."""

    @abstractmethod
    def _fingerprint(self, normalized_text: str) -> Any:
        """Fingerprint already-normalized text."""

    @abstractmethod
    def match_by_hash(self, fingerprint: Any) -> List[Match]:
        """Rank registry entries against a fingerprint, best first."""

    @abstractmethod
    def _encode_value(self, fingerprint: Any) -> Any:
        """Fingerprint -> JSON/Parquet friendly value."""

    @abstractmethod
    def _decode_value(self, value: Any) -> Any:
        """Inverse of _encode_value. Raises MalformedInputError."""

    @abstractmethod
    def _parquet_value_type(self) -> pa.DataType:
        ...

    def _coerce_fingerprint(self, fingerprint: Any) -> Any:
        """Validate an incoming fingerprint and convert it to the stored form."""
        return fingerprint

    def _on_insert(self, name: str, fingerprint: Any) -> None:
        pass

    def _on_remove(self, name: str) -> None:
        pass

    # -- text entry points -------------------------------------------------

    def normalize(self, text: str) -> str:
        return self._normalization_fn(text)

    def hash_from_inline_string(self, text: str) -> Any:
        """Fingerprint raw text without registering it."""
        return self._fingerprint(self.normalize(text))

    def match_by_plain_text(self, text: str) -> List[Match]:
        return self.match_by_hash(self.hash_from_inline_string(text))

    # -- registry ----------------------------------------------------------

    def add_plain(self, name: str, text: str) -> None:
        """Fingerprint `text` and store it under `name`, replacing any existing entry."""
        self.add_hash(name, self.hash_from_inline_string(text))

    def add_hash(self, name: str, fingerprint: Any) -> None:
        fingerprint = self._coerce_fingerprint(fingerprint)
        if name in self._entries:
            self.remove(name)
        self._on_insert(name, fingerprint)
        self._entries[name] = fingerprint

    def remove(self, name: str) -> None:
        """Delete `name`. Absent names are a no-op."""
        if name not in self._entries:
            return
        self._on_remove(name)
        del self._entries[name]

    def clear(self) -> None:
        for name in list(self._entries):
            self.remove(name)

    def get_license_list(self) -> List[str]:
        return list(self._entries)

    def get_fingerprint(self, name: str) -> Optional[Any]:
        return self._entries.get(name)

    def entries(self) -> List[LicenseEntry]:
        return [LicenseEntry(name, fp) for name, fp in self._entries.items()]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def set_normalization_fn(self, func: Callable[[str], str]) -> None:
        """Swap the normalization strategy. Only allowed while the registry is empty."""
        if self._entries:
            raise NormalizationMismatchError(
                f"registry holds {len(self._entries)} entries fingerprinted with the previous "
                "normalization; clear() it before swapping strategies"
            )
        self._normalization_fn = func

    # -- persistence -------------------------------------------------------

    def dumps(self, fmt: StoreFormat = StoreFormat.JSON) -> bytes:
        records = [(name, self._encode_value(fp)) for name, fp in self._entries.items()]
        if StoreFormat(fmt) is StoreFormat.PARQUET:
            return encode_parquet(
                self.fingerprint_type, self.params_dict(), records, self._parquet_value_type()
            )
        return encode_json(self.fingerprint_type, self.params_dict(), records)

    def save_to_file(self, file_path: str, fmt: Optional[StoreFormat] = None) -> None:
        fmt = StoreFormat(fmt) if fmt else StoreFormat.from_path(file_path)
        self.storage.write_file(file_path, self.dumps(fmt))
        logger.info("saved %d %s entries to %s (%s)", len(self), self.fingerprint_type, file_path, fmt.value)

    def load_from_file(self, file_path: str) -> int:
        """Merge a persisted store into the registry. Returns the number of entries merged.

        An absent or corrupt store merges nothing; an unreadable one raises StoreIOError.
        """
        if not self.storage.exists(file_path):
            logger.warning("license store %s does not exist; nothing loaded", file_path)
            return 0
        data = self.storage.read_file(file_path)
        n = self._load_bytes(data, source=file_path)
        if n:
            logger.info("loaded %d %s entries from %s", n, self.fingerprint_type, file_path)
        return n

    def load_from_memory(self, data: bytes) -> int:
        """Merge an encoded store held in memory; Parquet or JSON is sniffed from the bytes."""
        return self._load_bytes(data, source="<memory>")

    def load_from_inline_string(self, json_text: str) -> int:
        return self._load(lambda: decode_json(json_text), source="<inline>")

    def _load_bytes(self, data: bytes, source: str) -> int:
        if is_parquet(data):
            return self._load(lambda: decode_parquet(data), source=source)
        return self._load(lambda: decode_json(data), source=source)

    def _load(self, decode: Callable[[], DecodedStore], source: str) -> int:
        try:
            decoded = decode()
            fingerprints = self._decode_records(decoded)
        except MalformedInputError as exc:
            logger.warning("license store %s could not be decoded (%s); nothing loaded", source, exc)
            return 0
        for name, fp in fingerprints:
            self.add_hash(name, fp)
        return len({name for name, _ in fingerprints})

    def _decode_records(self, decoded: DecodedStore) -> List[tuple]:
        if decoded.fingerprint_type is not None and decoded.fingerprint_type != self.fingerprint_type:
            raise MalformedInputError(
                f"store holds {decoded.fingerprint_type} fingerprints, "
                f"this matcher uses {self.fingerprint_type}"
            )
        return [(name, self._decode_value(value)) for name, value in decoded.records]
