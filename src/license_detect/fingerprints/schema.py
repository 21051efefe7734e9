"""Fingerprint schema and match result types.

Fingerprints are backend-specific: a BlockHash never meets a MinHash signature.
Params dataclasses are persisted next to the entries so a store can be checked
against the matcher that loads it.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from ..errors import MalformedInputError

_B36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class FingerprintType(str, Enum):
    BLOCKHASH = "blockhash"
    MINHASH = "minhash"


class StoreFormat(str, Enum):
    JSON = "json"
    PARQUET = "parquet"

    @classmethod
    def from_path(cls, path: str) -> StoreFormat:
        lowered = path.lower()
        if lowered.endswith(".parquet") or lowered.endswith(".pq"):
            return cls.PARQUET
        return cls.JSON


@dataclass(frozen=True)
class Match:
    """A ranked candidate. Confidence is a percentage in [0, 100]."""
    name: str
    confidence: float


@dataclass(frozen=True)
class LicenseEntry:
    name: str
    fingerprint: Any


@dataclass
class BlockHashParams:
    block_size: int = 4
    hash_length: int = 5
    min_confidence: float = 50.0  # percent
    exit_on_exact_match: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MinHashParams:
    bands: int = 42
    band_width: int = 3
    threshold: float = 0.5
    shingle_size: int = 50
    seed: int = 1

    @property
    def num_perm(self) -> int:
        return self.bands * self.band_width

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_B36_DIGITS[rem])
    return sign + "".join(reversed(digits))


@dataclass(frozen=True)
class BlockHash:
    """Ordered per-block hash values plus the parameters that produced them."""
    block_size: int
    hash_length: int
    blocks: Tuple[int, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.blocks)

    def comparable_with(self, other: BlockHash) -> bool:
        return self.block_size == other.block_size and self.hash_length == other.hash_length

    def to_token(self) -> str:
        """Compact form: `<block_size>:<hash_length>:<h1>:<h2>:...` with base-36 values."""
        head = f"{self.block_size}:{self.hash_length}"
        if not self.blocks:
            return head
        return head + ":" + ":".join(_to_base36(b) for b in self.blocks)

    @classmethod
    def from_token(cls, token: str) -> BlockHash:
        if not isinstance(token, str):
            raise MalformedInputError(f"block hash token must be a string, got {type(token).__name__}")
        parts = token.split(":")
        if len(parts) < 2:
            raise MalformedInputError(f"block hash token is missing its size header: {token!r}")
        try:
            block_size = int(parts[0])
            hash_length = int(parts[1])
            blocks = tuple(int(p, 36) for p in parts[2:])
        except ValueError as exc:
            raise MalformedInputError(f"invalid block hash token: {token!r}") from exc
        if block_size <= 0 or hash_length <= 0:
            raise MalformedInputError(f"block hash token has non-positive sizes: {token!r}")
        return cls(block_size=block_size, hash_length=hash_length, blocks=blocks)
