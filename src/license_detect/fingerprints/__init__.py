"""License fingerprint matchers: block hash and MinHash/LSH behind one contract."""

from .schema import (
    BlockHash,
    BlockHashParams,
    FingerprintType,
    LicenseEntry,
    Match,
    MinHashParams,
    StoreFormat,
)
from .base import LicenseMatcher
from .blockhash_store import BlockHashBackend
from .minhash_store import MinHashLSHBackend, shingle_text
from .manager import make_matcher, make_normalization_fn
from .metrics import MatchMetrics

__all__ = [
    "BlockHash",
    "BlockHashParams",
    "FingerprintType",
    "LicenseEntry",
    "Match",
    "MinHashParams",
    "StoreFormat",
    "LicenseMatcher",
    "BlockHashBackend",
    "MinHashLSHBackend",
    "shingle_text",
    "make_matcher",
    "make_normalization_fn",
    "MatchMetrics",
]
