"""MinHash + banded LSH license matcher (datasketch).

Text is cut into overlapping character shingles, reduced to a MinHash signature and
bucketed by band in a MinHashLSH index. LSH only nominates candidates; ranking uses the
signature-level similarity (fraction of equal components), scaled to a percentage.

Signatures are exposed and persisted as uint32 arrays of length bands * band_width.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pyarrow as pa
from datasketch import MinHash, MinHashLSH

from ..errors import MalformedInputError
from ..storage.base import StorageBackend
from ..utils.text import NormalizationFn
from .base import LicenseMatcher
from .codec import DecodedStore
from .schema import FingerprintType, Match, MinHashParams

logger = logging.getLogger(__name__)

_UINT32_LIMIT = 1 << 32
# Params that change signature values; a store built with other values is incompatible.
_SIGNATURE_PARAMS = ("bands", "band_width", "shingle_size", "seed")


def shingle_text(text: str, size: int) -> List[str]:
    """Overlapping character shingles. Text shorter than `size` is one shingle."""
    if not text:
        return []
    if len(text) <= size:
        return [text]
    return [text[i : i + size] for i in range(len(text) - size + 1)]


class MinHashLSHBackend(LicenseMatcher):
    """Registry backed by a MinHashLSH index. Upserts keep the index and registry in step."""

    def __init__(
        self,
        params: Optional[MinHashParams] = None,
        normalization_fn: Optional[NormalizationFn] = None,
        storage: Optional[StorageBackend] = None,
    ):
        super().__init__(normalization_fn=normalization_fn, storage=storage)
        self.params = params or MinHashParams()
        if not 0.0 <= self.params.threshold <= 1.0:
            raise MalformedInputError(f"threshold must be within [0, 1], got {self.params.threshold}")
        if self.params.bands <= 0 or self.params.band_width <= 0 or self.params.shingle_size <= 0:
            raise MalformedInputError(f"bands, band_width and shingle_size must be positive: {self.params}")
        self.num_perm = self.params.num_perm
        # Permutations depend only on (num_perm, seed); generate them once.
        self._permutations = MinHash(num_perm=self.num_perm, seed=self.params.seed).permutations
        self.lsh = MinHashLSH(
            threshold=self.params.threshold,
            num_perm=self.num_perm,
            params=(self.params.bands, self.params.band_width),
        )
        self._minhashes: Dict[str, MinHash] = {}
        self._order: Dict[str, int] = {}
        self._next_order = 0

    @property
    def fingerprint_type(self) -> str:
        return FingerprintType.MINHASH.value

    def params_dict(self) -> Dict[str, Any]:
        return self.params.to_dict()

    def _new_minhash(self, hashvalues: Optional[np.ndarray] = None) -> MinHash:
        return MinHash(
            num_perm=self.num_perm,
            seed=self.params.seed,
            hashvalues=hashvalues,
            permutations=self._permutations,
        )

    def _fingerprint(self, normalized_text: str) -> np.ndarray:
        mh = self._new_minhash()
        for shingle in shingle_text(normalized_text, self.params.shingle_size):
            mh.update(shingle.encode("utf-8", errors="ignore"))
        return mh.hashvalues.astype(np.uint32)

    def _coerce_fingerprint(self, fingerprint: Any) -> np.ndarray:
        if isinstance(fingerprint, MinHash):
            fingerprint = fingerprint.hashvalues
        if isinstance(fingerprint, np.ndarray):
            values = fingerprint.tolist()
        elif isinstance(fingerprint, (list, tuple)):
            values = list(fingerprint)
        else:
            raise MalformedInputError(
                f"expected a MinHash signature array, got {type(fingerprint).__name__}"
            )
        if len(values) != self.num_perm:
            raise MalformedInputError(
                f"signature has {len(values)} components, expected {self.num_perm}"
            )
        for v in values:
            if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v < _UINT32_LIMIT:
                raise MalformedInputError(f"signature component is not a uint32: {v!r}")
        return np.array(values, dtype=np.uint32)

    def _on_insert(self, name: str, fingerprint: np.ndarray) -> None:
        mh = self._new_minhash(fingerprint)
        self.lsh.insert(name, mh)
        self._minhashes[name] = mh
        self._order[name] = self._next_order
        self._next_order += 1

    def _on_remove(self, name: str) -> None:
        self.lsh.remove(name)
        del self._minhashes[name]
        del self._order[name]

    def match_by_hash(self, fingerprint: Any) -> List[Match]:
        query = self._new_minhash(self._coerce_fingerprint(fingerprint))
        candidates = sorted(self.lsh.query(query), key=self._order.__getitem__)

        matches: List[Match] = []
        for name in candidates:
            self.metrics.candidates_scored += 1
            similarity = float(query.jaccard(self._minhashes[name]))
            if similarity < self.params.threshold:
                self.metrics.below_threshold += 1
                continue
            if similarity == 1.0:
                self.metrics.exact_matches += 1
            matches.append(Match(name=name, confidence=similarity * 100.0))

        matches.sort(key=lambda m: m.confidence, reverse=True)
        self.metrics.record_query(len(matches))
        return matches

    def _encode_value(self, fingerprint: np.ndarray) -> List[int]:
        return [int(v) for v in fingerprint]

    def _decode_value(self, value: Any) -> np.ndarray:
        return self._coerce_fingerprint(value)

    def _parquet_value_type(self) -> pa.DataType:
        return pa.list_(pa.uint32())

    def _decode_records(self, decoded: DecodedStore) -> List[tuple]:
        for key in _SIGNATURE_PARAMS:
            if key in decoded.params and decoded.params[key] != getattr(self.params, key):
                raise MalformedInputError(
                    f"store was built with {key}={decoded.params[key]!r}, "
                    f"this matcher uses {getattr(self.params, key)!r}"
                )
        return super()._decode_records(decoded)
