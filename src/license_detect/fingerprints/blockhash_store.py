"""Block-hash license matcher. Linear scan with a mismatch budget per comparison."""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Union

import pyarrow as pa

from ..errors import MalformedInputError
from ..storage.base import StorageBackend
from ..utils.hashing import compare_hashes, fuzzy_hash
from ..utils.text import NormalizationFn
from .base import LicenseMatcher
from .codec import DecodedStore
from .schema import BlockHash, BlockHashParams, FingerprintType, Match

logger = logging.getLogger(__name__)

# Params that change block values; a store built with other values never matches.
_SIGNATURE_PARAMS = ("block_size", "hash_length")


class BlockHashBackend(LicenseMatcher):
    """Registry of block-hash fingerprints. Query: positional compare against every entry."""

    def __init__(
        self,
        params: Optional[BlockHashParams] = None,
        normalization_fn: Optional[NormalizationFn] = None,
        storage: Optional[StorageBackend] = None,
    ):
        super().__init__(normalization_fn=normalization_fn, storage=storage)
        self.params = params or BlockHashParams()

    @property
    def fingerprint_type(self) -> str:
        return FingerprintType.BLOCKHASH.value

    def params_dict(self) -> Dict[str, Any]:
        return self.params.to_dict()

    @staticmethod
    def compute_block_hash(text: str, block_size: int = 4, hash_length: int = 5) -> BlockHash:
        blocks = fuzzy_hash(text.encode("utf-8"), block_size, hash_length)
        return BlockHash(block_size=block_size, hash_length=hash_length, blocks=tuple(blocks))

    @staticmethod
    def compare(a: BlockHash, b: BlockHash, min_confidence: float = 0.0) -> Optional[float]:
        """Similarity in percent, or None when the pair is definitively not a match.

        `min_confidence` is a percentage; fingerprints built with different block
        parameters never match.
        """
        if not a.comparable_with(b):
            return None
        return compare_hashes(a.blocks, b.blocks, min_confidence / 100.0)

    def _fingerprint(self, normalized_text: str) -> BlockHash:
        return self.compute_block_hash(normalized_text, self.params.block_size, self.params.hash_length)

    def match_by_hash(self, fingerprint: Union[BlockHash, str]) -> List[Match]:
        fingerprint = self._coerce_fingerprint(fingerprint)
        min_confidence = self.params.min_confidence
        matches: List[Match] = []
        for name, known in self._entries.items():
            self.metrics.candidates_scored += 1
            confidence = self.compare(fingerprint, known, min_confidence)
            if confidence is None:
                self.metrics.sentinel_rejections += 1
                continue
            if confidence < min_confidence:
                self.metrics.below_threshold += 1
                continue
            matches.append(Match(name=name, confidence=confidence))
            if confidence == 100.0:
                self.metrics.exact_matches += 1
                if self.params.exit_on_exact_match:
                    self.metrics.early_exits += 1
                    logger.debug("exact match on %s; scan stopped early", name)
                    break

        # list.sort is stable, so ties keep registry order
        matches.sort(key=lambda m: m.confidence, reverse=True)
        self.metrics.record_query(len(matches))
        return matches

    def _coerce_fingerprint(self, fingerprint: Any) -> BlockHash:
        if isinstance(fingerprint, BlockHash):
            return fingerprint
        if isinstance(fingerprint, str):
            return BlockHash.from_token(fingerprint)
        raise MalformedInputError(
            f"expected a BlockHash or its token, got {type(fingerprint).__name__}"
        )

    def _encode_value(self, fingerprint: BlockHash) -> str:
        return fingerprint.to_token()

    def _decode_value(self, value: Any) -> BlockHash:
        return BlockHash.from_token(value)

    def _parquet_value_type(self) -> pa.DataType:
        return pa.string()

    def _decode_records(self, decoded: DecodedStore) -> List[tuple]:
        for key in _SIGNATURE_PARAMS:
            if key in decoded.params and decoded.params[key] != getattr(self.params, key):
                raise MalformedInputError(
                    f"store was built with {key}={decoded.params[key]!r}, "
                    f"this matcher uses {getattr(self.params, key)!r}"
                )
        records = super()._decode_records(decoded)
        for name, fp in records:
            if (fp.block_size, fp.hash_length) != (self.params.block_size, self.params.hash_length):
                raise MalformedInputError(
                    f"entry {name!r} was hashed with block_size={fp.block_size}, "
                    f"hash_length={fp.hash_length}"
                )
        return records
