"""Block hashing utilities.

Context-free piecewise hashing in the ssdeep family: the input is cut into fixed-size
byte blocks and each block is reduced to a signed 32-bit rolling polynomial hash
(h = h * 31 + byte). Two fingerprints are compared position by position.

Only the first `hash_length` bytes of a block feed its hash, so `hash_length` bounds
the effective width of each block value.
"""

from __future__ import annotations
import math
from typing import List, Optional, Sequence

_INT32_SPAN = 1 << 32
_INT32_MAX = (1 << 31) - 1


def _to_int32(value: int) -> int:
    value &= _INT32_SPAN - 1
    return value - _INT32_SPAN if value > _INT32_MAX else value


def create_hash(block: bytes, hash_length: int) -> int:
    h = 0
    for byte in block[:hash_length]:
        h = _to_int32((h << 5) - h + byte)
    return h


def fuzzy_hash(data: bytes, block_size: int, hash_length: int) -> List[int]:
    """Return the ordered per-block hashes of `data`. The final block may be short."""
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")
    return [
        create_hash(data[i : i + block_size], hash_length)
        for i in range(0, len(data), block_size)
    ]


def calc_max_uncommon_blocks(min_confidence: float, n_blocks: int) -> int:
    """Mismatch budget: how many blocks may differ before `min_confidence` is unreachable."""
    return n_blocks - math.ceil(min_confidence * n_blocks)


def compare_hashes(
    hash1: Sequence[int],
    hash2: Sequence[int],
    min_confidence: float = 0.0,
) -> Optional[float]:
    """Positional similarity of two block-hash sequences as a 0-100 percentage.

    `min_confidence` is a fraction in [0, 1]. Returns None (no match) when the
    mismatch budget is exceeded or when no block is shared.

    The mismatch counter starts at the length difference; positions past the end of
    the shorter sequence are counted again during the walk.
    """
    len1, len2 = len(hash1), len(hash2)
    max_blocks = max(len1, len2)
    if max_blocks == 0:
        return 100.0

    if min_confidence > 0:
        max_uncommon = calc_max_uncommon_blocks(min_confidence, max_blocks)
    else:
        max_uncommon = max_blocks + max_blocks

    uncommon = abs(len1 - len2)
    if uncommon > max_uncommon:
        return None

    common = 0
    for i in range(max_blocks):
        if i < len1 and i < len2 and hash1[i] == hash2[i]:
            common += 1
        else:
            uncommon += 1
            if uncommon > max_uncommon:
                return None

    if common == 0:
        return None
    return common * 100.0 / max_blocks
