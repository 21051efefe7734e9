"""Build matchers from configuration mappings.

Configuration is always handed in; nothing here reads files, environment or globals.

    backend:
      kind: minhash            # minhash | blockhash
      minhash:   {bands: 42, band_width: 3, threshold: 0.5, shingle_size: 50}
      blockhash: {block_size: 4, hash_length: 5, min_confidence: 50, exit_on_exact_match: false}
    normalization: {strip_preamble: true, strip_whitespace: true, unicode_nfc: false}
"""

from __future__ import annotations
from dataclasses import fields
from typing import Any, Dict, Optional, Type, TypeVar

from ..errors import MalformedInputError
from ..storage.base import StorageBackend, get_storage_backend
from ..utils.text import NormalizationFn, make_normalizer
from .base import LicenseMatcher
from .blockhash_store import BlockHashBackend
from .minhash_store import MinHashLSHBackend
from .schema import BlockHashParams, FingerprintType, MinHashParams

P = TypeVar("P")

_BOOL_STRINGS = {"true": True, "false": False}


def _parse_bool(cls: type, key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[value.strip().lower()]
    raise MalformedInputError(f"invalid value for {cls.__name__}.{key}: {value!r} (expected true or false)")


def _params_from_dict(cls: Type[P], raw: Optional[Dict[str, Any]]) -> P:
    raw = raw or {}
    if not isinstance(raw, dict):
        raise MalformedInputError(f"{cls.__name__} config must be a mapping, got {type(raw).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise MalformedInputError(f"unknown {cls.__name__} keys: {sorted(unknown)}")
    defaults = cls()
    kwargs: Dict[str, Any] = {}
    for key, value in raw.items():
        # Coerce to the default's type so YAML ints/strings land as the dataclass expects.
        caster = type(getattr(defaults, key))
        if caster is bool:
            kwargs[key] = _parse_bool(cls, key, value)
            continue
        try:
            kwargs[key] = caster(value)
        except (TypeError, ValueError) as exc:
            raise MalformedInputError(f"invalid value for {cls.__name__}.{key}: {value!r}") from exc
    return cls(**kwargs)


def make_normalization_fn(cfg: Optional[Dict[str, Any]]) -> NormalizationFn:
    cfg = cfg or {}
    return make_normalizer(
        strip_preamble_block=bool(cfg.get("strip_preamble", True)),
        strip_all_whitespace=bool(cfg.get("strip_whitespace", True)),
        unicode_nfc=bool(cfg.get("unicode_nfc", False)),
    )


def make_matcher(
    cfg: Dict[str, Any],
    *,
    storage: Optional[StorageBackend] = None,
    normalization_fn: Optional[NormalizationFn] = None,
) -> LicenseMatcher:
    """Create the configured backend. `normalization_fn` overrides the `normalization` section."""
    backend_cfg = cfg.get("backend") or {}
    kind = str(backend_cfg.get("kind", FingerprintType.MINHASH.value)).lower()
    if storage is None:
        storage = get_storage_backend(cfg.get("storage"))
    if normalization_fn is None:
        normalization_fn = make_normalization_fn(cfg.get("normalization"))

    if kind == FingerprintType.MINHASH.value:
        return MinHashLSHBackend(
            params=_params_from_dict(MinHashParams, backend_cfg.get("minhash")),
            normalization_fn=normalization_fn,
            storage=storage,
        )
    if kind == FingerprintType.BLOCKHASH.value:
        return BlockHashBackend(
            params=_params_from_dict(BlockHashParams, backend_cfg.get("blockhash")),
            normalization_fn=normalization_fn,
            storage=storage,
        )
    raise MalformedInputError(f"Unknown backend kind: {kind}. Expected 'minhash' or 'blockhash'")
