"""Configuration loader.

Detection configs are YAML files: backend tunables, normalization, store and corpus
locations, pipeline segments and adjustments. Keeping them in YAML lets a reviewer
diff the exact settings a store was built with.
"""

from __future__ import annotations
from typing import Any, Dict

import yaml

from ..errors import MalformedInputError, StoreIOError


def load_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise StoreIOError(f"cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MalformedInputError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError(f"config {path} must be a mapping, got {type(data).__name__}")
    return data
