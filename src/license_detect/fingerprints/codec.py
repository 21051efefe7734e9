"""Store encodings.

Two encodings of the same record list `[(name, value), ...]`:

- JSON: human-readable, for interchange and debugging.
    {"fingerprint_type": ..., "params": {...}, "licenses": [{"name": ..., "hash": ...}]}
  A bare list of {"name", "hash"} records is accepted on decode.
- Parquet (pyarrow): compact, for fast reload. Columns `name`, `hash`; fingerprint type
  and params live in the Arrow schema metadata.

Values are already backend-encoded (token strings or integer lists); this module only
frames them. Every decode failure raises MalformedInputError.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pyarrow as pa
import pyarrow.parquet as pq

from ..errors import MalformedInputError

PARQUET_MAGIC = b"PAR1"

Record = Tuple[str, Any]


@dataclass
class DecodedStore:
    fingerprint_type: Optional[str]
    params: Dict[str, Any] = field(default_factory=dict)
    records: List[Record] = field(default_factory=list)


def is_parquet(data: bytes) -> bool:
    return data[:4] == PARQUET_MAGIC


def encode_json(fingerprint_type: str, params: Dict[str, Any], records: Sequence[Record]) -> bytes:
    payload = {
        "fingerprint_type": fingerprint_type,
        "params": params,
        "licenses": [{"name": name, "hash": value} for name, value in records],
    }
    return json.dumps(payload, indent=2).encode("utf-8")


def _records_from_list(items: Any) -> List[Record]:
    if not isinstance(items, list):
        raise MalformedInputError("'licenses' must be a list")
    records: List[Record] = []
    for item in items:
        if not isinstance(item, dict) or "name" not in item or "hash" not in item:
            raise MalformedInputError(f"license record must have 'name' and 'hash': {item!r}")
        if not isinstance(item["name"], str):
            raise MalformedInputError(f"license name must be a string: {item['name']!r}")
        records.append((item["name"], item["hash"]))
    return records


def decode_json(data: Union[bytes, str]) -> DecodedStore:
    try:
        obj = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(f"store is not valid JSON: {exc}") from exc

    # Historical layout: bare list of records, no header.
    if isinstance(obj, list):
        return DecodedStore(fingerprint_type=None, records=_records_from_list(obj))
    if not isinstance(obj, dict):
        raise MalformedInputError("store root must be an object or a list")

    params = obj.get("params") or {}
    if not isinstance(params, dict):
        raise MalformedInputError("'params' must be an object")
    return DecodedStore(
        fingerprint_type=obj.get("fingerprint_type"),
        params=params,
        records=_records_from_list(obj.get("licenses", [])),
    )


def encode_parquet(
    fingerprint_type: str,
    params: Dict[str, Any],
    records: Sequence[Record],
    value_type: pa.DataType,
) -> bytes:
    schema = pa.schema(
        [("name", pa.string()), ("hash", value_type)],
        metadata={
            b"fingerprint_type": fingerprint_type.encode("utf-8"),
            b"params": json.dumps(params, sort_keys=True).encode("utf-8"),
        },
    )
    table = pa.Table.from_pylist(
        [{"name": name, "hash": value} for name, value in records],
        schema=schema,
    )
    sink = pa.BufferOutputStream()
    pq.write_table(table, sink)
    return sink.getvalue().to_pybytes()


def decode_parquet(data: bytes) -> DecodedStore:
    try:
        table = pq.read_table(pa.BufferReader(data))
    except (pa.ArrowException, OSError, ValueError) as exc:
        raise MalformedInputError(f"store is not a valid parquet file: {exc}") from exc

    if "name" not in table.column_names or "hash" not in table.column_names:
        raise MalformedInputError("parquet store must have 'name' and 'hash' columns")

    metadata = table.schema.metadata or {}
    fingerprint_type = metadata.get(b"fingerprint_type")
    try:
        params = json.loads(metadata.get(b"params", b"{}"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(f"parquet store has invalid params metadata: {exc}") from exc

    names = table.column("name").to_pylist()
    values = table.column("hash").to_pylist()
    if any(n is None for n in names):
        raise MalformedInputError("parquet store contains a null license name")
    return DecodedStore(
        fingerprint_type=fingerprint_type.decode("utf-8") if fingerprint_type else None,
        params=params if isinstance(params, dict) else {},
        records=list(zip(names, values)),
    )
