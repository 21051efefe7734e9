from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from license_detect.errors import StoreIOError
from license_detect.fingerprints import (
    BlockHashBackend,
    BlockHashParams,
    LicenseEntry,
    Match,
    MinHashLSHBackend,
    MinHashParams,
    StoreFormat,
)


def _populated(cls, mit_text: str, bsd_text: str):
    m = cls()
    m.add_plain("MIT", mit_text)
    m.add_plain("BSD-3-Clause", bsd_text)
    return m


@pytest.mark.parametrize("cls", [BlockHashBackend, MinHashLSHBackend])
def test_json_roundtrip_is_byte_identical(cls, mit_text: str, bsd_text: str) -> None:
    original = _populated(cls, mit_text, bsd_text)
    encoded = original.dumps()

    restored = cls()
    assert restored.load_from_memory(encoded) == 2
    assert restored.dumps() == encoded
    assert restored.get_license_list() == ["MIT", "BSD-3-Clause"]


@pytest.mark.parametrize("cls", [BlockHashBackend, MinHashLSHBackend])
def test_parquet_roundtrip(cls, tmp_path: Path, mit_text: str, bsd_text: str) -> None:
    original = _populated(cls, mit_text, bsd_text)
    path = tmp_path / "store.parquet"
    original.save_to_file(str(path))
    assert path.read_bytes()[:4] == b"PAR1"

    restored = cls()
    assert restored.load_from_file(str(path)) == 2
    assert restored.get_license_list() == original.get_license_list()
    assert restored.match_by_plain_text(mit_text)[0] == Match("MIT", 100.0)
    assert restored.dumps(StoreFormat.JSON) == original.dumps(StoreFormat.JSON)


def test_json_layout(mit_text: str) -> None:
    m = BlockHashBackend()
    m.add_plain("MIT", mit_text)
    doc = json.loads(m.dumps())
    assert doc["fingerprint_type"] == "blockhash"
    assert doc["params"]["block_size"] == 4
    assert doc["licenses"][0]["name"] == "MIT"
    assert doc["licenses"][0]["hash"].startswith("4:5:")


def test_minhash_values_are_uint32_lists(mit_text: str) -> None:
    m = MinHashLSHBackend()
    m.add_plain("MIT", mit_text)
    value = json.loads(m.dumps())["licenses"][0]["hash"]
    assert len(value) == 126
    assert all(isinstance(v, int) and 0 <= v < 2**32 for v in value)


def test_save_and_load_json_file(tmp_path: Path, mit_text: str) -> None:
    m = BlockHashBackend()
    m.add_plain("MIT", mit_text)
    path = tmp_path / "nested" / "store.json"
    m.save_to_file(str(path))

    restored = BlockHashBackend()
    assert restored.load_from_file(str(path)) == 1
    assert restored.match_by_plain_text(mit_text) == [Match("MIT", 100.0)]


def test_load_from_inline_string(mit_text: str) -> None:
    m = BlockHashBackend()
    m.add_plain("MIT", mit_text)
    restored = BlockHashBackend()
    assert restored.load_from_inline_string(m.dumps().decode("utf-8")) == 1
    assert "MIT" in restored


def test_load_accepts_bare_record_list() -> None:
    m = BlockHashBackend()
    assert m.load_from_inline_string('[{"name": "a", "hash": "4:5:2p"}]') == 1
    assert m.get_fingerprint("a").blocks == (97,)


def test_load_merges_into_existing_registry(mit_text: str, bsd_text: str) -> None:
    source = BlockHashBackend()
    source.add_plain("MIT", mit_text)

    target = BlockHashBackend()
    target.add_plain("BSD-3-Clause", bsd_text)
    target.add_plain("MIT", bsd_text)
    assert target.load_from_memory(source.dumps()) == 1
    assert target.get_license_list() == ["BSD-3-Clause", "MIT"]
    assert target.match_by_plain_text(mit_text)[0] == Match("MIT", 100.0)


@pytest.mark.parametrize("payload", [b"", b"not json", b"PAR1garbage", b'{"licenses": 3}', b'[{"name": "a"}]'])
def test_corrupt_store_degrades_to_empty(payload: bytes, caplog: pytest.LogCaptureFixture) -> None:
    m = BlockHashBackend()
    m.add_plain("kept", "kept text")
    with caplog.at_level(logging.WARNING):
        assert m.load_from_memory(payload) == 0
    assert m.get_license_list() == ["kept"]
    assert "could not be decoded" in caplog.text


def test_malformed_token_loads_nothing() -> None:
    m = BlockHashBackend()
    bad = '{"licenses": [{"name": "a", "hash": "4:5:2p"}, {"name": "b", "hash": "x:y"}]}'
    assert m.load_from_inline_string(bad) == 0
    assert len(m) == 0


def test_absent_store_degrades_to_empty(tmp_path: Path) -> None:
    m = MinHashLSHBackend()
    assert m.load_from_file(str(tmp_path / "missing.json")) == 0
    assert len(m) == 0


def test_unreadable_store_raises(tmp_path: Path) -> None:
    m = BlockHashBackend()
    with pytest.raises(StoreIOError):
        m.load_from_file(str(tmp_path))


def test_unwritable_path_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    m = BlockHashBackend()
    with pytest.raises(StoreIOError):
        m.save_to_file(str(blocker / "store.json"))


def test_cross_backend_store_degrades(mit_text: str) -> None:
    block = BlockHashBackend()
    block.add_plain("MIT", mit_text)
    minhash = MinHashLSHBackend()
    assert minhash.load_from_memory(block.dumps()) == 0
    assert minhash.load_from_memory(block.dumps(StoreFormat.PARQUET)) == 0

    mh_source = MinHashLSHBackend()
    mh_source.add_plain("MIT", mit_text)
    assert BlockHashBackend().load_from_memory(mh_source.dumps()) == 0


def test_minhash_store_with_other_params_degrades(mit_text: str) -> None:
    source = MinHashLSHBackend(MinHashParams(shingle_size=10))
    source.add_plain("MIT", mit_text)
    assert MinHashLSHBackend().load_from_memory(source.dumps()) == 0


def test_blockhash_store_with_other_params_degrades(mit_text: str) -> None:
    source = BlockHashBackend(BlockHashParams(block_size=8))
    source.add_plain("MIT", mit_text)
    target = BlockHashBackend()
    assert target.load_from_memory(source.dumps()) == 0
    assert target.load_from_memory(source.dumps(StoreFormat.PARQUET)) == 0
    assert len(target) == 0


def test_blockhash_token_with_other_params_degrades() -> None:
    m = BlockHashBackend()
    assert m.load_from_inline_string('[{"name": "a", "hash": "4:5:2p"}, {"name": "b", "hash": "8:5:2p"}]') == 0
    assert len(m) == 0


def test_duplicate_names_count_once() -> None:
    m = BlockHashBackend()
    store = '[{"name": "a", "hash": "4:5:2p"}, {"name": "a", "hash": "4:5:2q"}]'
    assert m.load_from_inline_string(store) == 1
    assert m.get_license_list() == ["a"]
    assert m.get_fingerprint("a").blocks == (98,)


def test_entries_follow_registry_order(mit_text: str, bsd_text: str) -> None:
    m = _populated(BlockHashBackend, mit_text, bsd_text)
    entries = m.entries()
    assert [e.name for e in entries] == ["MIT", "BSD-3-Clause"]
    assert entries[0] == LicenseEntry("MIT", m.get_fingerprint("MIT"))
