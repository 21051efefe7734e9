from __future__ import annotations

import pytest

from license_detect.errors import MalformedInputError
from license_detect.fingerprints import (
    BlockHashBackend,
    Match,
    MinHashLSHBackend,
    make_matcher,
    make_normalization_fn,
)


def test_default_backend_is_minhash() -> None:
    m = make_matcher({})
    assert isinstance(m, MinHashLSHBackend)
    assert m.params.bands == 42
    assert m.num_perm == 126


def test_blockhash_params_from_config() -> None:
    cfg = {
        "backend": {
            "kind": "blockhash",
            "blockhash": {"block_size": 8, "min_confidence": 75, "exit_on_exact_match": True},
        }
    }
    m = make_matcher(cfg)
    assert isinstance(m, BlockHashBackend)
    assert m.params.block_size == 8
    assert m.params.min_confidence == 75.0
    assert m.params.exit_on_exact_match is True
    assert m.params.hash_length == 5


def test_minhash_params_from_config() -> None:
    m = make_matcher({"backend": {"kind": "MinHash", "minhash": {"bands": 20, "band_width": 5, "threshold": 0.7}}})
    assert m.num_perm == 100
    assert m.params.threshold == 0.7


def test_unknown_backend_kind() -> None:
    with pytest.raises(MalformedInputError):
        make_matcher({"backend": {"kind": "simhash"}})


def test_unknown_param_key() -> None:
    with pytest.raises(MalformedInputError):
        make_matcher({"backend": {"kind": "blockhash", "blockhash": {"block_sise": 4}}})


def test_invalid_param_value() -> None:
    with pytest.raises(MalformedInputError):
        make_matcher({"backend": {"kind": "minhash", "minhash": {"bands": "many"}}})


def test_unknown_storage_type() -> None:
    with pytest.raises(MalformedInputError):
        make_matcher({"storage": {"type": "s3"}})


def test_normalization_section_is_applied() -> None:
    fn = make_normalization_fn({"strip_whitespace": False})
    assert fn("a b") == "a b"

    m = make_matcher({"backend": {"kind": "blockhash"}, "normalization": {"strip_whitespace": False}})
    m.add_plain("spaced", "a b c d")
    assert m.match_by_plain_text("abcd") == []
    assert m.match_by_plain_text("a b c d") == [Match("spaced", 100.0)]


def test_explicit_normalization_fn_wins() -> None:
    m = make_matcher({"backend": {"kind": "blockhash"}}, normalization_fn=str.lower)
    m.add_plain("x", "ABCD")
    assert m.match_by_plain_text("abcd") == [Match("x", 100.0)]


@pytest.mark.parametrize("raw,expected", [(False, False), (True, True), ("false", False), ("True", True)])
def test_bool_params_parse_strictly(raw, expected: bool) -> None:
    m = make_matcher({"backend": {"kind": "blockhash", "blockhash": {"exit_on_exact_match": raw}}})
    assert m.params.exit_on_exact_match is expected


@pytest.mark.parametrize("raw", ["no", "0", 1, None])
def test_bool_params_reject_other_values(raw) -> None:
    with pytest.raises(MalformedInputError):
        make_matcher({"backend": {"kind": "blockhash", "blockhash": {"exit_on_exact_match": raw}}})
