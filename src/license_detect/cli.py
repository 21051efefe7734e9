"""CLI entrypoint.

Commands:
- `license-detect build --config configs/detect.yaml`
    fingerprint the configured corpus and save the store
- `license-detect detect --config configs/detect.yaml FILE`
    load the store, run the pipeline and adjustments over FILE, print every round
    and the final ranking
"""

from __future__ import annotations
import argparse
import logging
from typing import Any, Dict, List, Optional

from .errors import MalformedInputError
from .fingerprints.base import LicenseMatcher
from .fingerprints.manager import make_matcher
from .fingerprints.schema import Match, StoreFormat
from .logging_ import setup_logging
from .pipeline.adjust import apply_adjustments
from .pipeline.registry import make_adjustments, make_pipeline
from .policies.loader import load_yaml
from .sources.local_folder import load_licenses_from_folder

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = "licenses/store.json"


def _store_settings(cfg: Dict[str, Any]) -> tuple:
    store_cfg = cfg.get("store") or {}
    path = store_cfg.get("path", DEFAULT_STORE_PATH)
    fmt = store_cfg.get("format")
    if not fmt:
        return path, None
    try:
        return path, StoreFormat(str(fmt).lower())
    except ValueError as exc:
        raise MalformedInputError(f"Unknown store format: {fmt}. Expected 'json' or 'parquet'") from exc


def _format_matches(matches: List[Match], limit: int = 5) -> str:
    if not matches:
        return "-"
    return ", ".join(f"{m.name} ({m.confidence:.2f})" for m in matches[:limit])


def build(cfg: Dict[str, Any]) -> LicenseMatcher:
    matcher = make_matcher(cfg)
    corpus = cfg.get("corpus") or {}
    if "path" not in corpus:
        raise MalformedInputError("config has no corpus.path")
    for lic in load_licenses_from_folder(corpus["path"], corpus.get("pattern", "*"), storage=matcher.storage):
        matcher.add_plain(lic.name, lic.text)
    path, fmt = _store_settings(cfg)
    matcher.save_to_file(path, fmt)
    logger.info("built %d licenses into %s", len(matcher), path)
    return matcher


def _reference_text(cfg: Dict[str, Any], matcher: LicenseMatcher, name: str) -> Optional[str]:
    corpus = cfg.get("corpus") or {}
    if "path" not in corpus:
        return None
    path = matcher.storage.join(corpus["path"], name)
    if not matcher.storage.exists(path):
        return None
    return matcher.storage.read_file(path).decode("utf-8", errors="replace")


def detect(cfg: Dict[str, Any], text: str) -> List[Match]:
    matcher = make_matcher(cfg)
    path, _ = _store_settings(cfg)
    matcher.load_from_file(path)

    run = make_pipeline(cfg, matcher).run_traced(text)
    for i, (label, matches) in enumerate(zip(run.transform_chain, run.rounds)):
        print(f"round {i} [{label}]: {_format_matches(matches)}")

    final = run.final
    if cfg.get("adjustments") and final:
        original = _reference_text(cfg, matcher, final[0].name)
        pipes = make_adjustments(cfg["adjustments"], text, original=original, storage=matcher.storage)
        final = apply_adjustments(final, pipes)

    print(f"final: {_format_matches(final)}")
    return final


def main(argv: Optional[List[str]] = None) -> None:
    p = argparse.ArgumentParser(prog="license-detect")
    sub = p.add_subparsers(dest="cmd", required=True)

    pb = sub.add_parser("build", help="Fingerprint a license corpus and save the store")
    pb.add_argument("--config", required=True)

    pd = sub.add_parser("detect", help="Rank known licenses against a file")
    pd.add_argument("--config", required=True)
    pd.add_argument("file")

    args = p.parse_args(argv)

    cfg = load_yaml(args.config)
    log_cfg = cfg.get("logging") or {}
    setup_logging(level=log_cfg.get("level", "INFO"), log_dir=log_cfg.get("log_dir"))

    if args.cmd == "build":
        build(cfg)
        return

    with open(args.file, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()
    detect(cfg, text)


if __name__ == "__main__":
    main()
