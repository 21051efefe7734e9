"""Segment and adjustment registry.

Builds pipeline pieces from configuration:

    pipeline:
      target_confidence: 100
      segments:
        - remove: "-"
        - replace: {pattern: "\\(c\\)", replacement: "©"}
        - batch: [{remove: "\\*"}, {remove: "#"}]
        - custom: drop_copyright_lines
    adjustments:
      - {kind: regex, pattern: "...", trigger: {condition: gt, value: 50}, action: {kind: add, value: 5}}
      - {kind: diff, pattern: "...", original_path: licenses/RAW/MIT, ...}

Custom transforms are looked up by name in a caller-supplied mapping; nothing is
discovered implicitly. Unknown kinds fail here, before any round runs.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import MalformedInputError
from ..fingerprints.base import LicenseMatcher
from ..storage.base import StorageBackend, LocalStorageBackend
from .adjust import (
    Action,
    ActionType,
    AdjustmentPipe,
    DiffingPipe,
    RegexPipe,
    TriggerCondition,
    TriggerInstruction,
)
from .confidence import ConfidencePipeline
from .segments import Batch, Custom, CustomTransform, Remove, Replace, Segment

CustomTransforms = Mapping[str, CustomTransform]


def _make_remove(arg: Any, custom: CustomTransforms) -> Segment:
    return Remove(arg)


def _make_replace(arg: Any, custom: CustomTransforms) -> Segment:
    if not isinstance(arg, dict) or "pattern" not in arg:
        raise MalformedInputError(f"replace expects {{pattern, replacement}}, got {arg!r}")
    return Replace(arg["pattern"], arg.get("replacement", ""))


def _make_batch(arg: Any, custom: CustomTransforms) -> Segment:
    if not isinstance(arg, list):
        raise MalformedInputError(f"batch expects a list of segments, got {arg!r}")
    return Batch(make_segments(arg, custom))


def _make_custom(arg: Any, custom: CustomTransforms) -> Segment:
    name = str(arg)
    if name not in custom:
        raise MalformedInputError(
            f"Unknown custom transform: {name}. Available: {sorted(custom)}"
        )
    return Custom(custom[name], name=name)


_SEGMENTS: Dict[str, Callable[[Any, CustomTransforms], Segment]] = {
    "remove": _make_remove,
    "replace": _make_replace,
    "batch": _make_batch,
    "custom": _make_custom,
}


def make_segment(spec: Any, custom_transforms: Optional[CustomTransforms] = None) -> Segment:
    """Build one segment from a single-key mapping such as ``{"remove": "-"}``."""
    if isinstance(spec, Segment):
        return spec
    if not isinstance(spec, dict) or len(spec) != 1:
        raise MalformedInputError(f"segment must be a single-key mapping, got {spec!r}")
    (kind, arg), = spec.items()
    factory = _SEGMENTS.get(str(kind).lower())
    if factory is None:
        raise MalformedInputError(f"Unknown segment kind: {kind}. Available: {sorted(_SEGMENTS)}")
    return factory(arg, custom_transforms or {})


def make_segments(
    specs: Optional[Sequence[Any]],
    custom_transforms: Optional[CustomTransforms] = None,
) -> List[Segment]:
    return [make_segment(s, custom_transforms) for s in (specs or [])]


def make_pipeline(
    cfg: Dict[str, Any],
    matcher: LicenseMatcher,
    custom_transforms: Optional[CustomTransforms] = None,
) -> ConfidencePipeline:
    """Pipeline from the `pipeline` section of a config mapping."""
    pcfg = cfg.get("pipeline") or {}
    try:
        target = float(pcfg.get("target_confidence", 100.0))
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"invalid target_confidence: {pcfg.get('target_confidence')!r}") from exc
    return ConfidencePipeline(
        matcher,
        segments=make_segments(pcfg.get("segments"), custom_transforms),
        target_confidence=target,
    )


def _trigger(raw: Any) -> TriggerInstruction:
    raw = raw or {"condition": "always"}
    if not isinstance(raw, dict):
        raise MalformedInputError(f"trigger must be a mapping, got {raw!r}")
    try:
        value = float(raw.get("value", 0.0))
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"invalid trigger value: {raw.get('value')!r}") from exc
    return TriggerInstruction(TriggerCondition.parse(raw.get("condition", "always")), value)


def _action(raw: Any) -> Action:
    if not isinstance(raw, dict) or "kind" not in raw:
        raise MalformedInputError(f"action expects {{kind, value}}, got {raw!r}")
    try:
        value = float(raw.get("value", 0.0))
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"invalid action value: {raw.get('value')!r}") from exc
    return Action(ActionType.parse(raw["kind"]), value)


def make_adjustments(
    specs: Optional[Sequence[Dict[str, Any]]],
    text: str,
    original: Optional[str] = None,
    storage: Optional[StorageBackend] = None,
) -> List[AdjustmentPipe]:
    """Adjustment pipes for one input text.

    `regex` pipes test `text`. `diff` pipes compare `text` against a reference: the
    adjustment's `original_path` when present, else `original`.
    """
    storage = storage or LocalStorageBackend()
    pipes: List[AdjustmentPipe] = []
    for spec in specs or []:
        if not isinstance(spec, dict):
            raise MalformedInputError(f"adjustment must be a mapping, got {spec!r}")
        kind = str(spec.get("kind", "")).lower()
        pattern = spec.get("pattern")
        if pattern is None:
            raise MalformedInputError(f"adjustment {spec!r} has no pattern")
        trigger = _trigger(spec.get("trigger"))
        action = _action(spec.get("action"))
        if kind == "regex":
            pipes.append(RegexPipe(pattern, text, trigger, action))
        elif kind == "diff":
            reference = original
            if spec.get("original_path"):
                reference = storage.read_file(spec["original_path"]).decode("utf-8")
            if reference is None:
                raise MalformedInputError(f"diff adjustment {spec!r} needs an original reference")
            pipes.append(DiffingPipe(pattern, reference, text, trigger, action))
        else:
            raise MalformedInputError(f"Unknown adjustment kind: {kind}. Expected 'regex' or 'diff'")
    return pipes
