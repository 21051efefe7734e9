"""Confidence refinement: segments, the round loop and score adjustments."""

from .adjust import (
    Action,
    ActionType,
    AdjustmentPipe,
    DiffingPipe,
    RegexPipe,
    TriggerCondition,
    TriggerInstruction,
    apply_adjustments,
)
from .confidence import ConfidencePipeline
from .context import PipelineRun, top_confidence
from .registry import make_adjustments, make_pipeline, make_segments
from .segments import Batch, Custom, Remove, Replace, Segment

__all__ = [
    "Action",
    "ActionType",
    "AdjustmentPipe",
    "DiffingPipe",
    "RegexPipe",
    "TriggerCondition",
    "TriggerInstruction",
    "apply_adjustments",
    "ConfidencePipeline",
    "PipelineRun",
    "top_confidence",
    "make_adjustments",
    "make_pipeline",
    "make_segments",
    "Batch",
    "Custom",
    "Remove",
    "Replace",
    "Segment",
]
