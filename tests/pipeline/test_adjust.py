from __future__ import annotations

import pytest

from license_detect.errors import MalformedInputError
from license_detect.fingerprints import Match
from license_detect.pipeline import (
    Action,
    ActionType,
    DiffingPipe,
    RegexPipe,
    TriggerCondition,
    TriggerInstruction,
    apply_adjustments,
)
from license_detect.pipeline.adjust import inserted_text

DATE = r"\d{4}-\d{2}-\d{2}"
TEMPLATE = "this is a sample license created on [enter_license_creation_date_here]"
ALWAYS = TriggerInstruction(TriggerCondition.ALWAYS, 10)
ADD_5 = Action(ActionType.ADD, 5)


def test_trigger_conditions() -> None:
    gt = TriggerInstruction(TriggerCondition.GREATER_THAN, 50)
    assert gt.should_run(51) and gt.should_run(52)
    assert not gt.should_run(49) and not gt.should_run(0)

    lt = TriggerInstruction(TriggerCondition.LESS_THAN, 50)
    assert lt.should_run(49) and lt.should_run(0)
    assert not lt.should_run(50) and not lt.should_run(100)

    gte = TriggerInstruction(TriggerCondition.GREATER_THAN_OR_EQUAL, 50)
    assert gte.should_run(50) and gte.should_run(100)
    assert not gte.should_run(49)

    lte = TriggerInstruction(TriggerCondition.LESS_THAN_OR_EQUAL, 50)
    assert lte.should_run(50) and lte.should_run(0)
    assert not lte.should_run(51)

    eq = TriggerInstruction(TriggerCondition.EQUAL, 50)
    assert eq.should_run(50)
    assert not eq.should_run(51) and not eq.should_run(49)

    ne = TriggerInstruction(TriggerCondition.NOT_EQUAL, 50)
    assert ne.should_run(49) and ne.should_run(100)
    assert not ne.should_run(50)

    always = TriggerInstruction(TriggerCondition.ALWAYS, 50)
    assert all(always.should_run(x) for x in (0, 1, 49, 50, 99, 100))


def test_actions_clamp() -> None:
    add = Action(ActionType.ADD, 5)
    assert add.run(10) == 15
    assert add.run(0) == 5
    assert add.run(95) == 100
    assert add.run(255) == 100

    sub = Action(ActionType.SUBTRACT, 5)
    assert sub.run(10) == 5
    assert sub.run(3) == 0
    assert sub.run(0) == 0
    assert sub.run(255) == 100

    assert Action(ActionType.SET, 255).run(10) == 100
    assert Action(ActionType.SET, 42).run(99) == 42

    for action in (add, sub, Action(ActionType.SET, 255), Action(ActionType.SET, 0)):
        for c in range(0, 256, 5):
            assert 0 <= action.run(c) <= 100


def test_condition_and_action_parsing() -> None:
    assert TriggerCondition.parse("gt") is TriggerCondition.GREATER_THAN
    assert TriggerCondition.parse("GreaterThanOrEqual") is TriggerCondition.GREATER_THAN_OR_EQUAL
    assert TriggerCondition.parse("not_equal") is TriggerCondition.NOT_EQUAL
    assert ActionType.parse("Subtract") is ActionType.SUBTRACT
    with pytest.raises(MalformedInputError):
        TriggerCondition.parse("sometimes")
    with pytest.raises(MalformedInputError):
        ActionType.parse("multiply")


def test_regex_pipe() -> None:
    gt50 = TriggerInstruction(TriggerCondition.GREATER_THAN, 50)
    assert RegexPipe("some text", "this is a sample license with some text", gt50, ADD_5).run(95) == 100
    assert RegexPipe("some text", "this is a sample license with some text", gt50, ADD_5).run(40) == 40
    assert RegexPipe(DATE, "this is a sample license created on 2014-01-01", ALWAYS, ADD_5).run(10) == 15
    assert RegexPipe(DATE, "this is a sample license created on NO DATE", ALWAYS, ADD_5).run(10) == 10


def test_regex_pipe_passthrough_is_unclamped() -> None:
    pipe = RegexPipe("never", "text", ALWAYS, ADD_5)
    assert pipe.run(150) == 150


def test_diffing_pipe_fires_on_inserted_date() -> None:
    pipe = DiffingPipe(
        DATE,
        TEMPLATE + " copyright Some Company",
        "this is a sample license created on 2014-01-01 copyright Some Company. and stuff",
        ALWAYS,
        ADD_5,
    )
    assert pipe.run(10) == 15


def test_diffing_pipe_ignores_changes_without_date() -> None:
    pipe = DiffingPipe(
        DATE,
        TEMPLATE + " copyright Some Company",
        TEMPLATE + " but different end.",
        ALWAYS,
        ADD_5,
    )
    assert pipe.run(10) == 10


def test_diffing_pipe_same_license() -> None:
    assert DiffingPipe(DATE, TEMPLATE, TEMPLATE, ALWAYS, ADD_5).run(10) == 10


def test_diffing_pipe_ignores_deleted_text() -> None:
    # the date only exists in the original, so nothing matching was inserted
    assert DiffingPipe(DATE, "created on 2014-01-01", "created on", ALWAYS, ADD_5).run(10) == 10


def test_inserted_text() -> None:
    assert inserted_text("abc", "abXc") == "X"
    assert inserted_text("abc", "abc") == ""


def test_invalid_pattern() -> None:
    with pytest.raises(MalformedInputError):
        RegexPipe("(", "text", ALWAYS, ADD_5)


def test_apply_adjustments_reranks() -> None:
    matches = [Match("MIT", 90.0), Match("ISC", 85.0)]
    boost_isc = RegexPipe("ISC", "ISC License", TriggerInstruction(TriggerCondition.LESS_THAN, 88), Action(ActionType.ADD, 10))
    assert apply_adjustments(matches, [boost_isc]) == [Match("ISC", 95.0), Match("MIT", 90.0)]
    assert apply_adjustments([], [boost_isc]) == []
