# tests/test_flows.py
"""Tests for flow tables and step-graph validation."""

import pytest

from app.domain.errors import FlowDefinitionError
from app.domain.flows import FLOWS, emergency, get_flow, location, missing_pet
from app.domain.models.conversation import COMPLETE, OutboundMessage
from app.domain.models.flow import Flow, StepDefinition
from app.domain.services import validators as v


def _step(name, next_step, **kw):
    return StepDefinition(
        name=name,
        prompt=OutboundMessage(text=name),
        validate=v.free_text(1),
        next_step=next_step,
        **kw,
    )


def test_registry_has_all_variants():
    assert set(FLOWS) == {"emergency", "missing_pet", "location"}


def test_get_flow_is_case_insensitive():
    assert get_flow(" Emergency ") is emergency.FLOW


def test_get_flow_unknown_raises():
    with pytest.raises(KeyError):
        get_flow("weather")


@pytest.mark.parametrize("flow", list(FLOWS.values()), ids=list(FLOWS))
def test_every_step_defines_a_prompt_and_reaches_complete(flow):
    for step in flow.steps.values():
        assert step.prompt.text
        assert step.failure_prompt.text
    assert COMPLETE not in flow.steps


def test_emergency_urgency_branches_on_low_only():
    step = emergency.FLOW.step(emergency.URGENCY)
    assert step.select_next("CRITICAL") == emergency.PEOPLE
    assert step.select_next("MEDIUM") == emergency.PEOPLE
    assert step.select_next("LOW") == emergency.NEEDS


def test_emergency_more_needs_loops_back():
    step = emergency.FLOW.step(emergency.MORE_NEEDS)
    assert step.select_next("YES") == emergency.NEEDS
    assert step.select_next("NO") == emergency.NOTES


def test_location_confirm_no_loops_back():
    step = location.FLOW.step(location.CONFIRM)
    assert step.select_next("NO") == location.LOCATION
    assert step.select_next("YES") == COMPLETE


def test_missing_pet_photo_is_terminal_and_optional():
    step = missing_pet.FLOW.step(missing_pet.PHOTO)
    assert step.optional
    assert step.next_step == COMPLETE
    assert "image" in step.accepts


# ── graph validation ──────────────────────────────────────────────────

def test_missing_entry_rejected():
    with pytest.raises(FlowDefinitionError, match="entry step"):
        Flow(name="bad", entry_step="a", steps={"b": _step("b", COMPLETE)})


def test_undefined_target_rejected():
    with pytest.raises(FlowDefinitionError, match="undefined"):
        Flow(name="bad", entry_step="a", steps={"a": _step("a", "b")})


def test_undefined_branch_target_rejected():
    with pytest.raises(FlowDefinitionError, match="undefined"):
        Flow(
            name="bad",
            entry_step="a",
            steps={"a": _step("a", COMPLETE, branches={"x": "nowhere"})},
        )


def test_unreachable_step_rejected():
    with pytest.raises(FlowDefinitionError, match="unreachable step"):
        Flow(
            name="bad",
            entry_step="a",
            steps={"a": _step("a", COMPLETE), "orphan": _step("orphan", COMPLETE)},
        )


def test_complete_must_be_reachable():
    with pytest.raises(FlowDefinitionError, match="unreachable"):
        Flow(
            name="bad",
            entry_step="a",
            steps={"a": _step("a", "b"), "b": _step("b", "a")},
        )


def test_complete_is_reserved():
    with pytest.raises(FlowDefinitionError, match="reserved"):
        Flow(name="bad", entry_step=COMPLETE, steps={COMPLETE: _step(COMPLETE, COMPLETE)})


def test_mismatched_step_key_rejected():
    with pytest.raises(FlowDefinitionError, match="registered as"):
        Flow(name="bad", entry_step="a", steps={"a": _step("b", COMPLETE)})
