# app/domain/models/flow.py
"""
Declarative conversation flows.

A Flow is a static table of StepDefinitions; the conversation engine is a
small interpreter over it. The table is checked once on construction so a
typo in a step name fails at import time rather than mid-conversation.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from app.domain.errors import FlowDefinitionError
from app.domain.models.conversation import COMPLETE, OutboundMessage
from app.domain.services.validators import Validator


@dataclass(frozen=True)
class StepDefinition:
    name: str
    prompt: OutboundMessage
    validate: Validator
    next_step: str
    field: Optional[str] = None
    # validated value -> step; falls back to next_step
    branches: Mapping[Any, str] = dataclasses.field(default_factory=dict)
    retry_prompt: Optional[OutboundMessage] = None
    optional: bool = False
    append: bool = False
    # attachment kinds this step consumes ("image", "location")
    accepts: frozenset[str] = frozenset()
    expects: str = "a reply"

    def select_next(self, value: Any) -> str:
        return self.branches.get(value, self.next_step)

    def targets(self) -> set[str]:
        return {self.next_step, *self.branches.values()}

    @property
    def failure_prompt(self) -> OutboundMessage:
        return self.retry_prompt or self.prompt


@dataclass(frozen=True)
class Flow:
    name: str
    entry_step: str
    steps: Mapping[str, StepDefinition]
    title: str = ""
    summary: Optional[Callable[[Mapping[str, Any]], str]] = None

    def __post_init__(self):
        validate_flow(self)

    @property
    def step_names(self) -> frozenset[str]:
        return frozenset(self.steps)

    def step(self, name: str) -> StepDefinition:
        return self.steps[name]


def validate_flow(flow: Flow) -> None:
    """Raise FlowDefinitionError unless the step graph is well formed.

    Checks: entry exists, names match keys, every target is a defined step or
    COMPLETE, COMPLETE is reachable, and no step is unreachable from entry.
    """
    if COMPLETE in flow.steps:
        raise FlowDefinitionError(f"{flow.name}: {COMPLETE!r} is reserved for the terminal step")
    if flow.entry_step not in flow.steps:
        raise FlowDefinitionError(f"{flow.name}: entry step {flow.entry_step!r} is not defined")

    for key, step in flow.steps.items():
        if key != step.name:
            raise FlowDefinitionError(f"{flow.name}: step {step.name!r} registered as {key!r}")
        unknown = step.targets() - set(flow.steps) - {COMPLETE}
        if unknown:
            raise FlowDefinitionError(
                f"{flow.name}: step {key!r} points at undefined step(s) {sorted(unknown)}"
            )

    reachable: set[str] = set()
    pending = [flow.entry_step]
    while pending:
        name = pending.pop()
        if name in reachable:
            continue
        reachable.add(name)
        if name != COMPLETE:
            pending.extend(flow.steps[name].targets())

    if COMPLETE not in reachable:
        raise FlowDefinitionError(f"{flow.name}: {COMPLETE!r} is unreachable")
    orphans = set(flow.steps) - reachable
    if orphans:
        raise FlowDefinitionError(f"{flow.name}: unreachable step(s) {sorted(orphans)}")
