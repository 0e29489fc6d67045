# app/domain/flows/location.py
"""Location collection flow: location → confirm (NO loops back) → complete."""

from __future__ import annotations

from typing import Any, Mapping

from app.domain.flows.common import options_prompt, text_prompt
from app.domain.models.conversation import COMPLETE
from app.domain.models.flow import Flow, StepDefinition
from app.domain.services import validators as v

LOCATION = "location"
CONFIRM = "confirm"


def _summary(collected: Mapping[str, Any]) -> str:
    return f"Location: {collected.get('location', '-')}"


FLOW = Flow(
    name="location",
    title="location",
    entry_step=LOCATION,
    summary=_summary,
    steps={
        LOCATION: StepDefinition(
            name=LOCATION,
            prompt=text_prompt("📍 Please share your location or type your address."),
            retry_prompt=text_prompt(
                "Please share your location or type an address (at least 5 characters)."
            ),
            validate=v.location(min_length=5),
            field="location",
            next_step=CONFIRM,
            accepts=frozenset({"location"}),
            expects="your location",
        ),
        CONFIRM: StepDefinition(
            name=CONFIRM,
            prompt=options_prompt("You said: {location}\nIs that correct?", v.YES_NO, "CONFIRM"),
            validate=v.yes_no("CONFIRM"),
            next_step=COMPLETE,
            branches={"NO": LOCATION},
            expects="yes or no",
        ),
    },
)
