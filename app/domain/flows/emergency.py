# app/domain/flows/emergency.py
"""
Emergency assistance request flow.

Steps:
    assistance_type → location → contact → urgency
    urgency CRITICAL/HIGH/MEDIUM → people;  LOW → needs
    people → needs → more_needs (YES → needs, NO → notes)
    notes (optional) → image (optional) → complete
"""

from __future__ import annotations

from typing import Any, Mapping

from app.domain.flows.common import (
    option_list,
    options_prompt,
    phone_prompt,
    skip_prompt,
    text_prompt,
)
from app.domain.models.conversation import COMPLETE
from app.domain.models.flow import Flow, StepDefinition
from app.domain.services import validators as v

# State constants
ASSISTANCE_TYPE = "assistance_type"
LOCATION = "location"
CONTACT = "contact"
URGENCY = "urgency"
PEOPLE = "people"
NEEDS = "needs"
MORE_NEEDS = "more_needs"
NOTES = "notes"
IMAGE = "image"

ASSISTANCE_TYPES = {
    "RESCUE": "Rescue",
    "MEDICAL": "Medical",
    "FOOD_WATER": "Food & water",
    "SHELTER": "Shelter",
    "EVACUATION": "Evacuation",
}

URGENCY_LEVELS = {
    "CRITICAL": "Critical",
    "HIGH": "High",
    "MEDIUM": "Medium",
    "LOW": "Low",
}

NEED_TYPES = {
    "FOOD": "Food",
    "WATER": "Water",
    "MEDICINE": "Medicine",
    "CLOTHING": "Clothing",
    "BLANKETS": "Blankets",
    "TRANSPORT": "Transport",
}


def _summary(collected: Mapping[str, Any]) -> str:
    lines = [
        f"Type: {ASSISTANCE_TYPES.get(collected.get('assistanceType'), '-')}",
        f"Urgency: {URGENCY_LEVELS.get(collected.get('urgencyLevel'), '-')}",
        f"Location: {collected.get('location', '-')}",
    ]
    if "peopleCount" in collected:
        lines.append(f"People: {collected['peopleCount']}")
    if collected.get("needs"):
        lines.append("Needs: " + ", ".join(NEED_TYPES.get(n, n) for n in collected["needs"]))
    return "\n".join(lines)


FLOW = Flow(
    name="emergency",
    title="emergency request",
    entry_step=ASSISTANCE_TYPE,
    summary=_summary,
    steps={
        ASSISTANCE_TYPE: StepDefinition(
            name=ASSISTANCE_TYPE,
            prompt=options_prompt(
                "🆘 What kind of assistance do you need?",
                ASSISTANCE_TYPES, "ASSIST",
            ),
            retry_prompt=options_prompt(
                f"Please choose one of: {option_list(ASSISTANCE_TYPES)}.",
                ASSISTANCE_TYPES, "ASSIST",
            ),
            validate=v.choice(ASSISTANCE_TYPES, "ASSIST"),
            field="assistanceType",
            next_step=LOCATION,
            expects="the type of assistance",
        ),
        LOCATION: StepDefinition(
            name=LOCATION,
            prompt=text_prompt(
                "📍 Where are you? Share your location or type an address or landmark."
            ),
            retry_prompt=text_prompt(
                "Please share your location or type an address (at least 5 characters)."
            ),
            validate=v.location(min_length=5),
            field="location",
            next_step=CONTACT,
            accepts=frozenset({"location"}),
            expects="your location",
        ),
        CONTACT: StepDefinition(
            name=CONTACT,
            prompt=phone_prompt("📞 What phone number can responders reach you on?"),
            retry_prompt=phone_prompt(
                "That doesn't look like a phone number. Please send digits only, e.g. +15551234567."
            ),
            validate=v.phone_number(),
            field="contactNumber",
            next_step=URGENCY,
            expects="a phone number",
        ),
        URGENCY: StepDefinition(
            name=URGENCY,
            prompt=options_prompt("⚠️ How urgent is your situation?", URGENCY_LEVELS, "URGENCY"),
            retry_prompt=options_prompt(
                f"Please choose one of: {option_list(URGENCY_LEVELS)}.",
                URGENCY_LEVELS, "URGENCY",
            ),
            validate=v.choice(URGENCY_LEVELS, "URGENCY"),
            field="urgencyLevel",
            next_step=PEOPLE,
            branches={"LOW": NEEDS},
            expects="an urgency level",
        ),
        PEOPLE: StepDefinition(
            name=PEOPLE,
            prompt=text_prompt("👥 How many people need help?"),
            retry_prompt=text_prompt("Please send the number of people as a whole number, e.g. 3."),
            validate=v.positive_int(),
            field="peopleCount",
            next_step=NEEDS,
            expects="the number of people",
        ),
        NEEDS: StepDefinition(
            name=NEEDS,
            prompt=options_prompt("📦 What do you need most?", NEED_TYPES, "NEED"),
            retry_prompt=options_prompt(
                f"Please choose one of: {option_list(NEED_TYPES)}.",
                NEED_TYPES, "NEED",
            ),
            validate=v.choice(NEED_TYPES, "NEED"),
            field="needs",
            append=True,
            next_step=MORE_NEEDS,
            expects="a need",
        ),
        MORE_NEEDS: StepDefinition(
            name=MORE_NEEDS,
            prompt=options_prompt("Do you need anything else?", v.YES_NO, "MORE_NEEDS"),
            validate=v.yes_no("MORE_NEEDS"),
            next_step=NOTES,
            branches={"YES": NEEDS},
            expects="yes or no",
        ),
        NOTES: StepDefinition(
            name=NOTES,
            prompt=skip_prompt("📝 Anything else responders should know?"),
            validate=v.free_text(min_length=2),
            field="notes",
            optional=True,
            next_step=IMAGE,
            expects="a short note",
        ),
        IMAGE: StepDefinition(
            name=IMAGE,
            prompt=skip_prompt("📷 If you can, send a photo of the situation."),
            retry_prompt=skip_prompt("Please send a photo."),
            validate=v.image(),
            field="imageUrl",
            optional=True,
            next_step=COMPLETE,
            accepts=frozenset({"image"}),
            expects="a photo",
        ),
    },
)
