# app/domain/flows/missing_pet.py
"""
Missing-pet report flow.

Steps:
    pet_type → pet_name → last_seen → description (optional)
    → contact → photo (optional) → complete
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

PET_TYPE = "pet_type"
PET_NAME = "pet_name"
LAST_SEEN = "last_seen"
DESCRIPTION = "description"
CONTACT = "contact"
PHOTO = "photo"

PET_TYPES = {
    "DOG": "Dog",
    "CAT": "Cat",
    "BIRD": "Bird",
    "OTHER": "Other",
}


def _summary(collected: Mapping[str, Any]) -> str:
    return (
        f"{PET_TYPES.get(collected.get('petType'), 'Pet')} "
        f"\"{collected.get('petName', '-')}\", last seen at {collected.get('lastSeenLocation', '-')}"
    )


FLOW = Flow(
    name="missing_pet",
    title="missing pet report",
    entry_step=PET_TYPE,
    summary=_summary,
    steps={
        PET_TYPE: StepDefinition(
            name=PET_TYPE,
            prompt=options_prompt("🐾 Sorry to hear that. What kind of pet is missing?", PET_TYPES, "PET"),
            retry_prompt=options_prompt(
                f"Please choose one of: {option_list(PET_TYPES)}.", PET_TYPES, "PET"
            ),
            validate=v.choice(PET_TYPES, "PET"),
            field="petType",
            next_step=PET_NAME,
            expects="the kind of pet",
        ),
        PET_NAME: StepDefinition(
            name=PET_NAME,
            prompt=text_prompt("What is your pet's name?"),
            retry_prompt=text_prompt("Please type your pet's name."),
            validate=v.free_text(min_length=1),
            field="petName",
            next_step=LAST_SEEN,
            expects="your pet's name",
        ),
        LAST_SEEN: StepDefinition(
            name=LAST_SEEN,
            prompt=text_prompt("📍 Where was your pet last seen? Share a location or type an address."),
            retry_prompt=text_prompt(
                "Please share a location or type an address (at least 5 characters)."
            ),
            validate=v.location(min_length=5),
            field="lastSeenLocation",
            next_step=DESCRIPTION,
            accepts=frozenset({"location"}),
            expects="where your pet was last seen",
        ),
        DESCRIPTION: StepDefinition(
            name=DESCRIPTION,
            prompt=skip_prompt("Describe your pet (breed, colour, collar, markings)."),
            validate=v.free_text(min_length=3),
            field="description",
            optional=True,
            next_step=CONTACT,
            expects="a description",
        ),
        CONTACT: StepDefinition(
            name=CONTACT,
            prompt=phone_prompt("📞 What phone number should finders call?"),
            retry_prompt=phone_prompt(
                "That doesn't look like a phone number. Please send digits only, e.g. +15551234567."
            ),
            validate=v.phone_number(),
            field="contactNumber",
            next_step=PHOTO,
            expects="a phone number",
        ),
        PHOTO: StepDefinition(
            name=PHOTO,
            prompt=skip_prompt("📷 Send a recent photo of your pet."),
            retry_prompt=skip_prompt("Please send a photo."),
            validate=v.image(),
            field="photoUrl",
            optional=True,
            next_step=COMPLETE,
            accepts=frozenset({"image"}),
            expects="a photo",
        ),
    },
)
