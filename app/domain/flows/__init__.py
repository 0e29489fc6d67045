# app/domain/flows/__init__.py
"""
Conversation flow tables.

Each sub-module exposes ``FLOW``, a validated :class:`~app.domain.models.flow.Flow`.
One flow is active per process, chosen by ``settings.FLOW_VARIANT``.
"""

from __future__ import annotations

from app.domain.models.flow import Flow

from . import emergency, location, missing_pet

FLOWS: dict[str, Flow] = {
    emergency.FLOW.name: emergency.FLOW,
    missing_pet.FLOW.name: missing_pet.FLOW,
    location.FLOW.name: location.FLOW,
}


def get_flow(name: str) -> Flow:
    try:
        return FLOWS[name.strip().lower()]
    except KeyError:
        raise KeyError(f"Unknown flow {name!r}; expected one of {sorted(FLOWS)}") from None


__all__ = ["FLOWS", "get_flow", "emergency", "missing_pet", "location"]
