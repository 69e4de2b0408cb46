"""
unified_api_client.analytics.events

Interaction event model posted to the analytics endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class InteractionEvent:
    event_type: str
    action: str
    target: str | None = None
    # Filled from the current route at record time when left empty.
    screen: str | None = None
    additional_properties: dict[str, str] = field(default_factory=dict)

    def as_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "eventType": self.event_type,
            "screen": self.screen,
            "action": self.action,
        }
        if self.target is not None:
            out["target"] = self.target
        if self.additional_properties:
            out["additionalProperties"] = dict(self.additional_properties)
        return out
