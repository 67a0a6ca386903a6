"""
Classified call signal.

A ``Signal`` is the structured reading of one inbound call transcript. It is
never persisted on its own; it travels inside the ``Opportunity`` it spawns
as a snapshot (serialized to JSON in the ``opportunities`` table).
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency


class Signal(BaseModel):
    """Intent, urgency and topic extracted from one transcript.

    Attributes:
        raw_text: The transcript as received; ``""`` for a missed call.
        intent: What the caller wants.
        urgency: How soon the business should react.
        detected_topic: Service the call is about, or ``None`` if unknown.
    """

    model_config = ConfigDict(frozen=True)

    raw_text: str = ""
    intent: Intent = Intent.GENERAL_INQUIRY
    urgency: Urgency = Urgency.LOW
    detected_topic: Optional[str] = None

    @field_validator("raw_text", mode="before")
    @classmethod
    def coerce_missing_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def is_missed_call(self) -> bool:
        """``True`` when there is no transcript to act on."""
        return not self.raw_text.strip()
