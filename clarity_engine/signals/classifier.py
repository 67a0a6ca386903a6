"""
Keyword rule-chain classifier for call transcripts.

Each dimension is an ordered tuple of ``KeywordRule`` entries evaluated top to
bottom; the first rule with any keyword present in the lower-cased transcript
wins. The tie-break order is therefore the tuple order, visible here and
asserted in tests.

Matching is plain substring containment ("leak" matches "leaking",
"plumb" matches "plumber"). There is no tokenization or stemming.

``classify`` is total: ``None``, ``""`` and whitespace-only input all produce
the missed-call signal (general inquiry, low urgency, no topic).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, Optional, Sequence, TypeVar

from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class KeywordRule(Generic[T]):
    """``result`` applies when any of ``keywords`` occurs in the text."""

    keywords: tuple[str, ...]
    result: T

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# ── Rule chains ────────────────────────────────────────────────────────────────

EMERGENCY_KEYWORDS: tuple[str, ...] = (
    "emergency", "urgent", "flooding", "leak", "broken", "asap", "immediate",
)

URGENCY_RULES: tuple[KeywordRule[Urgency], ...] = (
    KeywordRule(EMERGENCY_KEYWORDS, Urgency.HIGH),
    KeywordRule(("soon", "today", "tomorrow"), Urgency.MEDIUM),
)

INTENT_RULES: tuple[KeywordRule[Intent], ...] = (
    KeywordRule(EMERGENCY_KEYWORDS, Intent.EMERGENCY),
    KeywordRule(("quote", "estimate", "price", "cost"), Intent.PRICING),
    KeywordRule(("schedule", "appointment"), Intent.SCHEDULING),
)

BUILTIN_TOPIC_RULES: tuple[KeywordRule[str], ...] = (
    KeywordRule(("plumb",), "plumbing"),
    KeywordRule(("electric",), "electrical"),
    KeywordRule(("hvac", "heating", "cooling"), "HVAC"),
    KeywordRule(("clean",), "cleaning"),
    KeywordRule(("repair",), "repair"),
)


def first_match(rules: Sequence[KeywordRule[T]], text: str, default: T) -> T:
    """Return the result of the first rule matching ``text``, else ``default``."""
    for rule in rules:
        if rule.matches(text):
            return rule.result
    return default


# ── Dimension detectors ───────────────────────────────────────────────────────
# Each expects text that is already lower-cased.


def detect_urgency(text: str) -> Urgency:
    return first_match(URGENCY_RULES, text, Urgency.LOW)


def detect_intent(text: str) -> Intent:
    return first_match(INTENT_RULES, text, Intent.GENERAL_INQUIRY)


def detect_topic(text: str, known_services: Sequence[str] = ()) -> Optional[str]:
    """Resolve the service a call is about.

    Caller-supplied service names are checked first, in the order given, and
    the caller's own spelling is returned. Only when none of them occurs in
    the text does the built-in keyword table apply.

    Args:
        text: Lower-cased transcript.
        known_services: Service names offered by the business.

    Returns:
        The matched service or built-in topic, or ``None``.
    """
    for service in known_services:
        needle = service.strip().lower()
        if needle and needle in text:
            return service.strip()
    return first_match(BUILTIN_TOPIC_RULES, text, None)


def classify(
    transcript: Optional[str],
    known_services: Sequence[str] = (),
) -> Signal:
    """Classify one call transcript.

    Args:
        transcript: Raw transcript text; ``None`` or blank for a missed call.
        known_services: Business service names used for topic detection.

    Returns:
        A ``Signal``. Never raises for ``None`` or any ``str`` input.
    """
    if transcript is None or not transcript.strip():
        return Signal(raw_text="")

    text = transcript.lower()
    signal = Signal(
        raw_text=transcript,
        intent=detect_intent(text),
        urgency=detect_urgency(text),
        detected_topic=detect_topic(text, known_services),
    )
    logger.debug(
        "Classified call: intent=%s urgency=%s topic=%s",
        signal.intent, signal.urgency, signal.detected_topic,
    )
    return signal
