"""
Follow-up planning for a classified call.

Everything here is a pure function of the ``Signal``: the triage priority of
the resulting opportunity, whether an opportunity is opened at all, the
suggested next steps, and the one-line summary shown on the dashboard.
"""

from __future__ import annotations

from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.recommendation_taxonomy import Priority
from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency

SUMMARY_EXCERPT_CHARS = 100

MISSED_CALL_SUMMARY = "Missed call - customer did not leave a message"

# ── Next-step templates ───────────────────────────────────────────────────────

_MISSED_CALL_ACTIONS = ("Call back to follow up on missed call",)

_ACTIONS_BY_INTENT: dict[Intent, tuple[str, ...]] = {
    Intent.EMERGENCY: (
        "Schedule emergency service within 2 hours",
        "Send emergency contact information",
    ),
    Intent.PRICING: (
        "Prepare detailed quote based on requirements",
        "Schedule site visit if needed",
    ),
    Intent.SCHEDULING: (
        "Check availability and confirm appointment",
        "Send appointment confirmation",
    ),
    Intent.GENERAL_INQUIRY: (
        "Follow up with additional information",
        "Send service brochure",
    ),
}

_INTENT_LABELS: dict[Intent, str] = {
    Intent.EMERGENCY: "an emergency",
    Intent.PRICING: "pricing",
    Intent.SCHEDULING: "scheduling",
    Intent.GENERAL_INQUIRY: "a general inquiry",
}


def opportunity_priority(signal: Signal) -> Priority:
    """Triage tier for the opportunity a call raises.

    High urgency wins even when the intent is a quote or booking.
    """
    if signal.urgency == Urgency.HIGH or signal.intent == Intent.EMERGENCY:
        return Priority.HIGH
    if signal.intent in (Intent.PRICING, Intent.SCHEDULING):
        return Priority.MEDIUM
    return Priority.LOW


def should_open_opportunity(signal: Signal) -> bool:
    """Whether the call is worth tracking as an opportunity.

    Missed calls always are (recovering them is the point); answered general
    inquiries with no urgency are not.
    """
    if signal.is_missed_call:
        return True
    return opportunity_priority(signal) in (Priority.HIGH, Priority.MEDIUM)


def follow_up_actions(signal: Signal) -> list[str]:
    """Ordered next steps for whoever handles the call."""
    if signal.is_missed_call:
        return list(_MISSED_CALL_ACTIONS)
    return list(_ACTIONS_BY_INTENT[signal.intent])


def summarize_call(signal: Signal) -> str:
    """One-line human summary of the call.

    Example::

        Customer called regarding pricing for plumbing. Urgency level: low.
        Can I get a quote for drain cleaning?
    """
    if signal.is_missed_call:
        return MISSED_CALL_SUMMARY

    topic = f" for {signal.detected_topic}" if signal.detected_topic else ""
    text = " ".join(signal.raw_text.split())
    excerpt = text[:SUMMARY_EXCERPT_CHARS]
    if len(text) > SUMMARY_EXCERPT_CHARS:
        excerpt += "..."
    return (
        f"Customer called regarding {_INTENT_LABELS[signal.intent]}{topic}. "
        f"Urgency level: {signal.urgency}. {excerpt}"
    )


def opportunity_title(signal: Signal) -> str:
    """Short dashboard title for the opportunity."""
    if signal.is_missed_call:
        return "Missed call"
    subject = signal.detected_topic or "service"
    if signal.intent == Intent.EMERGENCY:
        return f"Emergency {subject} call"
    if signal.intent == Intent.PRICING:
        return f"Quote request: {subject}"
    if signal.intent == Intent.SCHEDULING:
        return f"Appointment request: {subject}"
    return f"Inquiry: {subject}"
