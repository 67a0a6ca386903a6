"""
Call-signal taxonomy.

Two orthogonal dimensions describe every classified call:
  - ``Intent``  - the *what*: what is the caller asking for?
  - ``Urgency`` - the *when*: how quickly does the business need to react?

Usage example::

    from clarity_engine.taxonomy.signal_taxonomy import Intent, Urgency

    intent  = Intent.PRICING
    urgency = Urgency.MEDIUM

This module has NO imports from any other ``clarity_engine`` package.
"""

from enum import StrEnum


class Intent(StrEnum):
    """What the caller wants."""

    EMERGENCY = "emergency"
    """Something is failing right now (flooding, leak, outage)."""

    PRICING = "pricing"
    """Quote, estimate, or cost question."""

    SCHEDULING = "scheduling"
    """Booking or moving an appointment."""

    GENERAL_INQUIRY = "general_inquiry"
    """Anything else, including missed calls with no transcript."""


class Urgency(StrEnum):
    """How soon the business should respond."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
