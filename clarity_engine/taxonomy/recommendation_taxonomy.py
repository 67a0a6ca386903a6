"""
Recommendation and lifecycle taxonomy.

  - ``Priority``     - triage tier shared by candidates and opportunities.
  - ``Complexity``   - effort needed to act on a recommendation; also the
                       user's declared tolerance ceiling.
  - ``Frequency``    - how often the user wants a fresh recommendation pass.
  - ``FocusArea``    - generator keys; declaration order is generation order.
  - ``RecommendationStatus`` / ``OpportunityStatus`` - lifecycle states.
  - ``EngagementAction`` - user reactions recorded against a recommendation.

This module has NO imports from any other ``clarity_engine`` package.
"""

from enum import StrEnum


class Priority(StrEnum):
    """Triage tier."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Complexity(StrEnum):
    """Implementation effort, ordered simple < moderate < advanced."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    ADVANCED = "advanced"


class Frequency(StrEnum):
    """Requested cadence of recommendation passes."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FocusArea(StrEnum):
    """Business areas a user can ask recommendations for.

    Values are the user-facing labels stored in preferences.
    """

    REVENUE_GROWTH = "Revenue Growth"
    OPERATIONAL_EFFICIENCY = "Operational Efficiency"
    CUSTOMER_ACQUISITION = "Customer Acquisition"
    TEAM_MANAGEMENT = "Team Management"
    FINANCIAL_HEALTH = "Financial Health"
    MARKETING_SALES = "Marketing & Sales"


class RecommendationStatus(StrEnum):
    """``ACTIVE`` is the only non-terminal state."""

    ACTIVE = "active"
    IMPLEMENTED = "implemented"
    DISMISSED = "dismissed"
    EXPIRED = "expired"


class OpportunityStatus(StrEnum):
    """``CONVERTED`` and ``DISMISSED`` are terminal."""

    PENDING = "pending"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    DISMISSED = "dismissed"


class EngagementAction(StrEnum):
    """User reaction to a recommendation."""

    IMPLEMENTED = "implemented"
    DISMISSED = "dismissed"
    RATED = "rated"
    """Carries a 1–5 rating; does not change recommendation status."""
