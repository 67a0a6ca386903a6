"""
User-side inputs to a scoring pass.

``BusinessProfile`` and ``UserPreferences`` are read-only context values the
caller passes into every pure function; nothing in the engine caches them.
Every profile field is optional: a missing field widens candidate
applicability and contributes nothing to the score, it never raises.

``ChaosQuizResponse`` holds the onboarding quiz answers the chaos score is
computed from (see ``clarity_engine.profiling.chaos``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, Frequency


class PriceRange(BaseModel):
    """Typical job value band for the business, in whole currency units."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0)
    max: float = Field(ge=0)

    @model_validator(mode="after")
    def validate_order(self) -> "PriceRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must be <= max ({self.max}).")
        return self


class BusinessProfile(BaseModel):
    """What the engine knows about the business.

    Attributes:
        industry: Free-text industry label, e.g. ``"Plumbing"``.
        business_size: Size band, e.g. ``"solo"``, ``"small"``, ``"medium"``.
        chaos_indicator: 0–10 self-reported overwhelm level.
        price_range: Typical job value band, used for call value estimates.
        services: Known service names, matched against call transcripts
            before the built-in topic table.
    """

    model_config = ConfigDict(frozen=True)

    industry: Optional[str] = None
    business_size: Optional[str] = None
    chaos_indicator: Optional[float] = Field(default=None, ge=0, le=10)
    price_range: Optional[PriceRange] = None
    services: list[str] = []

    @field_validator("industry", "business_size", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class UserPreferences(BaseModel):
    """Settings that shape which candidates are generated and kept.

    Attributes:
        frequency: Pass cadence; determines the selection cap.
        focus_areas: Focus-area labels whose generators should run.
            Unknown labels are ignored at generation time.
        complexity_tolerance: Ceiling on candidate complexity.
        setup_preference: Onboarding setup choice (``"minimal"``, ``"guided"``,
            ``"connect"``). Decides the tolerance when ``complexity_tolerance``
            is not given explicitly.
    """

    model_config = ConfigDict(frozen=True)

    frequency: Frequency = Frequency.DAILY
    focus_areas: frozenset[str] = frozenset()
    complexity_tolerance: Complexity = Complexity.MODERATE
    setup_preference: Optional[str] = None


class ChaosQuizResponse(BaseModel):
    """Onboarding quiz answers.

    The six numeric answers are on a 1–10 scale. For ``revenue_predictability``
    and ``financial_tracking`` a higher answer means *less* chaos; the others
    are the reverse.
    """

    model_config = ConfigDict(frozen=True)

    daily_overwhelm: int = Field(ge=1, le=10)
    revenue_predictability: int = Field(ge=1, le=10)
    task_management_difficulty: int = Field(ge=1, le=10)
    financial_tracking: int = Field(ge=1, le=10)
    customer_communication: int = Field(ge=1, le=10)
    time_management: int = Field(ge=1, le=10)
    customer_acquisition: Optional[str] = None
    biggest_challenge: Optional[str] = None
