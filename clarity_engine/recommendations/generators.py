"""
Candidate generators, one per focus area.

Each generator is a pure function ``profile -> list[RecommendationCandidate]``
over a static catalog. A catalog entry either declares the industries and
business sizes it targets, or leaves them as ``None`` (universal). Universal
entries are tailored to the profile: the candidate's applicable sets become
the profile's own industry/size, so they earn the match bonuses when scored.

Exclusion happens here, before scoring: an entry with an explicit set that
does not contain the profile's value is dropped. A profile field that is
missing never excludes anything (applicability widens instead).

Comparison is case-insensitive ("hvac" matches "HVAC").
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from clarity_engine.models.profile import BusinessProfile, UserPreferences
from clarity_engine.models.recommendation import RecommendationCandidate
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, FocusArea, Priority

logger = logging.getLogger(__name__)

Generator = Callable[[BusinessProfile], list[RecommendationCandidate]]


@dataclass(frozen=True)
class _CatalogEntry:
    rec_type: str
    title: str
    description: str
    hook: str
    base_priority: Priority
    complexity: Complexity
    expected_impact: str
    time_to_implement: str
    reasoning: str
    industries: Optional[frozenset[str]] = None
    business_sizes: Optional[frozenset[str]] = None


def _matches(allowed: Optional[frozenset[str]], value: Optional[str]) -> bool:
    if allowed is None or value is None:
        return True
    return value.casefold() in {a.casefold() for a in allowed}


def _tailor(allowed: Optional[frozenset[str]], value: Optional[str]) -> frozenset[str]:
    if allowed is not None:
        return allowed
    return frozenset({value}) if value else frozenset()


def _materialize(
    catalog: tuple[_CatalogEntry, ...],
    focus_area: FocusArea,
    profile: BusinessProfile,
) -> list[RecommendationCandidate]:
    candidates: list[RecommendationCandidate] = []
    for entry in catalog:
        if not (
            _matches(entry.industries, profile.industry)
            and _matches(entry.business_sizes, profile.business_size)
        ):
            continue
        candidates.append(
            RecommendationCandidate(
                rec_type=entry.rec_type,
                title=entry.title,
                description=entry.description,
                base_priority=entry.base_priority,
                complexity=entry.complexity,
                applicable_industries=_tailor(entry.industries, profile.industry),
                applicable_business_sizes=_tailor(entry.business_sizes, profile.business_size),
                focus_area=focus_area,
                hook=entry.hook,
                expected_impact=entry.expected_impact,
                time_to_implement=entry.time_to_implement,
                reasoning=entry.reasoning,
            )
        )
    return candidates


_TEAM_SIZES = frozenset({"small", "medium", "large"})

# ── Catalogs ──────────────────────────────────────────────────────────────────

REVENUE_GROWTH_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Optimize Your Pricing Strategy",
        description="Review and adjust your pricing based on market analysis and competitor research.",
        hook="Proper pricing could increase your revenue by 15-25%",
        base_priority=Priority.HIGH,
        complexity=Complexity.MODERATE,
        expected_impact="+20% revenue",
        time_to_implement="1-2 weeks",
        reasoning="Pricing optimization is one of the fastest ways to increase revenue without additional costs.",
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Implement Upselling Strategies",
        description="Create systematic upselling processes to increase average transaction value.",
        hook="Upselling to existing customers is 5x more cost-effective than acquiring new ones",
        base_priority=Priority.HIGH,
        complexity=Complexity.SIMPLE,
        expected_impact="+30% average order value",
        time_to_implement="2-3 weeks",
        reasoning="Existing customers trust you and are more likely to purchase additional services.",
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Offer Emergency Service Premium Pricing",
        description="Publish an after-hours and emergency rate card and quote it on every urgent call.",
        hook="Emergency calls are your highest-margin jobs when priced for the disruption",
        base_priority=Priority.HIGH,
        complexity=Complexity.SIMPLE,
        expected_impact="+15% revenue on urgent jobs",
        time_to_implement="1 week",
        reasoning="Customers with a burst pipe value speed over price; a clear premium captures that.",
        industries=frozenset({"Plumbing"}),
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Add Smart Home Installation Services",
        description="Train for and market installation of smart thermostats, lighting and EV chargers.",
        hook="Smart home upgrades are the fastest-growing residential electrical work",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.ADVANCED,
        expected_impact="New high-ticket service line",
        time_to_implement="1-2 months",
        reasoning="It builds on existing licensing and pulls in customers who would not call for repairs.",
        industries=frozenset({"Electrical"}),
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Create Seasonal Maintenance Packages",
        description="Bundle spring cooling and autumn heating tune-ups into a prepaid annual package.",
        hook="Prepaid tune-ups fill your calendar before the seasonal rush",
        base_priority=Priority.HIGH,
        complexity=Complexity.MODERATE,
        expected_impact="+25% off-season bookings",
        time_to_implement="2-3 weeks",
        reasoning="Seasonal demand swings are the main source of HVAC revenue volatility.",
        industries=frozenset({"HVAC"}),
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Develop Year-Round Revenue Streams",
        description="Add snow removal, holiday lighting or indoor plant care to cover the winter months.",
        hook="Stop losing three months of revenue every winter",
        base_priority=Priority.HIGH,
        complexity=Complexity.MODERATE,
        expected_impact="+30% winter revenue",
        time_to_implement="1-2 months",
        reasoning="Landscaping demand is seasonal; complementary services keep crews and cash flow steady.",
        industries=frozenset({"Landscaping"}),
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Develop Maintenance Contracts",
        description="Offer monthly maintenance agreements with priority scheduling for subscribers.",
        hook="Turn one-off jobs into predictable monthly revenue",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.MODERATE,
        expected_impact="Predictable recurring revenue",
        time_to_implement="2-4 weeks",
        reasoning="Recurring contracts smooth cash flow and raise customer lifetime value.",
    ),
    _CatalogEntry(
        rec_type="revenue_growth",
        title="Implement Dynamic Pricing",
        description="Adjust rates by demand and season using booking volume and lead time.",
        hook="Charge what peak-season slots are actually worth",
        base_priority=Priority.LOW,
        complexity=Complexity.ADVANCED,
        expected_impact="+10% margin",
        time_to_implement="1-2 months",
        reasoning="Businesses with steady demand data can price peak slots higher without losing volume.",
        business_sizes=frozenset({"medium", "large"}),
    ),
)

EFFICIENCY_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry(
        rec_type="efficiency",
        title="Automate Routine Administrative Tasks",
        description="Implement automation tools for scheduling, invoicing, and customer communications.",
        hook="Save 10+ hours per week with smart automation",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.MODERATE,
        expected_impact="+10 hours/week",
        time_to_implement="1-3 weeks",
        reasoning="Automation frees up time for revenue-generating activities and reduces errors.",
    ),
    _CatalogEntry(
        rec_type="efficiency",
        title="Create Standard Job Checklists",
        description="Write a one-page checklist for each common job type and use it on every visit.",
        hook="Stop redoing work that was missed the first time",
        base_priority=Priority.LOW,
        complexity=Complexity.SIMPLE,
        expected_impact="Fewer callbacks",
        time_to_implement="1 week",
        reasoning="Checklists cut rework and make it easier to hand jobs to new staff.",
    ),
    _CatalogEntry(
        rec_type="efficiency",
        title="Implement Drone Inspections",
        description="Use drones for roof surveys to quote faster without climbing every roof.",
        hook="Quote a roof in 20 minutes from the driveway",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.ADVANCED,
        expected_impact="-50% inspection time",
        time_to_implement="1-2 months",
        reasoning="Faster, safer inspections raise quote volume and reduce fall risk.",
        industries=frozenset({"Roofing"}),
    ),
)

CUSTOMER_ACQUISITION_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry(
        rec_type="customer_acquisition",
        title="Implement Referral Program",
        description="Create a systematic referral program to leverage your existing customer base.",
        hook="Referral programs can generate 30% of new business for service companies",
        base_priority=Priority.HIGH,
        complexity=Complexity.SIMPLE,
        expected_impact="+30% new customers",
        time_to_implement="2-4 weeks",
        reasoning="Word-of-mouth referrals have the highest conversion rate and lowest acquisition cost.",
    ),
    _CatalogEntry(
        rec_type="customer_acquisition",
        title="Partner with Real Estate Agents",
        description="Offer pre-listing and post-purchase work packages to local agents.",
        hook="Every home sale is a renovation lead",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.MODERATE,
        expected_impact="Steady referral pipeline",
        time_to_implement="1 month",
        reasoning="Agents need reliable contractors on short notice and refer repeatedly.",
        industries=frozenset({"General Contractor"}),
    ),
    _CatalogEntry(
        rec_type="customer_acquisition",
        title="Build Strategic Partnerships",
        description="Set up referral agreements with complementary trades that serve the same customers.",
        hook="Your neighbours in the trade already have your next customers",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.MODERATE,
        expected_impact="+15% new customers",
        time_to_implement="1 month",
        reasoning="Partner referrals arrive pre-qualified and cost nothing per lead.",
        business_sizes=_TEAM_SIZES,
    ),
)

TEAM_MANAGEMENT_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry(
        rec_type="team_management",
        title="Implement Team Performance Tracking",
        description="Set up KPIs and regular performance reviews to optimize team productivity.",
        hook="Clear performance metrics increase team productivity by 25%",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.MODERATE,
        expected_impact="+25% team productivity",
        time_to_implement="2-3 weeks",
        reasoning="What gets measured gets managed - clear metrics improve accountability and performance.",
        business_sizes=_TEAM_SIZES,
    ),
)

FINANCIAL_HEALTH_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry(
        rec_type="financial_health",
        title="Set Up Cash Flow Forecasting",
        description="Implement monthly cash flow projections to prevent financial surprises.",
        hook="Cash flow issues kill 82% of small businesses - stay ahead of the curve",
        base_priority=Priority.HIGH,
        complexity=Complexity.SIMPLE,
        expected_impact="Avoid cash flow crises",
        time_to_implement="1-2 weeks",
        reasoning="Proactive cash flow management prevents business-threatening financial gaps.",
    ),
)

MARKETING_SALES_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry(
        rec_type="marketing_sales",
        title="Optimize Your Google Business Profile",
        description="Complete and regularly update your Google Business Profile to improve local visibility.",
        hook="Optimized Google profiles get 5x more views than incomplete ones",
        base_priority=Priority.HIGH,
        complexity=Complexity.SIMPLE,
        expected_impact="+50% local visibility",
        time_to_implement="1 week",
        reasoning="Local search is crucial for service businesses - most customers search locally first.",
    ),
    _CatalogEntry(
        rec_type="marketing_sales",
        title="Create Premium Service Tiers",
        description="Package good/better/best options on every quote so customers can choose to spend more.",
        hook="A third of customers pick the premium option when it is offered",
        base_priority=Priority.MEDIUM,
        complexity=Complexity.SIMPLE,
        expected_impact="+15% average ticket",
        time_to_implement="1 week",
        reasoning="Tiered quotes anchor price and make upgrades the customer's idea.",
    ),
)


# ── Generators ────────────────────────────────────────────────────────────────


def generate_revenue_growth(profile: BusinessProfile) -> list[RecommendationCandidate]:
    return _materialize(REVENUE_GROWTH_CATALOG, FocusArea.REVENUE_GROWTH, profile)


def generate_operational_efficiency(profile: BusinessProfile) -> list[RecommendationCandidate]:
    return _materialize(EFFICIENCY_CATALOG, FocusArea.OPERATIONAL_EFFICIENCY, profile)


def generate_customer_acquisition(profile: BusinessProfile) -> list[RecommendationCandidate]:
    return _materialize(CUSTOMER_ACQUISITION_CATALOG, FocusArea.CUSTOMER_ACQUISITION, profile)


def generate_team_management(profile: BusinessProfile) -> list[RecommendationCandidate]:
    return _materialize(TEAM_MANAGEMENT_CATALOG, FocusArea.TEAM_MANAGEMENT, profile)


def generate_financial_health(profile: BusinessProfile) -> list[RecommendationCandidate]:
    return _materialize(FINANCIAL_HEALTH_CATALOG, FocusArea.FINANCIAL_HEALTH, profile)


def generate_marketing_sales(profile: BusinessProfile) -> list[RecommendationCandidate]:
    return _materialize(MARKETING_SALES_CATALOG, FocusArea.MARKETING_SALES, profile)


GENERATORS: dict[FocusArea, Generator] = {
    FocusArea.REVENUE_GROWTH:         generate_revenue_growth,
    FocusArea.OPERATIONAL_EFFICIENCY: generate_operational_efficiency,
    FocusArea.CUSTOMER_ACQUISITION:   generate_customer_acquisition,
    FocusArea.TEAM_MANAGEMENT:        generate_team_management,
    FocusArea.FINANCIAL_HEALTH:       generate_financial_health,
    FocusArea.MARKETING_SALES:        generate_marketing_sales,
}


def resolve_focus_areas(tags: frozenset[str] | set[str]) -> list[FocusArea]:
    """Map preference tags to known focus areas, in declaration order.

    Matching ignores case and surrounding whitespace. Unknown tags are
    logged and dropped.
    """
    wanted = {tag.strip().casefold() for tag in tags}
    known = {area.value.casefold() for area in FocusArea}
    for unknown in sorted(wanted - known):
        logger.debug("Ignoring unknown focus area %r.", unknown)
    return [area for area in FocusArea if area.value.casefold() in wanted]


def generate_candidates(
    profile: BusinessProfile,
    preferences: UserPreferences,
) -> list[RecommendationCandidate]:
    """Run every generator the user asked for and merge their output.

    Generators run in ``FocusArea`` declaration order, so the result (and the
    tie-break order used by selection) is deterministic. A ``(rec_type,
    title)`` pair produced twice is kept once, first occurrence wins.

    Args:
        profile: Business context.
        preferences: Supplies ``focus_areas``.

    Returns:
        Untriaged candidates in generation order.
    """
    seen: set[tuple[str, str]] = set()
    candidates: list[RecommendationCandidate] = []
    for area in resolve_focus_areas(preferences.focus_areas):
        for candidate in GENERATORS[area](profile):
            if candidate.identity in seen:
                continue
            seen.add(candidate.identity)
            candidates.append(candidate)

    logger.debug(
        "Generated %d candidates for industry=%s size=%s",
        len(candidates), profile.industry, profile.business_size,
    )
    return candidates
