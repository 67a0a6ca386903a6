"""
Business chaos score from the onboarding quiz.

Score formula (0–100, higher = more chaotic)
--------------------------------------------
    raw = (
        daily_overwhelm                  * 10
        + (11 - revenue_predictability)  * 8
        + task_management_difficulty     * 8
        + (11 - financial_tracking)      * 6
        + customer_communication         * 6
        + time_management                * 8
        + acquisition_chaos              # lookup on customer_acquisition
        + challenge_chaos                # lookup on biggest_challenge
    )
    score = min(100, round_half_up(raw / 5))

The 0–10 ``chaos_indicator`` on ``BusinessProfile`` is ``score / 10``.

``quick_wins`` and ``chaos_factors`` read the same answers: each rule fires on
one answer crossing a threshold. Quick wins are padded from a fixed list to at
least three and capped at four; chaos factors are neither padded nor capped.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Callable, Optional

from clarity_engine.models.profile import ChaosQuizResponse
from clarity_engine.utils.numeric import clamp, round_half_up

MAX_CHAOS_SCORE = 100

ACQUISITION_CHAOS: dict[str, int] = {
    "repeat customers": 10,
    "referrals":        15,
    "online marketing": 25,
    "cold outreach":    35,
    "other":            30,
}
DEFAULT_ACQUISITION_CHAOS = 30

CHALLENGE_CHAOS: dict[str, int] = {
    "pricing/profitability": 15,
    "team coordination":     20,
    "time management":       25,
    "managing cash flow":    30,
    "finding customers":     35,
}
DEFAULT_CHALLENGE_CHAOS = 25


class ClarityZone(StrEnum):
    """Coarse band of the chaos score, used for dashboard framing."""

    CHAOS = "chaos"
    CONTROL = "control"
    CLARITY = "clarity"


def _lookup(table: dict[str, int], answer: Optional[str], default: int) -> int:
    if not answer:
        return default
    return table.get(answer.strip().casefold(), default)


def calculate_chaos_score(responses: ChaosQuizResponse) -> int:
    """Compute the 0–100 chaos score.

    Args:
        responses: Validated quiz answers.

    Returns:
        Integer score, capped at 100.
    """
    raw = (
        responses.daily_overwhelm * 10
        + (11 - responses.revenue_predictability) * 8
        + responses.task_management_difficulty * 8
        + (11 - responses.financial_tracking) * 6
        + responses.customer_communication * 6
        + responses.time_management * 8
        + _lookup(ACQUISITION_CHAOS, responses.customer_acquisition, DEFAULT_ACQUISITION_CHAOS)
        + _lookup(CHALLENGE_CHAOS, responses.biggest_challenge, DEFAULT_CHALLENGE_CHAOS)
    )
    return min(MAX_CHAOS_SCORE, round_half_up(raw / 5))


def clarity_zone(score: int) -> ClarityZone:
    """70+ is chaos, 40–69 control, below 40 clarity."""
    if score >= 70:
        return ClarityZone.CHAOS
    if score >= 40:
        return ClarityZone.CONTROL
    return ClarityZone.CLARITY


def chaos_indicator(score: int) -> float:
    """Convert a 0–100 chaos score to the 0–10 indicator the scorer reads."""
    return clamp(score, 0, MAX_CHAOS_SCORE) / 10


# ── Quick wins and chaos factors ──────────────────────────────────────────────

QuizRule = tuple[Callable[[ChaosQuizResponse], bool], str]

QUICK_WIN_RULES: tuple[QuizRule, ...] = (
    (lambda r: r.daily_overwhelm >= 7,
     "Set up a daily task priority system (impact: immediate stress reduction)"),
    (lambda r: r.revenue_predictability <= 4,
     "Track monthly recurring revenue and create 90-day cash flow forecast"),
    (lambda r: r.financial_tracking <= 5,
     "Set up automated expense tracking with receipt scanning"),
    (lambda r: r.customer_communication >= 6,
     "Create standard response templates for common customer questions"),
    (lambda r: r.time_management >= 7,
     "Block 2-hour focus periods in your calendar for important work"),
)

FALLBACK_QUICK_WINS: tuple[str, ...] = (
    "Automate appointment scheduling with online booking",
    "Set up customer follow-up email sequences",
    "Create standardized pricing sheets for common services",
)

MIN_QUICK_WINS = 3
MAX_QUICK_WINS = 4

CHAOS_FACTOR_RULES: tuple[QuizRule, ...] = (
    (lambda r: r.daily_overwhelm >= 7,
     "High daily overwhelm affecting decision quality"),
    (lambda r: r.revenue_predictability <= 4,
     "Unpredictable revenue creating financial stress"),
    (lambda r: r.task_management_difficulty >= 7,
     "Difficulty managing multiple tasks simultaneously"),
    (lambda r: r.time_management >= 7,
     "Poor time management leading to missed opportunities"),
    (lambda r: r.customer_communication >= 7,
     "Communication issues causing customer dissatisfaction"),
)


def quick_wins(responses: ChaosQuizResponse) -> list[str]:
    """Immediate actions suggested by the quiz answers.

    Rules fire in a fixed order. Fewer than three hits are topped up from the
    start of ``FALLBACK_QUICK_WINS``; more than four are cut to the first four.
    """
    wins = [text for applies, text in QUICK_WIN_RULES if applies(responses)]
    if len(wins) < MIN_QUICK_WINS:
        wins.extend(FALLBACK_QUICK_WINS[: MIN_QUICK_WINS - len(wins)])
    return wins[:MAX_QUICK_WINS]


def chaos_factors(responses: ChaosQuizResponse) -> list[str]:
    """Answers that drive the score up, in rule order; empty for a calm quiz."""
    return [text for applies, text in CHAOS_FACTOR_RULES if applies(responses)]
