"""
Rule-based explanations for a task score.

Both the primary reason and the recommendation are picked by first-match-wins
chains: the rules below are evaluated top to bottom and the first one whose
condition holds is used.
"""
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from prioritizer.models.score import Explanation, ScoreBreakdownItem

# Fixed component order. Ties in the weighted ranking keep this order.
COMPONENTS = ("urgency", "importance", "timing", "effort", "history")
TOP_FACTOR_COUNT = 3

MSG_OVERDUE = "⚠️ Task is overdue and needs immediate attention"
MSG_DEADLINE_APPROACHING = "⏰ Deadline is approaching soon"
MSG_HIGH_IMPORTANCE = "🎯 High importance task that impacts your goals"
MSG_PERFECT_TIMING = "⭐ Perfect timing - matches your productive hours"
MSG_QUICK_WIN = "⚡ Quick win - low effort, high impact"
MSG_BALANCED = "📊 Balanced priority based on multiple factors"

MSG_TIME_SENSITIVE = "🕒 Time-sensitive deadline"
MSG_OPTIMAL_TIME = "🎯 Optimal time to tackle this"
MSG_EASY = "⚡ Easy to complete quickly"

REC_START_NOW = "Start immediately - deadline is critical"
REC_GOOD_TIME = "Perfect time to work on this"
REC_BREAK_DOWN = "Consider breaking this into smaller chunks"
REC_FOCUS_TIME = "Schedule focused time for this important task"
REC_NEXT_SESSION = "Good candidate for your next work session"

# (factor, condition on (value, overdue), message) - applied to the top factor only
PRIMARY_RULES: Sequence[Tuple[str, Callable[[float, bool], bool], str]] = (
    ("urgency", lambda value, overdue: value > 0.7 and overdue, MSG_OVERDUE),
    ("urgency", lambda value, overdue: value > 0.7, MSG_DEADLINE_APPROACHING),
    ("importance", lambda value, overdue: value > 0.7, MSG_HIGH_IMPORTANCE),
    ("timing", lambda value, overdue: value > 0.8, MSG_PERFECT_TIMING),
    ("effort", lambda value, overdue: value > 0.7, MSG_QUICK_WIN),
)

# (factor, threshold, message) - skipped when the factor is the top factor
SECONDARY_RULES: Sequence[Tuple[str, float, str]] = (
    ("urgency", 0.5, MSG_TIME_SENSITIVE),
    ("timing", 0.7, MSG_OPTIMAL_TIME),
    ("effort", 0.8, MSG_EASY),
)

RECOMMENDATION_RULES: Sequence[Tuple[Callable[[Dict[str, float]], bool], str]] = (
    (lambda c: c["urgency"] > 0.8, REC_START_NOW),
    (lambda c: c["timing"] > 0.8, REC_GOOD_TIME),
    (lambda c: c["effort"] < 0.3, REC_BREAK_DOWN),
    (lambda c: c["importance"] > 0.8, REC_FOCUS_TIME),
)


def rank_factors(components: Dict[str, float], weights: Dict[str, float]) -> List[ScoreBreakdownItem]:
    """All components ordered by weighted contribution, highest first."""
    items = [
        ScoreBreakdownItem(factor=name, value=components[name], weighted=components[name] * weights[name])
        for name in COMPONENTS
    ]
    return sorted(items, key=lambda item: item.weighted, reverse=True)


def primary_reason(top: ScoreBreakdownItem, overdue: bool) -> Optional[str]:
    for factor, condition, message in PRIMARY_RULES:
        if top.factor == factor and condition(top.value, overdue):
            return message
    return None


def generate_recommendation(components: Dict[str, float]) -> str:
    for condition, message in RECOMMENDATION_RULES:
        if condition(components):
            return message
    return REC_NEXT_SESSION


def generate_explanation(components: Dict[str, float], weights: Dict[str, float], overdue: bool) -> Explanation:
    """
    Builds the explanation for one score. `overdue` says whether the task's
    deadline is already behind the scoring instant.
    """
    breakdown = rank_factors(components, weights)[:TOP_FACTOR_COUNT]
    top = breakdown[0]

    reasons = []
    primary = primary_reason(top, overdue)
    if primary:
        reasons.append(primary)

    for factor, threshold, message in SECONDARY_RULES:
        if components[factor] > threshold and top.factor != factor:
            reasons.append(message)

    return Explanation(
        primaryReason=primary or MSG_BALANCED,
        allReasons=reasons,
        scoreBreakdown=breakdown,
        recommendation=generate_recommendation(components),
    )
