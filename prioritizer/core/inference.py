"""
Heuristics that fill in task attributes the user never set.

Every heuristic is a first-match-wins chain over ordered (keywords, result)
pairs. Keyword sets overlap ("review" a "project"), so the order of each
chain decides the outcome and must not be changed casually.
"""
from typing import Optional, Sequence, Tuple

from prioritizer.models.task import Task

# ------------------------------------------------------
# Importance lookups
# ------------------------------------------------------
DEFAULT_IMPORTANCE = 0.5
CATEGORY_IMPORTANCE = {
    "Work": 0.8,
    "Academic": 0.7,
    "Personal": 0.4,
}
PRIORITY_IMPORTANCE = {
    "High": 0.9,
    "Medium": 0.6,
    "Low": 0.3,
}
DEFAULT_PRIORITY_IMPORTANCE = 0.6
LONG_DESCRIPTION_CHARS = 100
LONG_DESCRIPTION_BONUS = 0.1

# ------------------------------------------------------
# Effort estimation (minutes)
# ------------------------------------------------------
QUICK_KEYWORDS = ("call", "email", "buy", "check", "review", "submit", "send")
HEAVY_KEYWORDS = ("research", "analyze", "create", "develop", "design", "study", "project")
MEDIUM_KEYWORDS = ("write", "update", "fix", "test", "organize")

# quick > heavy > medium
EFFORT_RULES: Sequence[Tuple[Sequence[str], int]] = (
    (QUICK_KEYWORDS, 15),
    (HEAVY_KEYWORDS, 90),
    (MEDIUM_KEYWORDS, 45),
)
# (min description length, minutes), checked longest first
DESCRIPTION_LENGTH_RULES: Sequence[Tuple[int, int]] = (
    (200, 60),
    (100, 30),
)
DEFAULT_EFFORT_MINUTES = 20

# ------------------------------------------------------
# Complexity estimation (0-10)
# ------------------------------------------------------
COMPLEX_KEYWORDS = ("analyze", "research", "design", "develop", "algorithm", "system")
SIMPLE_KEYWORDS = ("call", "email", "buy", "check")

COMPLEXITY_RULES: Sequence[Tuple[Sequence[str], int]] = (
    (COMPLEX_KEYWORDS, 8),
    (SIMPLE_KEYWORDS, 3),
)
DEFAULT_COMPLEXITY = 5


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def task_text(task: Task) -> str:
    """Lower-cased title and description, the haystack for keyword matching."""
    return f"{task.title or ''} {task.description or ''}".lower()


def _first_match(text: str, rules: Sequence[Tuple[Sequence[str], int]]) -> Optional[int]:
    for keywords, result in rules:
        if any(word in text for word in keywords):
            return result
    return None


def infer_importance(task: Task) -> float:
    """Importance from category, priority and description length."""
    score = CATEGORY_IMPORTANCE.get(task.category, DEFAULT_IMPORTANCE)
    score = max(score, PRIORITY_IMPORTANCE.get(task.priority, DEFAULT_PRIORITY_IMPORTANCE))

    if task.description and len(task.description) > LONG_DESCRIPTION_CHARS:
        score += LONG_DESCRIPTION_BONUS

    return clamp(score, 0.0, 1.0)


def estimate_effort_minutes(task: Task) -> int:
    matched = _first_match(task_text(task), EFFORT_RULES)
    if matched is not None:
        return matched

    description_length = len(task.description or "")
    for min_length, minutes in DESCRIPTION_LENGTH_RULES:
        if description_length > min_length:
            return minutes
    return DEFAULT_EFFORT_MINUTES


def infer_complexity(task: Task) -> int:
    matched = _first_match(task_text(task), COMPLEXITY_RULES)
    return matched if matched is not None else DEFAULT_COMPLEXITY


def resolve_estimate_minutes(task: Task) -> float:
    """Explicit estimate when given, otherwise the keyword estimate."""
    if task.estimateMinutes is not None:
        return task.estimateMinutes
    return estimate_effort_minutes(task)


def resolve_complexity(task: Task) -> float:
    if task.effortComplexity is not None:
        return task.effortComplexity
    return infer_complexity(task)
