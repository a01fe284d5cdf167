from datetime import datetime
from typing import Optional
import math

from prioritizer.models.task import Task
from prioritizer.models.user_context import UserContext
from prioritizer.core.inference import (
    clamp,
    infer_importance,
    resolve_complexity,
    resolve_estimate_minutes,
)

# ------------------------------------------------------
# CONFIG CONSTANTS for Scoring
# ------------------------------------------------------

# Urgency
HARD_DEADLINE_MULTIPLIER = 1.2

# Timing: (max hour distance, score), checked in order
START_TIME_BANDS = (
    (1, 1.0),
    (2, 0.8),
    (4, 0.6),
)
START_TIME_FALLBACK = 0.3
NEUTRAL_TIMING = 0.5
WORK_HOURS = (9, 17)
WORK_HOURS_TIMING = 0.9
PERSONAL_EVENING_FROM = 18
PERSONAL_MORNING_UNTIL = 8
PERSONAL_OFF_HOURS_TIMING = 0.8
WEEKEND_DAYS = (5, 6)  # Saturday, Sunday
WEEKEND_WORK_FACTOR = 0.7
PRODUCTIVE_HOUR_FACTOR = 1.2

# Effort
HIGH_COMPLEXITY = 7
HIGH_COMPLEXITY_FACTOR = 0.9

# History
DEFAULT_COMPLETION_RATE = 0.8
STALE_AFTER_DAYS = 30
STALE_PENALTY = 0.9
W_POSTPONE = 0.4
W_COMPLETION = 0.4
W_AGE = 0.2

# Behaviour multiplier
DEFAULT_POSITIVE_SIGNAL_RATIO = 0.8
POSITIVE_SIGNAL_WEIGHT = 0.1
STREAK_BONUS_PER_COMPLETION = 0.02
MAX_STREAK_BONUS = 0.2
BEHAVIOR_BOUNDS = (0.8, 1.3)

# Context multiplier
DEVICE_MISMATCH_FACTOR = 0.7
LOCATION_MISMATCH_FACTOR = 0.9
LOW_ENERGY_COMPLEX_FACTOR = 0.8
CONTEXT_BOUNDS = (0.7, 1.3)


# ------------------------------------------------------
# Helper Functions
# ------------------------------------------------------

def align_to(moment: datetime, now: datetime) -> datetime:
    """
    Makes `moment` comparable with `now`. A naive moment is read in now's
    zone; an aware moment against a naive now is converted to local wall time.
    """
    if moment.tzinfo is None and now.tzinfo is not None:
        return moment.replace(tzinfo=now.tzinfo)
    if moment.tzinfo is not None and now.tzinfo is None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def hours_until(moment: datetime, now: datetime) -> float:
    return (align_to(moment, now) - now).total_seconds() / 3600.0


def is_overdue(task: Task, now: datetime) -> bool:
    return task.dueDate is not None and align_to(task.dueDate, now) < now


# ------------------------------------------------------
# Component Scorers (each returns a value in [0, 1])
# ------------------------------------------------------

def urgency_score(task: Task, now: datetime, window_hours: float) -> float:
    """Linear ramp from 0 (window_hours out) to 1 (due now or overdue)."""
    if task.dueDate is None:
        return 0.0

    hours_left = hours_until(task.dueDate, now)
    if hours_left <= 0:
        return 1.0

    ratio = clamp(1.0 - hours_left / window_hours, 0.0, 1.0)
    multiplier = HARD_DEADLINE_MULTIPLIER if task.dueType == "hard" else 1.0
    return clamp(ratio * multiplier, 0.0, 1.0)


def normalize_importance(raw: float) -> float:
    """Maps a 0-100 or 0-10 importance onto 0-1."""
    if raw > 10:
        raw = raw / 100.0
    elif raw > 1:
        raw = raw / 10.0
    return clamp(raw, 0.0, 1.0)


def importance_score(task: Task) -> float:
    if task.importance is not None:
        return normalize_importance(task.importance)
    return infer_importance(task)


def timing_score(task: Task, user_context: UserContext, local_now: datetime) -> float:
    """
    Fit between the current wall-clock time and when the task is best done.
    `local_now` must already be in the user's timezone.
    """
    current_hour = local_now.hour
    score = NEUTRAL_TIMING

    start_hour = task.start_hour
    if start_hour is not None:
        distance = abs(current_hour - start_hour)
        score = START_TIME_FALLBACK
        for max_distance, band_score in START_TIME_BANDS:
            if distance <= max_distance:
                score = band_score
                break
    elif task.category == "Work" and WORK_HOURS[0] <= current_hour <= WORK_HOURS[1]:
        score = WORK_HOURS_TIMING
    elif task.category == "Personal" and (
        current_hour >= PERSONAL_EVENING_FROM or current_hour <= PERSONAL_MORNING_UNTIL
    ):
        score = PERSONAL_OFF_HOURS_TIMING

    if task.category == "Work" and local_now.weekday() in WEEKEND_DAYS:
        score *= WEEKEND_WORK_FACTOR

    if current_hour in user_context.productiveHours:
        score *= PRODUCTIVE_HOUR_FACTOR

    return clamp(score, 0.0, 1.0)


def effort_score(task: Task, max_effort_minutes: float) -> float:
    """Quick wins score high; anything at or beyond max_effort_minutes scores 0."""
    estimate = resolve_estimate_minutes(task)
    effort_norm = min(estimate / max_effort_minutes, 1.0)
    score = 1.0 - effort_norm

    if resolve_complexity(task) > HIGH_COMPLEXITY:
        score *= HIGH_COMPLEXITY_FACTOR

    return clamp(score, 0.0, 1.0)


def history_score(task: Task, now: datetime, postpone_penalty_rate: float) -> float:
    postpone_penalty = math.exp(-postpone_penalty_rate * task.timesPostponed)
    completion_rate = task.completionRate if task.completionRate is not None else DEFAULT_COMPLETION_RATE

    age_penalty = 1.0
    if task.createdAt is not None:
        age_days = -hours_until(task.createdAt, now) / 24.0
        if age_days > STALE_AFTER_DAYS:
            age_penalty = STALE_PENALTY

    score = W_POSTPONE * postpone_penalty + W_COMPLETION * completion_rate + W_AGE * age_penalty
    return clamp(score, 0.0, 1.0)


# ------------------------------------------------------
# Multipliers
# ------------------------------------------------------

def behavior_multiplier(user_context: UserContext) -> float:
    """User-level momentum; the same for every task in a batch."""
    ratio = user_context.recentPositiveSignalRatio
    if ratio is None:
        ratio = DEFAULT_POSITIVE_SIGNAL_RATIO

    streak_bonus = 0.0
    if user_context.completionStreak:
        streak_bonus = min(user_context.completionStreak * STREAK_BONUS_PER_COMPLETION, MAX_STREAK_BONUS)

    return clamp(1.0 + POSITIVE_SIGNAL_WEIGHT * ratio + streak_bonus, *BEHAVIOR_BOUNDS)


def context_multiplier(task: Task, user_context: UserContext) -> float:
    multiplier = 1.0

    if task.requiredDevice == "laptop" and user_context.device == "mobile":
        multiplier *= DEVICE_MISMATCH_FACTOR

    if task.preferredLocation and user_context.location != task.preferredLocation:
        multiplier *= LOCATION_MISMATCH_FACTOR

    # Only an explicit complexity counts here, not the inferred one
    complexity: Optional[float] = task.effortComplexity
    if user_context.energyLevel == "low" and complexity is not None and complexity > HIGH_COMPLEXITY:
        multiplier *= LOW_ENERGY_COMPLEX_FACTOR

    return clamp(multiplier, *CONTEXT_BOUNDS)
