from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import math

from pydantic import BaseModel, Field

from prioritizer import config
from prioritizer.models.task import Task
from prioritizer.models.user_context import UserContext
from prioritizer.models.score import (
    AIInsights,
    ComponentScores,
    Multipliers,
    RankedTask,
    ScoreResult,
)
from prioritizer.core.inference import clamp
from prioritizer.core.explainer import COMPONENTS, generate_explanation
from prioritizer.core.scorer import (
    behavior_multiplier,
    context_multiplier,
    effort_score,
    history_score,
    importance_score,
    is_overdue,
    timing_score,
    urgency_score,
)

logger = logging.getLogger(__name__)

# ------------------------------------------------------
# CONFIG CONSTANTS (defaults for a fresh engine)
# ------------------------------------------------------
DEFAULT_WEIGHTS = {
    "urgency": 0.33,
    "importance": 0.28,
    "timing": 0.15,
    "effort": 0.12,
    "history": 0.12,
}
URGENCY_WINDOW_HOURS = 72.0
MAX_EFFORT_MINUTES = 120.0
POSTPONE_PENALTY_RATE = 0.4
WEIGHT_SUM_TOLERANCE = 1e-6

# aiInsights thresholds
URGENT_THRESHOLD = 0.7
WELL_TIMED_THRESHOLD = 0.7
HEAVY_EFFORT_THRESHOLD = 0.3
FOCUS_IMPORTANCE_THRESHOLD = 0.8


class ScoringConfigError(ValueError):
    """Raised when an engine is built with an unusable configuration."""


class ScoringWeights(BaseModel):
    urgency: float = DEFAULT_WEIGHTS["urgency"]
    importance: float = DEFAULT_WEIGHTS["importance"]
    timing: float = DEFAULT_WEIGHTS["timing"]
    effort: float = DEFAULT_WEIGHTS["effort"]
    history: float = DEFAULT_WEIGHTS["history"]

    class Config:
        frozen = True

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in COMPONENTS}


class ScoringConfig(BaseModel):
    """Engine configuration. Frozen: it cannot change once the engine exists."""
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    urgency_window_hours: float = URGENCY_WINDOW_HOURS
    max_effort_minutes: float = MAX_EFFORT_MINUTES
    postpone_penalty_rate: float = POSTPONE_PENALTY_RATE

    class Config:
        frozen = True


# ------------------------------------------------------
# Helper Functions
# ------------------------------------------------------
def _resolve_weights(weights: Union[ScoringWeights, Mapping[str, Any], None]) -> ScoringWeights:
    if weights is None:
        return ScoringWeights()
    if isinstance(weights, ScoringWeights):
        resolved = weights
    elif isinstance(weights, Mapping):
        unknown = set(weights) - set(COMPONENTS)
        missing = set(COMPONENTS) - set(weights)
        if unknown or missing:
            raise ScoringConfigError(
                f"Weights must define exactly {', '.join(COMPONENTS)} "
                f"(missing: {sorted(missing)}, unknown: {sorted(unknown)})"
            )
        try:
            resolved = ScoringWeights(**{name: float(weights[name]) for name in COMPONENTS})
        except (TypeError, ValueError) as e:
            raise ScoringConfigError(f"Weights must be numeric: {e}") from e
    else:
        raise ScoringConfigError(f"Unsupported weights type: {type(weights).__name__}")

    values = resolved.as_dict()
    if any(not math.isfinite(v) or v < 0 for v in values.values()):
        raise ScoringConfigError(f"Weights must be finite and non-negative: {values}")
    total = sum(values.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ScoringConfigError(f"Weights must sum to 1.0, got {total:.6f}")
    return resolved


def _user_zone(user_context: UserContext) -> Optional[ZoneInfo]:
    if not user_context.timezone:
        return None
    try:
        return ZoneInfo(user_context.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.debug("Unknown timezone %r, using server local time", user_context.timezone)
        return None


def current_time(user_context: Optional[UserContext] = None) -> datetime:
    """Wall-clock now, aware, in the user's timezone when one is known."""
    zone = _user_zone(user_context) if user_context is not None else None
    if zone is not None:
        return datetime.now(zone)
    return datetime.now().astimezone()


def _local_now(now: datetime, user_context: UserContext) -> datetime:
    """`now` expressed in the user's zone, for hour-of-day and weekday checks."""
    zone = _user_zone(user_context)
    if zone is None or now.tzinfo is None:
        return now
    return now.astimezone(zone)


def _coerce_task(task: Any) -> Task:
    if isinstance(task, Task):
        return task
    if isinstance(task, Mapping):
        return Task.model_validate(dict(task))
    raise TypeError(f"Task records must be mappings or Task models, got {type(task).__name__}")


def _coerce_context(user_context: Any) -> UserContext:
    if user_context is None:
        return UserContext()
    if isinstance(user_context, UserContext):
        return user_context
    if isinstance(user_context, Mapping):
        return UserContext.model_validate(dict(user_context))
    raise TypeError(f"userContext must be a mapping or UserContext, got {type(user_context).__name__}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ------------------------------------------------------
# THE PRIORITIZATION ENGINE
# ------------------------------------------------------
class TaskPrioritizer:
    """
    Stateless multi-factor task scorer. Configuration is fixed at
    construction; every scoring call is a pure function of its arguments, so
    one instance can be shared across threads and requests.
    """

    def __init__(
        self,
        weights: Union[ScoringWeights, Mapping[str, Any], None] = None,
        urgency_window_hours: float = URGENCY_WINDOW_HOURS,
        max_effort_minutes: float = MAX_EFFORT_MINUTES,
        postpone_penalty_rate: float = POSTPONE_PENALTY_RATE,
    ):
        if not urgency_window_hours > 0:
            raise ScoringConfigError(f"urgency_window_hours must be > 0, got {urgency_window_hours}")
        if not max_effort_minutes > 0:
            raise ScoringConfigError(f"max_effort_minutes must be > 0, got {max_effort_minutes}")
        if not postpone_penalty_rate >= 0:
            raise ScoringConfigError(f"postpone_penalty_rate must be >= 0, got {postpone_penalty_rate}")

        self.config = ScoringConfig(
            weights=_resolve_weights(weights),
            urgency_window_hours=urgency_window_hours,
            max_effort_minutes=max_effort_minutes,
            postpone_penalty_rate=postpone_penalty_rate,
        )
        logger.debug("Prioritizer ready: %s", self.config)

    @property
    def weights(self) -> Dict[str, float]:
        return self.config.weights.as_dict()

    # --- 1. Single task ---
    def score(
        self,
        task: Union[Task, Mapping[str, Any]],
        now: datetime,
        user_context: Union[UserContext, Mapping[str, Any], None] = None,
        ml_adjustment: float = 0.0,
    ) -> ScoreResult:
        """
        Scores one task at the instant `now`.

        ml_adjustment is an opaque caller-supplied nudge added after the
        multipliers. It is not range-checked; the final clamp to [0, 1]
        absorbs out-of-range values.
        """
        task = _coerce_task(task)
        ctx = _coerce_context(user_context)
        cfg = self.config

        components = {
            "urgency": urgency_score(task, now, cfg.urgency_window_hours),
            "importance": importance_score(task),
            "timing": timing_score(task, ctx, _local_now(now, ctx)),
            "effort": effort_score(task, cfg.max_effort_minutes),
            "history": history_score(task, now, cfg.postpone_penalty_rate),
        }

        weights = self.weights
        base_score = sum(weights[name] * components[name] for name in COMPONENTS)

        behavior = behavior_multiplier(ctx)
        context = context_multiplier(task, ctx)
        final_score = clamp(base_score * behavior * context + ml_adjustment, 0.0, 1.0)

        return ScoreResult(
            finalScore=final_score,
            baseScore=base_score,
            components=ComponentScores(**components),
            multipliers=Multipliers(behavior=behavior, context=context, mlAdjustment=ml_adjustment),
            explanation=generate_explanation(components, weights, is_overdue(task, now)),
        )

    # --- 2. Batch scoring (unranked) ---
    def score_tasks(
        self,
        tasks: Sequence[Union[Task, Mapping[str, Any]]],
        user_context: Union[UserContext, Mapping[str, Any], None] = None,
        now: Optional[datetime] = None,
        ml_adjustments: Optional[Sequence[float]] = None,
    ) -> List[RankedTask]:
        """
        Scores every task independently against one shared instant. When
        `now` is omitted the wall clock is read once, before the first task.
        """
        if not isinstance(tasks, (list, tuple)):
            raise TypeError(f"tasks must be a list of task records, got {type(tasks).__name__}")
        if ml_adjustments is not None and len(ml_adjustments) != len(tasks):
            raise ValueError(
                f"ml_adjustments has {len(ml_adjustments)} entries for {len(tasks)} tasks"
            )

        ctx = _coerce_context(user_context)
        if now is None:
            now = current_time(ctx)

        scored = []
        for index, raw in enumerate(tasks):
            task = _coerce_task(raw)
            adjustment = ml_adjustments[index] if ml_adjustments is not None else 0.0
            result = self.score(task, now, ctx, adjustment)
            scored.append(self._attach_score(task, result, now))
            logger.debug("Scored task %s (%r): %.4f", task.id, task.title, result.finalScore)

        return scored

    def _attach_score(self, task: Task, result: ScoreResult, now: datetime) -> RankedTask:
        components = result.components
        insights = AIInsights(
            priorityReason=result.explanation.primaryReason,
            timeRecommendation=result.explanation.recommendation,
            isUrgent=components.urgency > URGENT_THRESHOLD,
            isOverdue=is_overdue(task, now),
            isOptimizedForTime=components.timing > WELL_TIMED_THRESHOLD,
            requiresFocus=(
                components.effort < HEAVY_EFFORT_THRESHOLD
                or components.importance > FOCUS_IMPORTANCE_THRESHOLD
            ),
        )
        return RankedTask(**{
            **task.model_dump(),
            "aiScore": result.finalScore,
            "aiScoreBreakdown": result,
            "aiRank": 0,
            "aiPriority": None,
            "aiInsights": insights,
        })

    # --- 3. Batch ranking ---
    def prioritize_tasks(
        self,
        tasks: Sequence[Union[Task, Mapping[str, Any]]],
        user_context: Union[UserContext, Mapping[str, Any], None] = None,
        now: Optional[datetime] = None,
        ml_adjustments: Optional[Sequence[float]] = None,
    ) -> List[RankedTask]:
        """
        Scores, then orders by aiScore descending. The sort is stable, so
        tasks with equal scores keep their input order. Rank 1 gets
        aiPriority 100, falling linearly with position.
        """
        scored = self.score_tasks(tasks, user_context, now=now, ml_adjustments=ml_adjustments)
        ranked = sorted(scored, key=lambda t: t.aiScore, reverse=True)

        total = len(ranked)
        for index, task in enumerate(ranked):
            task.aiRank = index + 1
            task.aiPriority = _round_half_up((1 - index / total) * 100)

        if ranked:
            logger.info(
                "📊 [PRIORITIZE] Ranked %d tasks | top=%r score=%.3f",
                total, ranked[0].title, ranked[0].aiScore,
            )
        return ranked


# ------------------------------------------------------
# Public entry points
# ------------------------------------------------------
def build_default_prioritizer() -> TaskPrioritizer:
    """Engine configured from the environment (see prioritizer.config)."""
    return TaskPrioritizer(
        weights={
            "urgency": config.WEIGHT_URGENCY,
            "importance": config.WEIGHT_IMPORTANCE,
            "timing": config.WEIGHT_TIMING,
            "effort": config.WEIGHT_EFFORT,
            "history": config.WEIGHT_HISTORY,
        },
        urgency_window_hours=config.URGENCY_WINDOW_HOURS,
        max_effort_minutes=config.MAX_EFFORT_MINUTES,
        postpone_penalty_rate=config.POSTPONE_PENALTY_RATE,
    )


def score_tasks(tasks, user_context=None, **kwargs) -> List[RankedTask]:
    return build_default_prioritizer().score_tasks(tasks, user_context, **kwargs)


def prioritize_tasks(tasks, user_context=None, **kwargs) -> List[RankedTask]:
    return build_default_prioritizer().prioritize_tasks(tasks, user_context, **kwargs)
