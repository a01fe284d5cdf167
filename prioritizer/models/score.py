from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from prioritizer.models.task import Task

# --- 1. Score Breakdown Models ---

class ComponentScores(BaseModel):
    """The five independent component scores, each in [0, 1]."""
    urgency: float
    importance: float
    timing: float
    effort: float
    history: float

class Multipliers(BaseModel):
    """Modifiers applied on top of the weighted base score."""
    behavior: float
    context: float
    mlAdjustment: float

class ScoreBreakdownItem(BaseModel):
    """One of the top weighted factors behind a score."""
    factor: str
    value: float
    weighted: float

class Explanation(BaseModel):
    primaryReason: str
    allReasons: List[str] = Field(default_factory=list)
    scoreBreakdown: List[ScoreBreakdownItem] = Field(default_factory=list)
    recommendation: str

class ScoreResult(BaseModel):
    """Full output of scoring a single task."""
    finalScore: float = Field(..., description="Ranking key in [0, 1].")
    baseScore: float = Field(..., description="Weighted component sum before multipliers.")
    components: ComponentScores
    multipliers: Multipliers
    explanation: Explanation

# --- 2. Batch Output Models ---

class AIInsights(BaseModel):
    """Boolean flags and short texts a UI can show next to a ranked task."""
    priorityReason: str
    timeRecommendation: str
    isUrgent: bool
    isOverdue: bool
    isOptimizedForTime: bool
    requiresFocus: bool

class RankedTask(Task):
    """
    The input task with scoring fields layered on top. aiRank stays 0 and
    aiPriority None until the batch has been ranked.
    """
    aiScore: float
    aiScoreBreakdown: ScoreResult
    aiRank: int = 0
    aiPriority: Optional[int] = None
    aiInsights: AIInsights

# --- 3. HTTP Response ---

class PrioritizeResponse(BaseModel):
    """Payload of the prioritize endpoints."""
    prioritizedTasks: List[RankedTask]
    insights: List[str] = Field(default_factory=list)
    scoredAt: datetime
