from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from prioritizer.models.task import parse_number, parse_text, parse_timestamp

ENERGY_LEVELS = ("low", "medium", "high")


class UserContext(BaseModel):
    """
    Ephemeral behavioural and environmental signals about the user, supplied
    by the caller with each scoring request. Never persisted.
    """
    # 1. Behaviour (feeds the behaviour multiplier)
    recentPositiveSignalRatio: Optional[float] = Field(None, description="Recent completion success rate (0.0 to 1.0). Defaults to 0.8.")
    completionStreak: Optional[int] = Field(None, description="Consecutive completions.")
    productiveHours: List[int] = Field(default_factory=list, description="Hours of the day (0-23) the user is productive.")

    # 2. Environment (feeds the context multiplier)
    device: Optional[str] = None
    location: Optional[str] = None
    energyLevel: Optional[str] = Field(None, description="low, medium, or high.")

    # 3. Clock
    timezone: Optional[str] = Field(None, description="IANA zone used for time-of-day heuristics.")
    currentTime: Optional[datetime] = Field(None, description="Overrides the wall clock as the batch 'now'.")

    class Config:
        extra = "allow"

    @field_validator('recentPositiveSignalRatio', mode='before')
    @classmethod
    def parse_ratio(cls, v):
        return parse_number(v)

    @field_validator('completionStreak', mode='before')
    @classmethod
    def parse_streak(cls, v):
        parsed = parse_number(v)
        return int(parsed) if parsed is not None else None

    @field_validator('productiveHours', mode='before')
    @classmethod
    def parse_hours(cls, v):
        if not isinstance(v, (list, tuple, set, frozenset)):
            return []
        hours = []
        for item in v:
            parsed = parse_number(item)
            if parsed is not None and parsed.is_integer() and 0 <= parsed <= 23:
                hours.append(int(parsed))
        return sorted(set(hours))

    @field_validator('device', 'location', 'timezone', mode='before')
    @classmethod
    def optional_text(cls, v):
        return parse_text(v)

    @field_validator('energyLevel', mode='before')
    @classmethod
    def normalize_energy(cls, v):
        if isinstance(v, str) and v.strip().lower() in ENERGY_LEVELS:
            return v.strip().lower()
        return None

    @field_validator('currentTime', mode='before')
    @classmethod
    def parse_current_time(cls, v):
        return parse_timestamp(v)
