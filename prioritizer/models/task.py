from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Any
from datetime import date, datetime, timezone
import logging
import math

logger = logging.getLogger(__name__)

# Field spellings used by the older clients and the task store, mapped to the
# camelCase names of the JSON contract.
SNAKE_CASE_ALIASES = {
    "due_date": "dueDate",
    "due_type": "dueType",
    "start_time": "startTime",
    "estimate_minutes": "estimateMinutes",
    "effort_complexity": "effortComplexity",
    "times_postponed": "timesPostponed",
    "completion_rate": "completionRate",
    "created_at": "createdAt",
    "required_device": "requiredDevice",
    "preferred_location": "preferredLocation",
}

DUE_TYPES = ("soft", "hard")


# ------------------------------------------------------
# Fail-soft coercion helpers (shared with UserContext)
# ------------------------------------------------------

def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion to a datetime. Accepts datetimes, dates (midnight),
    ISO-8601 strings and epoch milliseconds. Returns None when the value
    cannot be understood.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def parse_number(value: Any) -> Optional[float]:
    """Returns a finite float, or None for anything non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


def _ascii_digits(text: str) -> bool:
    return bool(text) and text.isascii() and text.isdigit()


def parse_start_time(value: Any) -> Optional[str]:
    """Keeps 'H:MM' / 'HH:MM' strings whose hour is 0-23."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    hour, sep, minute = text.partition(":")
    # ASCII digits only: str.isdigit() also accepts superscripts that int() rejects
    if not sep or not _ascii_digits(hour) or not _ascii_digits(minute[:2]):
        return None
    if int(hour) > 23:
        return None
    return text


class Task(BaseModel):
    """
    A user task as supplied by the task store. Read-only input to the scoring
    engine. Unknown fields (status, endTime, ...) are preserved so ranked
    output can be layered on top of a copy of the original record.
    """
    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None

    dueDate: Optional[datetime] = Field(None, description="Absolute deadline. None means no deadline.")
    dueType: Optional[str] = Field(None, description="soft or hard. Hard deadlines amplify urgency.")

    importance: Optional[float] = Field(None, description="Raw importance on a 0-1, 0-10 or 0-100 scale.")
    category: Optional[str] = Field(None, description="Work, Academic, or Personal.")
    priority: Optional[str] = Field(None, description="High, Medium, or Low.")
    startTime: Optional[str] = Field(None, description="Preferred time of day, HH:MM.")

    estimateMinutes: Optional[float] = Field(None, description="Expected effort in minutes. Inferred when missing.")
    effortComplexity: Optional[float] = Field(None, description="Subjective complexity (0 to 10). Inferred when missing.")

    timesPostponed: int = 0
    completionRate: Optional[float] = Field(None, description="Historical completion rate for similar tasks (0.0 to 1.0).")
    createdAt: Optional[datetime] = None

    requiredDevice: Optional[str] = None
    preferredLocation: Optional[str] = None

    class Config:
        extra = "allow"

    @model_validator(mode='before')
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Maps legacy spellings onto the canonical field names."""
        if not isinstance(data, dict):
            return data

        # Never mutate the caller's record
        data = dict(data)

        # 1. snake_case spellings; the camelCase key wins when both exist
        for legacy, canonical in SNAKE_CASE_ALIASES.items():
            if legacy in data:
                value = data.pop(legacy)
                if data.get(canonical) is None:
                    data[canonical] = value

        # 2. Identifier
        mongo_id = data.pop('_id', None)
        if data.get('id') is None:
            data['id'] = mongo_id or data.get('taskId')

        # 3. The task store calls the deadline 'deadline'
        if data.get('dueDate') is None and data.get('deadline') is not None:
            data['dueDate'] = data['deadline']

        return data

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v):
        return None if v is None else str(v)

    @field_validator('title', mode='before')
    @classmethod
    def default_title(cls, v):
        return v if isinstance(v, str) else ""

    @field_validator('description', 'requiredDevice', 'preferredLocation', mode='before')
    @classmethod
    def optional_text(cls, v):
        return parse_text(v)

    @field_validator('dueDate', 'createdAt', mode='before')
    @classmethod
    def parse_dates(cls, v, info):
        parsed = parse_timestamp(v)
        if parsed is None and v is not None:
            logger.debug("Ignoring unparsable %s=%r", info.field_name, v)
        return parsed

    @field_validator('importance', 'estimateMinutes', 'effortComplexity', 'completionRate', mode='before')
    @classmethod
    def parse_numbers(cls, v, info):
        parsed = parse_number(v)
        if parsed is None and v is not None:
            logger.debug("Ignoring non-numeric %s=%r", info.field_name, v)
        return parsed

    @field_validator('timesPostponed', mode='before')
    @classmethod
    def parse_postponements(cls, v):
        parsed = parse_number(v)
        return int(max(0.0, parsed)) if parsed is not None else 0

    @field_validator('dueType', mode='before')
    @classmethod
    def normalize_due_type(cls, v):
        if isinstance(v, str) and v.strip().lower() in DUE_TYPES:
            return v.strip().lower()
        return None

    @field_validator('category', 'priority', mode='before')
    @classmethod
    def normalize_label(cls, v):
        """'high' and 'HIGH' both become 'High'."""
        if isinstance(v, str) and v.strip():
            return v.strip().capitalize()
        return None

    @field_validator('startTime', mode='before')
    @classmethod
    def validate_start_time(cls, v):
        return parse_start_time(v)

    @property
    def start_hour(self) -> Optional[int]:
        if self.startTime is None:
            return None
        return int(self.startTime.split(':')[0])
