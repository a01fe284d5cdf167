from fastapi import APIRouter, HTTPException, Request, Body
from typing import Optional, Dict, Any
from datetime import datetime
import logging

from pydantic import BaseModel, Field

from prioritizer.models.user_context import UserContext
from prioritizer.models.score import PrioritizeResponse, ScoreResult
from prioritizer.core.prioritizer import build_default_prioritizer, current_time
from prioritizer.core.summarizer import summarize_priorities
from prioritizer.core.data_loader import TaskLoader, TaskSourceError

logger = logging.getLogger(__name__)

router = APIRouter()

# Built once at import: a bad weight configuration stops the service from starting.
engine = build_default_prioritizer()

# ---------------------------------------------------------
# Helper: caller credentials for the task store
# ---------------------------------------------------------
# The task store scopes /tasks to whoever these identify.
FORWARDED_HEADERS = ("Authorization", "Cookie", "X-User-Id")


def _build_forward_headers(request: Request) -> Dict[str, str]:
    """Copies the caller's credential headers, in canonical casing, for TaskLoader."""
    return {
        name: request.headers[name]
        for name in FORWARDED_HEADERS
        if name in request.headers
    }


def _batch_now(user_context: UserContext) -> datetime:
    """The single instant a whole batch is judged against."""
    return user_context.currentTime or current_time(user_context)


def _rank(tasks: Any, user_context: UserContext) -> PrioritizeResponse:
    now = _batch_now(user_context)
    ranked = engine.prioritize_tasks(tasks, user_context, now=now)
    return PrioritizeResponse(
        prioritizedTasks=ranked,
        insights=summarize_priorities(ranked),
        scoredAt=now,
    )


# ---------------------------------------------------------
# Request Models
# ---------------------------------------------------------

class PrioritizeRequest(BaseModel):
    """Tasks to rank plus the user's current context."""
    # Left untyped so a missing or non-array value can be answered with 400
    tasks: Any = Field(None, description="Array of task records.")
    userContext: UserContext = Field(default_factory=UserContext)


class ScoreRequest(BaseModel):
    task: Dict[str, Any]
    userContext: UserContext = Field(default_factory=UserContext)
    mlAdjustment: float = Field(0.0, description="Opaque nudge added after the multipliers.")
    now: Optional[datetime] = Field(None, description="Scoring instant. Defaults to the current time.")


class StoredPrioritizeRequest(BaseModel):
    userContext: UserContext = Field(default_factory=UserContext)


# ---------------------------------------------------------
# POST /api/ai/prioritize
# ---------------------------------------------------------
@router.post("/prioritize", response_model=PrioritizeResponse)
async def prioritize(req: PrioritizeRequest = Body(...)) -> PrioritizeResponse:
    if not isinstance(req.tasks, list):
        raise HTTPException(status_code=400, detail="Tasks array is required")

    try:
        return _rank(req.tasks, req.userContext)

    except TypeError as e:
        # A task entry that is not an object
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logger.exception("FATAL ERROR during prioritization of %d tasks", len(req.tasks))
        raise HTTPException(
            status_code=500,
            detail=f"Prioritization failed: {str(e)}",
            headers={"X-Failure-Reason": "Prioritizer internal error"}
        )


# ---------------------------------------------------------
# POST /api/ai/prioritize/stored
# ---------------------------------------------------------
@router.post("/prioritize/stored", response_model=PrioritizeResponse)
async def prioritize_stored(
    request: Request,
    req: Optional[StoredPrioritizeRequest] = Body(None),
) -> PrioritizeResponse:
    """Ranks the caller's open tasks straight from the task store."""
    user_context = req.userContext if req is not None else UserContext()
    loader = TaskLoader(incoming_headers=_build_forward_headers(request))

    try:
        tasks = await loader.fetch_open_tasks()
    except TaskSourceError as e:
        logger.error("❌ Task store unavailable: %s", e)
        raise HTTPException(status_code=502, detail=f"Task store unavailable: {str(e)}")

    try:
        return _rank(tasks, user_context)

    except Exception as e:
        logger.exception("FATAL ERROR during prioritization of stored tasks")
        raise HTTPException(
            status_code=500,
            detail=f"Prioritization failed: {str(e)}",
            headers={"X-Failure-Reason": "Prioritizer internal error"}
        )


# ---------------------------------------------------------
# POST /api/ai/score
# ---------------------------------------------------------
@router.post("/score", response_model=ScoreResult)
async def score_task(req: ScoreRequest = Body(...)) -> ScoreResult:
    """Full score breakdown for a single task."""
    now = req.now or _batch_now(req.userContext)
    try:
        return engine.score(req.task, now, req.userContext, req.mlAdjustment)

    except Exception as e:
        logger.exception("FATAL ERROR while scoring task %r", req.task.get("title"))
        raise HTTPException(
            status_code=500,
            detail=f"Scoring failed: {str(e)}",
            headers={"X-Failure-Reason": "Prioritizer internal error"}
        )
