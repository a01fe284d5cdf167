from typing import List, Sequence

from prioritizer.models.score import RankedTask

QUICK_WIN_EFFORT = 0.8


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def summarize_priorities(ranked_tasks: Sequence[RankedTask]) -> List[str]:
    """
    Short, deterministic insights about a ranked batch, most important first.
    Expects the output of prioritize_tasks (rank 1 first).
    """
    if not ranked_tasks:
        return ["Nothing to prioritize right now."]

    insights = []

    top = ranked_tasks[0]
    insights.append(
        f"Top priority: '{top.title or top.id or 'Untitled task'}' "
        f"(score {top.aiScore * 100:.0f}/100). {top.aiInsights.timeRecommendation}."
    )

    overdue = [t for t in ranked_tasks if t.aiInsights.isOverdue]
    if overdue:
        insights.append(f"{_plural(len(overdue), 'task')} overdue - clear these first.")

    urgent = [t for t in ranked_tasks if t.aiInsights.isUrgent and not t.aiInsights.isOverdue]
    if urgent:
        insights.append(f"{_plural(len(urgent), 'task')} due within the urgency window.")

    quick_wins = [t for t in ranked_tasks if t.aiScoreBreakdown.components.effort > QUICK_WIN_EFFORT]
    if quick_wins:
        insights.append(f"{_plural(len(quick_wins), 'quick win')} available for a short session.")

    well_timed = [t for t in ranked_tasks if t.aiInsights.isOptimizedForTime]
    if well_timed:
        insights.append(f"{_plural(len(well_timed), 'task')} well suited to this time of day.")

    return insights
