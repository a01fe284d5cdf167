"""Unit tests for prioritizer.core.scorer: component scorers and multipliers."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from prioritizer.core.scorer import (
    align_to,
    behavior_multiplier,
    context_multiplier,
    effort_score,
    history_score,
    importance_score,
    is_overdue,
    normalize_importance,
    timing_score,
    urgency_score,
)
from prioritizer.models.task import Task
from prioritizer.models.user_context import UserContext

# Wednesday 27 August 2025 and Saturday 30 August 2025, 10:00 UTC (see conftest.py)
NOW = datetime(2025, 8, 27, 10, 0, tzinfo=timezone.utc)
SATURDAY = datetime(2025, 8, 30, 10, 0, tzinfo=timezone.utc)

WINDOW = 72
MAX_EFFORT = 120
RATE = 0.4


class TestUrgency:
    def test_no_due_date_is_zero(self, make_task):
        assert urgency_score(make_task(), NOW, WINDOW) == 0.0

    def test_overdue_is_one(self, make_task):
        assert urgency_score(make_task(due_in_hours=-1), NOW, WINDOW) == 1.0

    def test_due_exactly_now_is_one(self, make_task):
        assert urgency_score(make_task(due_in_hours=0), NOW, WINDOW) == 1.0

    def test_overdue_hard_deadline_is_not_amplified(self, make_task):
        assert urgency_score(make_task(due_in_hours=-30, dueType="hard"), NOW, WINDOW) == 1.0

    @pytest.mark.parametrize("hours, expected", [
        (36, 0.5),
        (18, 0.75),
        (72, 0.0),
        (500, 0.0),
    ])
    def test_linear_ramp(self, make_task, hours, expected):
        assert urgency_score(make_task(due_in_hours=hours), NOW, WINDOW) == pytest.approx(expected)

    def test_hard_deadline_amplifies(self, make_task):
        assert urgency_score(make_task(due_in_hours=36, dueType="hard"), NOW, WINDOW) == pytest.approx(0.6)

    def test_hard_deadline_is_clamped(self, make_task):
        assert urgency_score(make_task(due_in_hours=6, dueType="hard"), NOW, WINDOW) == 1.0

    def test_custom_window(self, make_task):
        assert urgency_score(make_task(due_in_hours=12), NOW, 24) == pytest.approx(0.5)

    def test_naive_due_date_read_in_now_zone(self):
        task = Task(title="Plain", dueDate=NOW.replace(tzinfo=None) + timedelta(hours=36))
        assert urgency_score(task, NOW, WINDOW) == pytest.approx(0.5)

    @pytest.mark.parametrize("due_type", [None, "hard"])
    def test_closer_deadline_never_lowers_urgency(self, make_task, due_type):
        hours = [400, 100, 72, 60, 36, 12, 1, 0, -1, -48]
        scores = [urgency_score(make_task(due_in_hours=h, dueType=due_type), NOW, WINDOW) for h in hours]
        assert all(a <= b for a, b in zip(scores, scores[1:]))


class TestImportance:
    @pytest.mark.parametrize("raw, expected", [
        (0.75, 0.75),
        (1, 1.0),
        (9, 0.9),
        (10, 1.0),
        (90, 0.9),
        (100, 1.0),
        (150, 1.0),
        (-3, 0.0),
    ])
    def test_scale_normalization(self, raw, expected):
        assert normalize_importance(raw) == pytest.approx(expected)

    def test_ten_and_hundred_scales_agree(self):
        a = Task(title="Same", importance=9)
        b = Task(title="Same", importance=90)
        assert importance_score(a) == importance_score(b) == 0.9

    def test_explicit_zero_is_not_inferred(self):
        assert importance_score(Task(title="Plain", importance=0, priority="High")) == 0.0

    def test_missing_importance_is_inferred(self):
        assert importance_score(Task(title="Plain", priority="High")) == 0.9


class TestTiming:
    @pytest.mark.parametrize("start, expected", [
        ("10:30", 1.0),
        ("11:00", 1.0),
        ("08:00", 0.8),
        ("12:00", 0.8),
        ("14:00", 0.6),
        ("15:00", 0.3),
        ("22:00", 0.3),
    ])
    def test_start_time_bands(self, start, expected):
        task = Task(title="Plain", startTime=start)
        assert timing_score(task, UserContext(), NOW) == expected

    def test_unparsable_start_time_uses_category(self):
        task = Task(title="Plain", startTime="soon", category="Work")
        assert timing_score(task, UserContext(), NOW) == 0.9

    def test_work_during_office_hours(self):
        assert timing_score(Task(title="Plain", category="Work"), UserContext(), NOW) == 0.9

    def test_work_after_hours_is_neutral(self):
        late = NOW.replace(hour=18)
        assert timing_score(Task(title="Plain", category="Work"), UserContext(), late) == 0.5

    def test_work_on_weekend_is_damped(self):
        task = Task(title="Plain", category="Work")
        assert timing_score(task, UserContext(), SATURDAY) == pytest.approx(0.63)

    def test_weekend_damping_applies_to_start_time(self):
        task = Task(title="Plain", category="Work", startTime="10:00")
        assert timing_score(task, UserContext(), SATURDAY) == pytest.approx(0.7)

    @pytest.mark.parametrize("hour, expected", [(20, 0.8), (8, 0.8), (10, 0.5), (17, 0.5)])
    def test_personal_off_hours(self, hour, expected):
        task = Task(title="Plain", category="Personal")
        assert timing_score(task, UserContext(), NOW.replace(hour=hour)) == expected

    def test_academic_is_neutral(self):
        assert timing_score(Task(title="Plain", category="Academic"), UserContext(), NOW) == 0.5

    def test_productive_hour_boost(self):
        ctx = UserContext(productiveHours=[9, 10])
        assert timing_score(Task(title="Plain"), ctx, NOW) == pytest.approx(0.6)

    def test_productive_hour_boost_is_clamped(self):
        ctx = UserContext(productiveHours=[10])
        assert timing_score(Task(title="Plain", startTime="10:00"), ctx, NOW) == 1.0


class TestEffort:
    @pytest.mark.parametrize("minutes, expected", [
        (30, 0.75),
        (60, 0.5),
        (120, 0.0),
        (600, 0.0),
    ])
    def test_explicit_estimate(self, minutes, expected):
        task = Task(title="Plain", estimateMinutes=minutes)
        assert effort_score(task, MAX_EFFORT) == pytest.approx(expected)

    def test_inferred_quick_task(self):
        task = Task(title="Plain", description="call mom")
        assert effort_score(task, MAX_EFFORT) == pytest.approx(0.875)

    def test_explicit_high_complexity_penalty(self):
        task = Task(title="Plain", estimateMinutes=60, effortComplexity=9)
        assert effort_score(task, MAX_EFFORT) == pytest.approx(0.45)

    def test_inferred_high_complexity_penalty(self):
        task = Task(title="Analyze logs", estimateMinutes=60)
        assert effort_score(task, MAX_EFFORT) == pytest.approx(0.45)

    def test_complexity_seven_is_not_penalized(self):
        task = Task(title="Plain", estimateMinutes=60, effortComplexity=7)
        assert effort_score(task, MAX_EFFORT) == pytest.approx(0.5)

    @pytest.mark.parametrize("title", ["Plain", "Research project", "Call mom"])
    def test_larger_estimate_never_raises_score(self, title):
        estimates = [-30, 0, 1, 10, 15, 30, 45, 60, 90, 119, 120, 121, 300]
        scores = [effort_score(Task(title=title, estimateMinutes=m), MAX_EFFORT) for m in estimates]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_zero_estimate_is_a_quick_win(self):
        # 0 minutes is taken at face value, not replaced by the "research" guess
        assert effort_score(Task(title="Plain", estimateMinutes=0), MAX_EFFORT) == 1.0
        assert effort_score(Task(title="Research project", estimateMinutes=0), MAX_EFFORT) == pytest.approx(0.9)


class TestHistory:
    def test_defaults(self):
        assert history_score(Task(title="Plain"), NOW, RATE) == pytest.approx(0.92)

    def test_no_postponements_means_no_penalty(self):
        task = Task(title="Plain", timesPostponed=0, completionRate=1.0)
        assert history_score(task, NOW, RATE) == pytest.approx(1.0)

    def test_postponement_decay(self):
        task = Task(title="Plain", timesPostponed=2)
        expected = 0.4 * math.exp(-0.8) + 0.4 * 0.8 + 0.2
        assert history_score(task, NOW, RATE) == pytest.approx(expected)

    def test_completion_rate(self):
        task = Task(title="Plain", completionRate=0.5)
        assert history_score(task, NOW, RATE) == pytest.approx(0.8)

    def test_stale_task_penalty(self):
        task = Task(title="Plain", createdAt=NOW - timedelta(days=31))
        assert history_score(task, NOW, RATE) == pytest.approx(0.9)

    def test_recent_task_has_no_age_penalty(self):
        task = Task(title="Plain", createdAt=NOW - timedelta(days=29))
        assert history_score(task, NOW, RATE) == pytest.approx(0.92)


class TestBehaviorMultiplier:
    def test_defaults(self):
        assert behavior_multiplier(UserContext()) == pytest.approx(1.08)

    def test_streak_bonus(self):
        ctx = UserContext(recentPositiveSignalRatio=1.0, completionStreak=5)
        assert behavior_multiplier(ctx) == pytest.approx(1.2)

    def test_streak_bonus_is_capped(self):
        ctx = UserContext(recentPositiveSignalRatio=0.0, completionStreak=50)
        assert behavior_multiplier(ctx) == pytest.approx(1.2)

    def test_upper_bound(self):
        ctx = UserContext(recentPositiveSignalRatio=5.0, completionStreak=50)
        assert behavior_multiplier(ctx) == 1.3

    def test_explicit_zero_ratio(self):
        assert behavior_multiplier(UserContext(recentPositiveSignalRatio=0.0)) == 1.0


class TestContextMultiplier:
    def test_neutral(self):
        assert context_multiplier(Task(title="Plain"), UserContext()) == 1.0

    def test_laptop_task_on_mobile(self):
        task = Task(title="Plain", requiredDevice="laptop")
        assert context_multiplier(task, UserContext(device="mobile")) == pytest.approx(0.7)

    def test_laptop_task_on_desktop(self):
        task = Task(title="Plain", requiredDevice="laptop")
        assert context_multiplier(task, UserContext(device="desktop")) == 1.0

    def test_location_mismatch(self):
        task = Task(title="Plain", preferredLocation="office")
        assert context_multiplier(task, UserContext(location="home")) == pytest.approx(0.9)
        assert context_multiplier(task, UserContext(location="office")) == 1.0

    def test_low_energy_complex_task(self):
        task = Task(title="Plain", effortComplexity=9)
        assert context_multiplier(task, UserContext(energyLevel="low")) == pytest.approx(0.8)

    def test_low_energy_ignores_inferred_complexity(self):
        task = Task(title="Design a new system")
        assert context_multiplier(task, UserContext(energyLevel="low")) == 1.0

    def test_lower_bound(self):
        task = Task(title="Plain", requiredDevice="laptop", preferredLocation="office", effortComplexity=9)
        ctx = UserContext(device="mobile", location="home", energyLevel="low")
        assert context_multiplier(task, ctx) == 0.7


class TestTimeHelpers:
    def test_is_overdue(self, make_task):
        assert is_overdue(make_task(due_in_hours=-1), NOW)
        assert not is_overdue(make_task(due_in_hours=0), NOW)
        assert not is_overdue(make_task(), NOW)

    def test_align_naive_to_aware(self):
        naive = NOW.replace(tzinfo=None)
        assert align_to(naive, NOW) == NOW

    def test_align_keeps_matching_kinds(self):
        assert align_to(NOW, NOW) is NOW
