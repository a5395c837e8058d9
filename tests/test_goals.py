"""Tests for goal targets, progress and the goal service."""

import asyncio
from datetime import date, datetime, timezone

import pytest

from stryde.db import ActivityRepository, GoalRepository
from stryde.models.goal import Goal, GoalType
from stryde.services.goals import (
    DEFAULT_TARGETS,
    AdaptiveTargetCalculator,
    GoalService,
    goal_current_from_activities,
    goal_progress,
    period_range,
    period_start,
)
from stryde.utils.dates import day_end_ms, day_start_ms, week_start

TODAY = date(2024, 3, 13)  # Wednesday


def daily(day: str, current: float, target: float = 10000, goal_type=GoalType.DAILY_STEPS) -> Goal:
    return Goal(type=goal_type, target=target, date=day, current=current)


class TestPeriods:
    """Tests for goal period keys."""

    def test_week_starts_on_sunday(self):
        assert week_start(TODAY) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 10)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 16)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 17)) == date(2024, 3, 17)

    def test_period_start(self):
        assert period_start(GoalType.DAILY_STEPS, TODAY) == TODAY
        assert period_start(GoalType.WEEKLY_STEPS, TODAY) == date(2024, 3, 10)

    def test_period_range(self):
        weekly = Goal(type=GoalType.WEEKLY_STEPS, target=70000, date="2024-03-10")
        assert period_range(weekly) == (date(2024, 3, 10), date(2024, 3, 16))
        assert period_range(daily("2024-03-13", 0)) == (TODAY, TODAY)


class TestDayBounds:
    """Tests for day boundaries in epoch milliseconds."""

    def test_utc_day(self):
        start = day_start_ms(date(2024, 3, 11), timezone.utc)
        end = day_end_ms(date(2024, 3, 11), timezone.utc)
        assert start == 1_710_115_200_000
        assert end == start + 86_400_000 - 1

    def test_days_are_contiguous(self):
        end = day_end_ms(date(2024, 3, 10))
        assert day_start_ms(date(2024, 3, 11)) == end + 1


class TestAdaptiveTargetCalculator:
    """Tests for AdaptiveTargetCalculator."""

    def test_defaults_without_history(self):
        calculator = AdaptiveTargetCalculator()
        for goal_type, target in DEFAULT_TARGETS.items():
            assert calculator.calculate(goal_type, [], TODAY) == target

    def test_improves_on_average(self):
        """Mean 9000 raised 5% is 9450, rounded to 9500."""
        goals = [daily("2024-03-10", 8000), daily("2024-03-11", 9000), daily("2024-03-12", 10000)]
        assert AdaptiveTargetCalculator().calculate(GoalType.DAILY_STEPS, goals, TODAY) == 9500

    def test_ignores_current_period_and_empty_days(self):
        goals = [
            daily("2024-03-13", 20000),
            daily("2024-03-12", 0),
            daily("2024-03-11", 6000),
        ]
        history = AdaptiveTargetCalculator().history(GoalType.DAILY_STEPS, goals, TODAY)
        assert [g.date for g in history] == ["2024-03-11"]
        # 6000 * 1.05 = 6300 -> 6500
        assert AdaptiveTargetCalculator().calculate(GoalType.DAILY_STEPS, goals, TODAY) == 6500

    def test_ignores_other_types(self):
        goals = [daily("2024-03-12", 4000, target=5000, goal_type=GoalType.DAILY_DISTANCE)]
        assert AdaptiveTargetCalculator().calculate(GoalType.DAILY_STEPS, goals, TODAY) == 10000

    def test_uses_most_recent_records(self):
        old = [daily(f"2024-02-{d:02d}", 20000) for d in range(1, 11)]
        recent = [daily(f"2024-03-{d:02d}", 4000) for d in range(5, 12)]
        calculator = AdaptiveTargetCalculator()
        history = calculator.history(GoalType.DAILY_STEPS, old + recent, TODAY)
        assert len(history) == 7
        assert history[0].date == "2024-03-11"
        # 4000 * 1.05 = 4200 -> 4000
        assert calculator.calculate(GoalType.DAILY_STEPS, old + recent, TODAY) == 4000

    def test_distance_granularity(self):
        goals = [daily("2024-03-12", 3210, target=5000, goal_type=GoalType.DAILY_DISTANCE)]
        # 3210 * 1.05 = 3370.5 -> 3400
        assert AdaptiveTargetCalculator().calculate(GoalType.DAILY_DISTANCE, goals, TODAY) == 3400

    def test_never_zero(self):
        goals = [daily("2024-03-12", 50)]
        assert AdaptiveTargetCalculator().calculate(GoalType.DAILY_STEPS, goals, TODAY) == 500

    def test_weekly_history(self):
        goals = [
            Goal(type=GoalType.WEEKLY_STEPS, target=70000, date="2024-03-10", current=90000),
            Goal(type=GoalType.WEEKLY_STEPS, target=70000, date="2024-03-03", current=60000),
        ]
        # Only last week counts: 60000 * 1.05 = 63000
        assert AdaptiveTargetCalculator().calculate(GoalType.WEEKLY_STEPS, goals, TODAY) == 63000

    def test_custom_policy(self):
        goals = [daily("2024-03-12", 8000)]
        calculator = AdaptiveTargetCalculator(improvement_factor=1.25)
        assert calculator.calculate(GoalType.DAILY_STEPS, goals, TODAY) == 10000


class TestGoalProgress:
    """Tests for goal progress."""

    def test_partial(self):
        progress = goal_progress(daily("2024-03-13", 4999))
        assert progress.percentage == 50

    def test_capped(self):
        goal = daily("2024-03-13", 25000)
        assert goal.is_complete
        assert goal_progress(goal).percentage == 100

    def test_goal_validation(self):
        with pytest.raises(ValueError):
            Goal(type=GoalType.DAILY_STEPS, target=0, date="2024-03-13")
        with pytest.raises(ValueError):
            Goal(type=GoalType.DAILY_STEPS, target=100, date="2024-03-13", current=-1)

    def test_current_from_activities(self, make_activity):
        activities = [
            make_activity(datetime(2024, 3, 10, 9), steps=1000, distance_m=700),
            make_activity(datetime(2024, 3, 13, 9), steps=2000, distance_m=1500),
            make_activity(datetime(2024, 3, 13, 18), steps=500, distance_m=400),
            make_activity(datetime(2024, 3, 13, 20), steps=9999, finished=False),
            make_activity(datetime(2024, 3, 17, 9), steps=3000),
        ]
        utc = timezone.utc
        weekly = Goal(type=GoalType.WEEKLY_STEPS, target=70000, date="2024-03-10")
        distance = Goal(type=GoalType.DAILY_DISTANCE, target=5000, date="2024-03-13")
        assert goal_current_from_activities(weekly, activities, utc) == 3500
        assert goal_current_from_activities(daily("2024-03-13", 0), activities, utc) == 2500
        assert goal_current_from_activities(distance, activities, utc) == 1900


class TestGoalService:
    """Tests for GoalService against SQLite."""

    def test_ensure_period_goals(self, db_path):
        service = GoalService(GoalRepository(db_path), ActivityRepository(db_path))

        created = asyncio.run(service.ensure_period_goals(TODAY))
        assert {(g.type, g.date) for g in created} == {
            (GoalType.DAILY_STEPS, "2024-03-13"),
            (GoalType.DAILY_DISTANCE, "2024-03-13"),
            (GoalType.WEEKLY_STEPS, "2024-03-10"),
        }
        assert asyncio.run(service.ensure_period_goals(TODAY)) == []

    def test_new_goals_adapt_to_history(self, db_path):
        goal_repo = GoalRepository(db_path)
        service = GoalService(goal_repo, ActivityRepository(db_path))
        asyncio.run(goal_repo.set_goal(daily("2024-03-12", 12000)))

        created = asyncio.run(service.ensure_period_goals(TODAY))
        steps_goal = next(g for g in created if g.type == GoalType.DAILY_STEPS)
        assert steps_goal.target == 12500
        assert asyncio.run(service.suggest_target(GoalType.DAILY_STEPS, TODAY)) == 12500

    def test_set_goal_replaces(self, db_path):
        goal_repo = GoalRepository(db_path)
        service = GoalService(goal_repo, ActivityRepository(db_path))

        asyncio.run(service.set_goal(GoalType.WEEKLY_STEPS, 50000, TODAY))
        asyncio.run(service.set_goal(GoalType.WEEKLY_STEPS, 60000, date(2024, 3, 15)))

        goals = asyncio.run(goal_repo.list_by_type(GoalType.WEEKLY_STEPS))
        assert len(goals) == 1
        assert goals[0].target == 60000
        assert goals[0].date == "2024-03-10"

    def test_refresh_progress(self, db_path, make_activity):
        goal_repo = GoalRepository(db_path)
        activity_repo = ActivityRepository(db_path)
        service = GoalService(goal_repo, activity_repo)

        asyncio.run(service.set_goal(GoalType.DAILY_STEPS, 3000, TODAY))
        asyncio.run(activity_repo.create(make_activity(datetime(2024, 3, 13, 12), steps=3200)))

        changed = asyncio.run(service.refresh_progress(timezone.utc))
        assert len(changed) == 1
        stored = asyncio.run(goal_repo.list_for_date("2024-03-13"))[0]
        assert stored.current == 3200
        assert stored.is_complete

        assert asyncio.run(service.refresh_progress(timezone.utc)) == []
