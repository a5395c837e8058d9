"""Goal targets and progress."""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo

from ..models.activity import Activity
from ..models.goal import Goal, GoalType
from ..utils.dates import local_date, parse_iso_date, week_start

logger = logging.getLogger(__name__)

DEFAULT_TARGETS = {
    GoalType.DAILY_STEPS: 10000,
    GoalType.WEEKLY_STEPS: 70000,
    GoalType.DAILY_DISTANCE: 5000,  # meters
}

# Targets are rounded so they look intentional
TARGET_GRANULARITY = {
    GoalType.DAILY_STEPS: 500,
    GoalType.WEEKLY_STEPS: 500,
    GoalType.DAILY_DISTANCE: 100,
}


def period_start(goal_type: GoalType, day: date) -> date:
    """The date key a goal of ``goal_type`` uses for ``day``."""
    return week_start(day) if goal_type.is_weekly else day


def period_range(goal: Goal) -> tuple[date, date]:
    """First and last calendar day (inclusive) covered by a goal."""
    start = parse_iso_date(goal.date)
    if goal.type.is_weekly:
        return start, start + timedelta(days=6)
    return start, start


def _round_to(value: float, step: int) -> int:
    return int(math.floor(value / step + 0.5)) * step


@dataclass(frozen=True)
class AdaptiveTargetCalculator:
    """Suggests a goal target from recent performance.

    Takes the mean ``current`` of the most recent completed goals of the
    same type, raises it by ``improvement_factor`` and rounds to the
    type's granularity. Without history the type default is used.
    """

    history_days: int = 7
    improvement_factor: float = 1.05

    def history(self, goal_type: GoalType, goals: list[Goal], today: date) -> list[Goal]:
        """Completed goals with progress, most recent first."""
        current_period = period_start(goal_type, today).isoformat()
        matching = [
            g for g in goals
            if g.type == goal_type and g.current > 0 and g.date < current_period
        ]
        matching.sort(key=lambda g: g.date, reverse=True)
        return matching[: self.history_days]

    def calculate(
        self,
        goal_type: GoalType,
        goals: list[Goal],
        today: date | None = None,
    ) -> int:
        today = today or date.today()
        history = self.history(goal_type, goals, today)
        if not history:
            return DEFAULT_TARGETS[goal_type]

        average = sum(g.current for g in history) / len(history)
        step = TARGET_GRANULARITY[goal_type]
        return max(step, _round_to(average * self.improvement_factor, step))


@dataclass
class GoalProgress:
    current: float
    target: float
    percentage: int  # 0-100


def goal_progress(goal: Goal) -> GoalProgress:
    """Progress towards a goal, capped at 100%."""
    percentage = min(100, int(math.floor(goal.current / goal.target * 100 + 0.5)))
    return GoalProgress(current=goal.current, target=goal.target, percentage=percentage)


def goal_current_from_activities(
    goal: Goal,
    activities: list[Activity],
    tz: tzinfo | None = None,
) -> float:
    """Sum completed activities falling in the goal's period."""
    first, last = period_range(goal)
    total = 0.0
    for activity in activities:
        if activity.ended_at is None:
            continue
        day = local_date(activity.started_at, tz)
        if first <= day <= last:
            total += activity.distance_m if goal.type.is_distance else activity.steps
    return total


class GoalService:
    """Goal workflows on top of the goal and activity repositories."""

    def __init__(self, goal_repo, activity_repo, calculator: AdaptiveTargetCalculator | None = None):
        self.goal_repo = goal_repo
        self.activity_repo = activity_repo
        self.calculator = calculator or AdaptiveTargetCalculator()

    async def set_goal(self, goal_type: GoalType, target: float, day: date) -> Goal:
        """Create the goal for the period containing ``day``, replacing any existing one."""
        goal = Goal(type=goal_type, target=target, date=period_start(goal_type, day).isoformat())
        await self.goal_repo.set_goal(goal)
        return goal

    async def suggest_target(self, goal_type: GoalType, today: date | None = None) -> int:
        goals = await self.goal_repo.list_by_type(goal_type)
        return self.calculator.calculate(goal_type, goals, today)

    async def ensure_period_goals(self, today: date | None = None) -> list[Goal]:
        """Create today's daily goals and this week's goal when missing.

        Returns:
            The goals that were created.
        """
        today = today or date.today()
        goals = await self.goal_repo.list_all()
        existing = {(g.type, g.date) for g in goals}

        created = []
        for goal_type in (GoalType.DAILY_STEPS, GoalType.DAILY_DISTANCE, GoalType.WEEKLY_STEPS):
            key = period_start(goal_type, today).isoformat()
            if (goal_type, key) in existing:
                continue
            target = self.calculator.calculate(goal_type, goals, today)
            created.append(await self.set_goal(goal_type, target, today))
            logger.info("Created %s goal for %s with target %s", goal_type.value, key, target)
        return created

    async def refresh_progress(self, tz: tzinfo | None = None) -> list[Goal]:
        """Recompute ``current`` for every goal from completed activities.

        Returns:
            The goals whose progress changed.
        """
        goals = await self.goal_repo.list_all()
        activities = await self.activity_repo.list_recent(limit=None)

        changed = []
        for goal in goals:
            current = goal_current_from_activities(goal, activities, tz)
            if current != goal.current:
                goal.current = current
                await self.goal_repo.update_progress(goal.id, current)
                changed.append(goal)
        return changed
