"""Statistics over activity history: streaks, period totals and records."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo

from ..models.activity import Activity
from ..models.goal import Goal
from ..utils.dates import local_date, parse_iso_date


@dataclass
class StreakInfo:
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: date | None = None


@dataclass(frozen=True)
class StreakCalculator:
    """Consecutive active calendar days.

    A day is active when it holds at least one completed activity whose
    combined steps reach ``min_steps_per_day``.
    """

    min_steps_per_day: int = 0

    def active_days(self, activities: list[Activity], tz: tzinfo | None = None) -> set[date]:
        steps_by_day: dict[date, int] = defaultdict(int)
        for activity in activities:
            if activity.ended_at is None:
                continue
            steps_by_day[local_date(activity.started_at, tz)] += activity.steps
        return {day for day, steps in steps_by_day.items() if steps >= self.min_steps_per_day}

    def calculate(
        self,
        activities: list[Activity],
        today: date | None = None,
        tz: tzinfo | None = None,
    ) -> StreakInfo:
        """Streak ending today and the longest streak anywhere in history.

        The current streak is zero when today has no activity.
        """
        today = today or date.today()
        days = self.active_days(activities, tz)
        if not days:
            return StreakInfo()

        current = 0
        cursor = today
        while cursor in days:
            current += 1
            cursor -= timedelta(days=1)

        longest = 0
        run = 0
        previous = None
        for day in sorted(days):
            if previous is not None and day - previous == timedelta(days=1):
                run += 1
            else:
                run = 1
            longest = max(longest, run)
            previous = day

        return StreakInfo(
            current_streak=current,
            longest_streak=longest,
            last_active_date=max(days),
        )


@dataclass
class DailyData:
    date: date
    steps: int = 0
    distance_m: float = 0.0
    duration_ms: int = 0
    activities: int = 0


@dataclass
class PeriodStats:
    total_steps: int = 0
    total_distance_m: float = 0.0
    total_duration_ms: int = 0
    average_daily_steps: int = 0
    best_day: DailyData | None = None
    activity_count: int = 0
    completion_rate: float = 0.0


@dataclass
class PeriodComparison:
    current: PeriodStats
    previous: PeriodStats
    steps_change: float
    distance_change: float
    duration_change: float
    completion_rate_change: float


@dataclass
class PersonalRecord:
    category: str
    value: float
    date: date
    label: str


def format_duration(ms: int) -> str:
    """Format milliseconds as ``1h 5m`` or ``42m``."""
    minutes = ms // 60000
    hours, remaining = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {remaining}m"
    return f"{minutes}m"


def format_distance(meters: float) -> str:
    """Format meters as ``1.23 km`` or ``850 m``."""
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{round(meters)} m"


def activities_in_range(
    activities: list[Activity],
    start: date,
    end: date,
    tz: tzinfo | None = None,
) -> list[Activity]:
    """Completed activities whose local start date is within ``[start, end]``."""
    return [
        a for a in activities
        if a.ended_at is not None and start <= local_date(a.started_at, tz) <= end
    ]


def aggregate_by_day(
    activities: list[Activity],
    start: date,
    end: date,
    tz: tzinfo | None = None,
) -> list[DailyData]:
    """One DailyData per calendar day in ``[start, end]``, empty days included."""
    buckets: dict[date, DailyData] = {}
    day = start
    while day <= end:
        buckets[day] = DailyData(date=day)
        day += timedelta(days=1)

    for activity in activities_in_range(activities, start, end, tz):
        bucket = buckets[local_date(activity.started_at, tz)]
        bucket.steps += activity.steps
        bucket.distance_m += activity.distance_m
        bucket.duration_ms += activity.duration_ms
        bucket.activities += 1

    return list(buckets.values())


def period_stats(
    activities: list[Activity],
    goals: list[Goal],
    start: date,
    end: date,
    tz: tzinfo | None = None,
) -> PeriodStats:
    """Totals, averages and goal completion for a date range."""
    days = aggregate_by_day(activities, start, end, tz)
    stats = PeriodStats()
    for day in days:
        stats.total_steps += day.steps
        stats.total_distance_m += day.distance_m
        stats.total_duration_ms += day.duration_ms
        stats.activity_count += day.activities
        if day.activities and (stats.best_day is None or day.steps > stats.best_day.steps):
            stats.best_day = day

    stats.average_daily_steps = round(stats.total_steps / max(1, len(days)))

    period_goals = [g for g in goals if start <= parse_iso_date(g.date) <= end]
    if period_goals:
        stats.completion_rate = sum(1 for g in period_goals if g.is_complete) / len(period_goals)
    return stats


def _relative_change(current: float, previous: float) -> float:
    return (current - previous) / previous if previous > 0 else 0.0


def compare_periods(
    activities: list[Activity],
    goals: list[Goal],
    start: date,
    end: date,
    tz: tzinfo | None = None,
) -> PeriodComparison:
    """Compare a date range against the equally long range just before it."""
    length = (end - start).days + 1
    previous_end = start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=length - 1)

    current = period_stats(activities, goals, start, end, tz)
    previous = period_stats(activities, goals, previous_start, previous_end, tz)
    return PeriodComparison(
        current=current,
        previous=previous,
        steps_change=_relative_change(current.total_steps, previous.total_steps),
        distance_change=_relative_change(current.total_distance_m, previous.total_distance_m),
        duration_change=_relative_change(current.total_duration_ms, previous.total_duration_ms),
        completion_rate_change=current.completion_rate - previous.completion_rate,
    )


def today_stats(
    activities: list[Activity],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> DailyData:
    today = today or date.today()
    return aggregate_by_day(activities, today, today, tz)[0]


def personal_records(activities: list[Activity], tz: tzinfo | None = None) -> list[PersonalRecord]:
    """Best single activities and best day among completed activities."""
    completed = [a for a in activities if a.ended_at is not None]
    if not completed:
        return []

    most_steps = max(completed, key=lambda a: a.steps)
    longest = max(completed, key=lambda a: a.distance_m)
    longest_time = max(completed, key=lambda a: a.duration_ms)

    steps_by_day: dict[date, int] = defaultdict(int)
    for activity in completed:
        steps_by_day[local_date(activity.started_at, tz)] += activity.steps
    best_day, best_day_steps = max(steps_by_day.items(), key=lambda item: item[1])

    return [
        PersonalRecord(
            category="Most Steps",
            value=most_steps.steps,
            date=local_date(most_steps.started_at, tz),
            label=f"{most_steps.steps:,}",
        ),
        PersonalRecord(
            category="Longest Distance",
            value=longest.distance_m,
            date=local_date(longest.started_at, tz),
            label=format_distance(longest.distance_m),
        ),
        PersonalRecord(
            category="Longest Activity",
            value=longest_time.duration_ms,
            date=local_date(longest_time.started_at, tz),
            label=format_duration(longest_time.duration_ms),
        ),
        PersonalRecord(
            category="Best Day",
            value=best_day_steps,
            date=best_day,
            label=f"{best_day_steps:,}",
        ),
    ]
