"""Year-in-review insights: annual totals and activity personality."""

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, tzinfo
from enum import Enum

from ..models.activity import Activity
from ..models.goal import Goal
from ..utils.dates import local_datetime, parse_iso_date
from .statistics import StreakCalculator, activities_in_range


class PersonalityType(str, Enum):
    EXPLORER = "explorer"
    CONSISTENT = "consistent"
    GOAL_CRUSHER = "goal-crusher"
    EARLY_BIRD = "early-bird"
    NIGHT_OWL = "night-owl"
    WEEKENDER = "weekender"


@dataclass(frozen=True)
class Personality:
    type: PersonalityType
    name: str
    description: str


PERSONALITIES = {
    PersonalityType.EXPLORER: Personality(
        PersonalityType.EXPLORER,
        "The Explorer",
        "You love discovering new routes. Variety is the spice of your fitness journey!",
    ),
    PersonalityType.CONSISTENT: Personality(
        PersonalityType.CONSISTENT,
        "The Consistent",
        "Day in, day out, you show up. Your dedication to regular activity is inspiring.",
    ),
    PersonalityType.GOAL_CRUSHER: Personality(
        PersonalityType.GOAL_CRUSHER,
        "The Goal Crusher",
        "When you set a target, nothing stands in your way.",
    ),
    PersonalityType.EARLY_BIRD: Personality(
        PersonalityType.EARLY_BIRD,
        "The Early Bird",
        "While others sleep, you stride. The morning hours belong to you!",
    ),
    PersonalityType.NIGHT_OWL: Personality(
        PersonalityType.NIGHT_OWL,
        "The Night Owl",
        "Your energy peaks when the sun goes down.",
    ),
    PersonalityType.WEEKENDER: Personality(
        PersonalityType.WEEKENDER,
        "The Weekender",
        "You pack your activity into epic weekend adventures.",
    ),
}


@dataclass
class AnnualStats:
    year: int
    total_steps: int = 0
    total_distance_m: float = 0.0
    total_duration_ms: int = 0
    total_activities: int = 0
    average_daily_steps: int = 0
    best_day: tuple[date, int] | None = None
    best_month: tuple[int, int] | None = None  # (month 1-12, steps)
    active_days: int = 0
    longest_streak: int = 0
    current_streak: int = 0


def _year_activities(activities: list[Activity], year: int, tz: tzinfo | None) -> list[Activity]:
    return activities_in_range(activities, date(year, 1, 1), date(year, 12, 31), tz)


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def annual_stats(
    activities: list[Activity],
    year: int,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> AnnualStats:
    """Totals, best day/month and streaks for one calendar year."""
    year_activities = _year_activities(activities, year, tz)
    stats = AnnualStats(year=year)

    steps_by_day: dict[date, int] = defaultdict(int)
    steps_by_month: dict[int, int] = defaultdict(int)
    for activity in year_activities:
        started = local_datetime(activity.started_at, tz)
        stats.total_steps += activity.steps
        stats.total_distance_m += activity.distance_m
        stats.total_duration_ms += activity.duration_ms
        steps_by_day[started.date()] += activity.steps
        steps_by_month[started.month] += activity.steps

    stats.total_activities = len(year_activities)
    stats.average_daily_steps = round(stats.total_steps / _days_in_year(year))
    stats.active_days = len(steps_by_day)
    if steps_by_day:
        stats.best_day = max(steps_by_day.items(), key=lambda item: item[1])
        stats.best_month = max(steps_by_month.items(), key=lambda item: item[1])

    streaks = StreakCalculator().calculate(year_activities, today=today, tz=tz)
    stats.longest_streak = streaks.longest_streak
    stats.current_streak = streaks.current_streak
    return stats


def route_diversity(activities: list[Activity]) -> float:
    """Distinct start/end pairs (rounded to ~1 km) per activity."""
    if not activities:
        return 0.0
    signatures = set()
    for activity in activities:
        if len(activity.route_points) >= 2:
            first, last = activity.route_points[0], activity.route_points[-1]
            signatures.add((
                round(first.latitude, 2),
                round(first.longitude, 2),
                round(last.latitude, 2),
                round(last.longitude, 2),
            ))
    return len(signatures) / len(activities)


def _time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def personality_scores(
    activities: list[Activity],
    goals: list[Goal],
    year: int,
    tz: tzinfo | None = None,
) -> dict[PersonalityType, float]:
    """Score each personality from 0 to 100."""
    year_activities = _year_activities(activities, year, tz)
    scores = {ptype: 0.0 for ptype in PersonalityType}
    if not year_activities:
        return scores

    starts = [local_datetime(a.started_at, tz) for a in year_activities]
    total = len(year_activities)

    scores[PersonalityType.EXPLORER] = route_diversity(year_activities) * 100
    active_days = len({s.date() for s in starts})
    scores[PersonalityType.CONSISTENT] = active_days / _days_in_year(year) * 100

    year_goals = [g for g in goals if parse_iso_date(g.date).year == year]
    if year_goals:
        completed = sum(1 for g in year_goals if g.is_complete)
        scores[PersonalityType.GOAL_CRUSHER] = completed / len(year_goals) * 100

    slots = [_time_of_day(s.hour) for s in starts]
    scores[PersonalityType.EARLY_BIRD] = slots.count("morning") / total * 100
    scores[PersonalityType.NIGHT_OWL] = (slots.count("evening") + slots.count("night")) / total * 100

    weekend = sum(1 for s in starts if s.weekday() >= 5)
    scores[PersonalityType.WEEKENDER] = weekend / total * 100
    return scores


def classify_personality(
    activities: list[Activity],
    goals: list[Goal],
    year: int,
    tz: tzinfo | None = None,
) -> Personality:
    """Pick the highest scoring personality; ties keep the earlier type."""
    scores = personality_scores(activities, goals, year, tz)
    best = PersonalityType.CONSISTENT
    best_score = 0.0
    for ptype in PersonalityType:
        if scores[ptype] > best_score:
            best, best_score = ptype, scores[ptype]
    return PERSONALITIES[best]
