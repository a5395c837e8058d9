"""Insights command."""

from datetime import date, timedelta

import click

from ..db import ActivityRepository, GoalRepository
from ..services.insights import annual_stats, classify_personality
from ..services.statistics import (
    StreakCalculator,
    compare_periods,
    format_distance,
    format_duration,
    personal_records,
)
from .base import async_command, echo_info, ensure_initialized


def _change(value: float) -> str:
    return f"{value * 100:+.0f}%"


@click.command()
@click.option("--days", default=7, show_default=True, help="Length of the stats period")
@click.option("--year", type=int, help="Year for the personality summary (default: this year)")
@click.pass_context
@async_command
async def insights(ctx, days: int, year: int | None):
    """Show streaks, recent stats, personal records and your personality."""
    ensure_initialized(ctx)

    activities = await ActivityRepository().list_recent(limit=None)
    goals = await GoalRepository().list_all()
    if not activities:
        echo_info("No activities yet")
        return

    today = date.today()
    year = year or today.year

    streaks = StreakCalculator().calculate(activities, today=today)
    click.echo()
    click.echo(click.style("Streaks", bold=True))
    click.echo(f"  Current: {streaks.current_streak} day(s)")
    click.echo(f"  Longest: {streaks.longest_streak} day(s)")
    if streaks.last_active_date:
        click.echo(f"  Last active: {streaks.last_active_date.isoformat()}")

    start = today - timedelta(days=days - 1)
    comparison = compare_periods(activities, goals, start, today)
    stats = comparison.current
    click.echo()
    click.echo(click.style(f"Last {days} days", bold=True))
    click.echo(f"  Steps: {stats.total_steps:,} ({_change(comparison.steps_change)})")
    click.echo(
        f"  Distance: {format_distance(stats.total_distance_m)} "
        f"({_change(comparison.distance_change)})"
    )
    click.echo(
        f"  Active time: {format_duration(stats.total_duration_ms)} "
        f"({_change(comparison.duration_change)})"
    )
    click.echo(f"  Average daily steps: {stats.average_daily_steps:,}")
    click.echo(f"  Goal completion: {stats.completion_rate * 100:.0f}%")

    records = personal_records(activities)
    if records:
        click.echo()
        click.echo(click.style("Personal records", bold=True))
        for record in records:
            click.echo(f"  {record.category}: {record.label} ({record.date.isoformat()})")

    annual = annual_stats(activities, year, today=today)
    personality = classify_personality(activities, goals, year)
    click.echo()
    click.echo(click.style(f"{year} in review", bold=True))
    click.echo(f"  Activities: {annual.total_activities}  Active days: {annual.active_days}")
    click.echo(f"  You are {personality.name}. {personality.description}")
