"""Activity history commands."""

import click

from ..db import ActivityRepository
from ..services.statistics import format_distance, format_duration
from ..tracking.elevation import elevation_profile
from ..utils.dates import day_end_ms, day_start_ms, parse_iso_date
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table
from .utils import ACTIVITY_HEADERS, activity_row, format_timestamp


@click.group()
@click.pass_context
def activities(ctx):
    """Browse and delete recorded activities."""
    ensure_initialized(ctx)


@activities.command(name="list")
@click.option("--limit", "-n", default=20, show_default=True, help="Number of activities")
@click.option("--date", "day", help="Only activities started on this local day (YYYY-MM-DD)")
@click.pass_context
@async_command
async def list_activities(ctx, limit: int, day: str | None):
    """List recent activities."""
    repo = ActivityRepository()
    if day is None:
        recent = await repo.list_recent(limit=limit)
    else:
        try:
            parsed = parse_iso_date(day)
        except ValueError:
            echo_error(f"Invalid date '{day}'; expected YYYY-MM-DD")
            ctx.exit(1)
        recent = (await repo.list_between(day_start_ms(parsed), day_end_ms(parsed)))[:limit]

    if not recent:
        echo_info("No activities found. Record one with 'stryde track replay'")
        return

    click.echo()
    click.echo(format_table(ACTIVITY_HEADERS, [activity_row(a) for a in recent]))
    click.echo()
    click.echo(f"Showing {len(recent)} activity(ies)")


@activities.command()
@click.argument("activity_id")
@click.pass_context
@async_command
async def show(ctx, activity_id: str):
    """Show details of an activity."""
    activity = await ActivityRepository().get(activity_id)
    if not activity:
        echo_error(f"Activity {activity_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo("=" * 60)
    click.echo(f"Activity {activity.id}")
    click.echo("=" * 60)
    click.echo(f"Profile: {activity.profile_id}")
    click.echo(f"Started: {format_timestamp(activity.started_at)}")
    click.echo(f"Ended: {format_timestamp(activity.ended_at)}")
    click.echo(f"Distance: {format_distance(activity.distance_m)}")
    click.echo(f"Duration: {format_duration(activity.duration_ms)}")
    click.echo(f"Steps: {activity.steps:,}")
    click.echo(f"Route points: {len(activity.route_points)}")

    profile = elevation_profile(activity.route_points)
    if any(p.elevation is not None for p in activity.route_points):
        click.echo()
        click.echo("Elevation:")
        click.echo("-" * 40)
        click.echo(f"  Gain: {profile.total_gain} m  Loss: {profile.total_loss} m")
        click.echo(
            f"  Min: {profile.min_elevation} m  Max: {profile.max_elevation} m  "
            f"Avg: {profile.average_elevation} m"
        )


@activities.command()
@click.argument("activity_id")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, activity_id: str, force: bool):
    """Delete an activity."""
    repo = ActivityRepository()
    activity = await repo.get(activity_id)
    if not activity:
        echo_error(f"Activity {activity_id} not found")
        ctx.exit(1)

    if not force:
        click.echo(f"Activity started {format_timestamp(activity.started_at)}")
        if not click.confirm("Are you sure you want to delete this activity?"):
            echo_info("Cancelled")
            return

    await repo.delete(activity_id)
    echo_success(f"Activity {activity_id} deleted")
