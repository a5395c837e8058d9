"""Goal commands."""

from datetime import date

import click

from ..db import ActivityRepository, GoalRepository
from ..models.goal import GoalType
from ..services.goals import GoalService, goal_progress
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table

GOAL_TYPES = click.Choice([t.value for t in GoalType])


def _parse_date(ctx, param, value):
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD")


def _service() -> GoalService:
    return GoalService(GoalRepository(), ActivityRepository())


@click.group()
@click.pass_context
def goals(ctx):
    """Set goals and track progress."""
    ensure_initialized(ctx)


@goals.command(name="list")
@async_command
async def list_goals():
    """List all goals with progress."""
    all_goals = await GoalRepository().list_all()
    if not all_goals:
        echo_info("No goals yet. Run 'stryde goals refresh' to create today's goals")
        return

    rows = []
    for goal in all_goals:
        progress = goal_progress(goal)
        rows.append([
            goal.date,
            goal.type.value,
            f"{goal.current:,.0f}",
            f"{goal.target:,.0f}",
            f"{progress.percentage}%",
        ])

    click.echo()
    click.echo(format_table(["Date", "Type", "Current", "Target", "Progress"], rows))


@goals.command(name="set")
@click.argument("goal_type", type=GOAL_TYPES)
@click.argument("target", type=float)
@click.option("--date", "day", callback=_parse_date, help="Day in the goal period (default: today)")
@click.pass_context
@async_command
async def set_goal(ctx, goal_type: str, target: float, day: date):
    """Set a goal, replacing any goal for the same period."""
    if target <= 0:
        echo_error("Target must be positive")
        ctx.exit(1)
    goal = await _service().set_goal(GoalType(goal_type), target, day)
    echo_success(f"{goal.type.value} goal for {goal.date} set to {goal.target:,.0f}")


@goals.command()
@click.argument("goal_type", type=GOAL_TYPES)
@async_command
async def suggest(goal_type: str):
    """Suggest a target from recent performance."""
    target = await _service().suggest_target(GoalType(goal_type))
    click.echo(f"Suggested {goal_type} target: {target:,}")


@goals.command()
@async_command
async def refresh():
    """Create missing goals for today and this week, then update progress."""
    service = _service()
    created = await service.ensure_period_goals()
    for goal in created:
        echo_success(f"Created {goal.type.value} goal for {goal.date}: {goal.target:,.0f}")
    changed = await service.refresh_progress()
    echo_info(f"Updated progress on {len(changed)} goal(s)")
