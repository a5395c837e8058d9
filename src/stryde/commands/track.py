"""Activity tracking commands."""

from pathlib import Path

import click

from ..db import ActivityRepository, CalibrationProfileRepository
from ..models.location import Coordinate
from ..services.recorder import ActivityRecorder
from ..services.statistics import format_distance, format_duration
from ..tracking.clock import ManualClock
from ..tracking.location import ReplayLocationProvider, coordinate_from_payload, load_payloads
from ..tracking.noise import DEFAULT_MAX_DELTA_M, NoiseFilter
from .base import async_command, echo_error, echo_info, echo_success, echo_warning, ensure_initialized


@click.group()
@click.pass_context
def track(ctx):
    """Record activities from GPS fixes."""
    ensure_initialized(ctx)


def _first_timestamp(payloads: list[dict]) -> int | None:
    for payload in payloads:
        try:
            return coordinate_from_payload(payload).timestamp
        except ValueError:
            continue
    return None


def _print_summary(recorder: ActivityRecorder) -> None:
    activity = recorder.activity
    click.echo()
    click.echo(click.style(f"Activity {activity.id}", bold=True))
    click.echo("=" * 50)
    click.echo(f"Distance: {format_distance(activity.distance_m)}")
    click.echo(f"Duration: {format_duration(activity.duration_ms)}")
    click.echo(f"Steps: {activity.steps:,}")
    click.echo(f"Route points: {len(activity.route_points)}")
    if any(p.elevation is not None for p in activity.route_points):
        click.echo(f"Elevation gain: {activity.elevation_gain_m:.0f} m")
    if recorder.unsynced:
        echo_warning(f"{len(recorder.failures)} write(s) failed; storage may be behind")


@track.command()
@click.argument("fixes_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--profile", "profile_id", help="Calibration profile ID (default: most confident)")
@click.option("--pause-at", type=int, help="Pause after this many fixes")
@click.option("--resume-at", type=int, help="Resume after this many fixes")
@click.option(
    "--max-jump",
    type=float,
    default=DEFAULT_MAX_DELTA_M,
    show_default=True,
    help="Largest accepted distance between fixes, in meters",
)
@click.pass_context
@async_command
async def replay(
    ctx,
    fixes_file: Path,
    profile_id: str | None,
    pause_at: int | None,
    resume_at: int | None,
    max_jump: float,
):
    """Replay recorded GPS fixes as a full activity.

    Time is taken from the fix timestamps. Fixes delivered while paused
    are ignored. Steps are derived from distance with the profile's stride.
    """
    profile_repo = CalibrationProfileRepository()
    profile = await profile_repo.get(profile_id) if profile_id else await profile_repo.get_active()
    if profile is None:
        echo_error("No calibration profile found. Run 'stryde calibrate' first.")
        ctx.exit(1)

    if pause_at is not None and resume_at is not None and resume_at <= pause_at:
        echo_error("--resume-at must be greater than --pause-at")
        ctx.exit(1)

    try:
        payloads = load_payloads(fixes_file)
    except ValueError as exc:
        echo_error(str(exc))
        ctx.exit(1)
    first = _first_timestamp(payloads)
    if first is None:
        echo_error("No usable location fixes in file")
        ctx.exit(1)

    try:
        noise_filter = NoiseFilter(max_delta_m=max_jump)
    except ValueError as exc:
        echo_error(str(exc))
        ctx.exit(1)

    clock = ManualClock(first)
    recorder = ActivityRecorder(ActivityRepository(), clock=clock, noise_filter=noise_filter)
    provider = ReplayLocationProvider(payloads, clock=clock)
    await recorder.start(profile.id)

    async def on_fix(fix: Coordinate, accepted: bool) -> None:
        if provider.delivered == pause_at:
            await recorder.pause()
            echo_info(f"Paused after {pause_at} fixes")
        elif provider.delivered == resume_at:
            await recorder.resume()
            echo_info(f"Resumed after {resume_at} fixes")

    await recorder.track(provider, on_fix=on_fix)
    await recorder.resume()
    await recorder.derive_steps(profile.step_length_m)
    await recorder.end()

    _print_summary(recorder)
    echo_success("Activity saved")


@track.command()
@click.option("--paused", is_flag=True, help="Treat the interrupted session as paused")
@click.pass_context
@async_command
async def recover(ctx, paused: bool):
    """Finish an activity interrupted by a crash or restart.

    Distance and duration are kept as last saved; time between the last
    save and now is not counted.
    """
    recorder = ActivityRecorder(ActivityRepository())
    session = await recorder.recover(paused=paused)
    if session is None:
        echo_info("No interrupted activity found")
        return

    echo_info(f"Recovered activity {session.activity.id} ({session.state.value})")
    await recorder.end()
    _print_summary(recorder)
    echo_success("Activity finalized")
