"""Stride calibration command."""

from pathlib import Path

import click

from ..db import CalibrationProfileRepository
from ..models.calibration import ActivityType
from ..services.calibration import CalibrationWalk, build_profile
from ..tracking.accumulator import SignalQuality
from ..tracking.location import coordinate_from_payload, load_payloads
from .base import async_command, echo_error, echo_success, echo_warning, ensure_initialized


@click.command()
@click.argument("fixes_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--steps", "-s", type=int, required=True, help="Steps you counted during the walk")
@click.option(
    "--type",
    "activity_type",
    type=click.Choice([t.value for t in ActivityType]),
    default=ActivityType.WALKING.value,
    show_default=True,
    help="Activity the stride applies to",
)
@click.option("--save/--no-save", default=True, help="Store the resulting profile")
@click.pass_context
@async_command
async def calibrate(ctx: click.Context, fixes_file: Path, steps: int, activity_type: str, save: bool):
    """Calibrate stride length from a recorded walk.

    FIXES_FILE is a JSON list of location payloads recorded while walking.
    Count your steps during the walk and pass them with --steps.
    """
    try:
        payloads = load_payloads(fixes_file)
    except ValueError as exc:
        echo_error(str(exc))
        ctx.exit(1)

    walk = CalibrationWalk()
    walk.start()
    skipped = 0
    for payload in payloads:
        try:
            walk.ingest(coordinate_from_payload(payload))
        except ValueError:
            skipped += 1

    if skipped:
        echo_warning(f"Skipped {skipped} malformed location payload(s)")
    if walk.signal_quality is SignalQuality.WEAK:
        echo_warning("GPS signal was weak; the result may be inaccurate")

    click.echo(f"Distance walked: {walk.distance_m:.1f} m")
    click.echo(f"Steps counted: {steps}")

    result = walk.finish(steps)
    if not result.ok:
        echo_error(result.message)
        ctx.exit(1)

    click.echo(f"Stride length: {result.stride_length_m:.2f} m")
    click.echo(f"Confidence: {result.confidence * 100:.0f}%")

    if not save:
        return

    ensure_initialized(ctx)
    profile = build_profile(result, ActivityType(activity_type))
    await CalibrationProfileRepository().create(profile)
    echo_success(f"Saved calibration profile {profile.id}")
