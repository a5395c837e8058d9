"""Calibration profile commands."""

import click

from ..db import CalibrationProfileRepository
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table
from .utils import format_timestamp


@click.group()
@click.pass_context
def profiles(ctx):
    """Manage calibration profiles."""
    ensure_initialized(ctx)


@profiles.command(name="list")
@async_command
async def list_profiles():
    """List calibration profiles.

    The most confident profile per activity type is marked active.
    """
    repo = CalibrationProfileRepository()
    all_profiles = await repo.list_all()

    if not all_profiles:
        echo_info("No profiles found. Create one with 'stryde calibrate'")
        return

    active_ids = set()
    for profile in all_profiles:
        active = await repo.get_active(profile.activity_type)
        if active:
            active_ids.add(active.id)

    headers = ["ID", "Type", "Stride", "Confidence", "Updated", ""]
    rows = [
        [
            p.id,
            p.activity_type.value,
            f"{p.step_length_m:.2f} m",
            f"{p.confidence * 100:.0f}%",
            format_timestamp(p.updated_at),
            "active" if p.id in active_ids else "",
        ]
        for p in all_profiles
    ]

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_profiles)} profile(s)")


@profiles.command()
@click.argument("profile_id")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, profile_id: str, force: bool):
    """Delete a calibration profile."""
    repo = CalibrationProfileRepository()
    profile = await repo.get(profile_id)
    if not profile:
        echo_error(f"Profile {profile_id} not found")
        ctx.exit(1)

    if not force:
        click.echo(profile.get_summary())
        if not click.confirm("Are you sure you want to delete this profile?"):
            echo_info("Cancelled")
            return

    await repo.delete(profile_id)
    echo_success(f"Profile {profile_id} deleted")
