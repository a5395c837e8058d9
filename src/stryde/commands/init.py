"""Initialize project command."""

import click

from ..db import get_data_dir, get_db_path, init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the stryde data directory and database.

    Safe to run again; existing data is kept.
    """
    data_dir = get_data_dir()
    echo_info(f"Initializing stryde in {data_dir}")

    db_path = get_db_path(data_dir)
    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Calibrate your stride from a recorded walk:")
    click.echo("     stryde calibrate walk.json --steps 52")
    click.echo()
    click.echo("  2. Replay a recorded activity:")
    click.echo("     stryde track replay run.json")
