"""CLI entry point for stryde."""

import logging

import click

from .commands import activities, calibrate, goals, init, insights, profiles, track


@click.group()
@click.version_option(version="0.1.0", prog_name="stryde")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """stryde: calibrated stride length and GPS activity tracking.

    Example usage:

        # Initialize the project
        stryde init

        # Calibrate your stride from a recorded 50 m walk
        stryde calibrate walk.json --steps 64

        # Record an activity from GPS fixes
        stryde track replay run.json

        # See streaks, records and goals
        stryde insights
        stryde goals refresh
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
main.add_command(init)
main.add_command(calibrate)
main.add_command(profiles)
main.add_command(track)
main.add_command(activities)
main.add_command(goals)
main.add_command(insights)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
