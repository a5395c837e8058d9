"""Shared CLI helpers: coroutine commands, database checks and styled output."""

import asyncio
import logging
from functools import wraps

import click

from ..db import get_db_path
from ..tracking.session import ConcurrentSessionConflict

logger = logging.getLogger(__name__)


def async_command(f):
    """Run a coroutine command to completion.

    An activity left unfinished by another run becomes a normal CLI error
    pointing at ``stryde track recover``.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except ConcurrentSessionConflict as exc:
            logger.debug("Refused to start: %s", exc)
            raise click.ClickException(
                f"{exc}. Finish it with 'stryde track recover' or delete it with "
                f"'stryde activities delete {exc.activity_id}'."
            ) from exc

    return wrapper


def ensure_initialized(ctx: click.Context) -> None:
    """Exit unless the stryde database exists."""
    db_path = get_db_path()
    if not db_path.exists():
        echo_error(f"No stryde database at {db_path}. Run 'stryde init' first.")
        ctx.exit(1)


def _echo(tag: str, color: str, message: str, err: bool = False) -> None:
    click.echo(click.style(f"{tag:<5} ", fg=color, bold=True) + message, err=err)


def echo_success(message: str) -> None:
    _echo("done", "green", message)


def echo_error(message: str) -> None:
    _echo("error", "red", message, err=True)


def echo_info(message: str) -> None:
    _echo("info", "cyan", message)


def echo_warning(message: str) -> None:
    _echo("warn", "yellow", message, err=True)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Left-aligned plain text table sized to the widest cell per column."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append("".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)))

    return "\n".join(line.rstrip() for line in lines)
