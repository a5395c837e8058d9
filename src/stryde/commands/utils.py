"""Formatting helpers for command output."""

from ..models.activity import Activity
from ..services.statistics import format_distance, format_duration
from ..utils.dates import local_datetime


def format_timestamp(ms: int | None) -> str:
    if ms is None:
        return "N/A"
    return local_datetime(ms).strftime("%Y-%m-%d %H:%M")


def activity_row(activity: Activity) -> list[str]:
    return [
        activity.id,
        format_timestamp(activity.started_at),
        format_distance(activity.distance_m),
        format_duration(activity.duration_ms),
        f"{activity.steps:,}",
        "done" if activity.is_finished else "in progress",
    ]


ACTIVITY_HEADERS = ["ID", "Started", "Distance", "Duration", "Steps", "Status"]
