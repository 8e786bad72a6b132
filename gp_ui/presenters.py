"""Rich renderables for notifications and performance snapshots."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from rich.table import Table

from gp_notify.models import Notification
from gp_notify.reporting import format_age
from gp_perf.models import MetricName, MetricWindow, PerformanceIssue

_TYPE_STYLES = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
}

_UNITS = {
    MetricName.LOAD_TIME: "ms",
    MetricName.RENDER_TIME: "ms",
    MetricName.MEMORY_USAGE: "%",
    MetricName.CACHE_HIT_RATE: "%",
    MetricName.NETWORK_LATENCY: "ms",
    MetricName.ERROR_RATE: "%",
}


def format_metric(value: Optional[float], unit: str) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{1 if value < 10 else 0}f}{unit}"


def score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def build_notification_table(
    notifications: Iterable[Notification], unread: int, now: datetime
) -> Table:
    table = Table(title=f"Notifications ({unread} unread)", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Message")
    table.add_column("Age", justify="right")
    table.add_column("Flags")
    for n in notifications:
        flags = []
        if not n.read:
            flags.append("unread")
        if n.persistent:
            flags.append("persistent")
        if n.priority:
            flags.append(n.priority.value)
        style = _TYPE_STYLES.get(n.type.value, "")
        table.add_row(
            n.id[:8],
            f"[{style}]{n.type.value}[/{style}]",
            n.title,
            n.message,
            format_age(n.timestamp, now),
            ", ".join(flags),
        )
    return table


def build_metrics_table(latest: Optional[MetricWindow], averages: Dict[MetricName, float]) -> Table:
    table = Table(title="Performance Metrics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Latest", justify="right")
    table.add_column("Average", justify="right", style="blue")
    for metric in MetricName:
        unit = _UNITS[metric]
        current = latest.get(metric) if latest else 0.0
        table.add_row(
            metric.value,
            format_metric(current if current > 0 else None, unit),
            format_metric(averages.get(metric), unit),
        )
    return table


def build_issue_lines(issues: List[PerformanceIssue]) -> List[str]:
    lines = []
    for issue in issues:
        style = "red" if issue.type.value == "error" else "yellow"
        lines.append(f"[{style}]{issue.type.value.upper()}[/{style}] {issue.message}")
    return lines
