from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.console import Console

from gp_common.config.settings import TrackerSettings
from gp_perf.export import save_history
from gp_perf.sources import MemoryUsageSource, NetworkLatencySource, SampleSource
from gp_perf.tracker import PerformanceTracker
from gp_ui.presenters import build_issue_lines, build_metrics_table, score_style


def create_perf_app(console_provider: Callable[[], Console]) -> typer.Typer:
    """Build the perf Typer app."""
    app = typer.Typer(help="Sample runtime metrics and show the health score.", no_args_is_help=True)

    @app.command("sample")
    def sample(
        count: int = typer.Option(3, "--count", "-n", min=1, help="Number of sampling rounds."),
        interval: float = typer.Option(1.0, "--interval", "-i", min=0.0, help="Seconds between rounds."),
        probe_url: Optional[str] = typer.Option(None, "--probe-url", help="URL used for the latency probe."),
        no_probe: bool = typer.Option(False, "--no-probe", help="Skip the network latency probe."),
        export: Optional[Path] = typer.Option(None, "--export", help="Write the history to CSV or JSON (by suffix)."),
    ) -> None:
        """Take a few samples and print metrics, issues and score."""
        settings = TrackerSettings.from_env()
        sources: List[SampleSource] = [MemoryUsageSource()]
        if not no_probe:
            sources.append(
                NetworkLatencySource(probe_url or settings.probe_url, settings.probe_timeout_seconds)
            )
        tracker = PerformanceTracker(settings=settings, sources=sources)
        console = console_provider()

        for round_no in range(count):
            tracker.sampler.sample_once()
            if interval and round_no < count - 1:
                time.sleep(interval)

        console.print(build_metrics_table(tracker.get_latest(), tracker.get_average()))
        for line in build_issue_lines(tracker.get_issues()):
            console.print(line)
        for error in tracker.sampler.get_errors():
            console.print(f"[dim]skipped: {error}[/dim]")
        score = tracker.score
        style = score_style(score)
        console.print(f"Score: [{style}]{score}/100[/{style}]")

        if export is not None:
            fmt = "json" if export.suffix.lower() == ".json" else "csv"
            save_history(tracker.history, export, format=fmt)
            console.print(f"History written to {export}")

    return app
