"""
Command-line interface for the GST portal observability core.

Exposes quick commands to inspect persisted notifications and sample runtime metrics.
"""

from __future__ import annotations

import typer
from rich.console import Console

from gp_common.logging import configure_logging
from gp_ui.commands.notifications import create_notifications_app
from gp_ui.commands.perf import create_perf_app

_console = Console()


def console_provider() -> Console:
    return _console


app = typer.Typer(help="Inspect GST portal notifications and performance telemetry.", no_args_is_help=True)
app.add_typer(create_notifications_app(console_provider), name="notifications")
app.add_typer(create_perf_app(console_provider), name="perf")


@app.callback()
def entry(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Global options."""
    configure_logging(debug=debug)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
