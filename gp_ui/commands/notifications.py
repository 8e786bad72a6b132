from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console

from gp_common.config.settings import NotificationSettings
from gp_common.scheduling import ManualClock, ManualScheduler, SystemClock
from gp_notify.models import NotificationCategory, NotificationPriority, NotificationType
from gp_notify.persistence import JsonFileKeyValueStore
from gp_notify.store import NotificationStore
from gp_ui.presenters import build_notification_table

DEFAULT_STORE_PATH = Path("~/.gp/notifications.json")


def _open_store(path: Optional[Path]) -> NotificationStore:
    """Open the file-backed store for a single command.

    Expiry timers never fire inside a one-shot command; entries that outlived
    their duration are dropped when the next command restores the store.
    """
    settings = NotificationSettings.from_env()
    resolved = path or settings.storage_path or DEFAULT_STORE_PATH
    scheduler = ManualScheduler(ManualClock(SystemClock().now()))
    return NotificationStore(JsonFileKeyValueStore(resolved), scheduler=scheduler, settings=settings)


StoreOption = typer.Option(None, "--store", "-s", help="JSON file holding the persisted notifications.")


def create_notifications_app(console_provider: Callable[[], Console]) -> typer.Typer:
    """Build the notifications Typer app."""
    app = typer.Typer(help="Inspect and manage persisted notifications.", no_args_is_help=True)

    @app.command("list")
    def list_notifications(store_path: Optional[Path] = StoreOption) -> None:
        """Show persisted notifications, newest first."""
        store = _open_store(store_path)
        console = console_provider()
        if not len(store):
            console.print("No notifications")
            return
        console.print(
            build_notification_table(store.notifications, store.unread_count, store.clock.now())
        )

    @app.command("add")
    def add_notification(
        title: str = typer.Argument(..., help="Notification title."),
        message: str = typer.Argument(..., help="Notification body."),
        type_: NotificationType = typer.Option(NotificationType.INFO, "--type", "-t", case_sensitive=False),
        persistent: bool = typer.Option(False, "--persistent", help="Keep until dismissed."),
        duration_ms: Optional[int] = typer.Option(None, "--duration-ms", min=0, help="Lifetime of a transient notification."),
        category: Optional[NotificationCategory] = typer.Option(None, "--category", case_sensitive=False),
        priority: Optional[NotificationPriority] = typer.Option(None, "--priority", case_sensitive=False),
        store_path: Optional[Path] = StoreOption,
    ) -> None:
        """Add a notification and print its id."""
        store = _open_store(store_path)
        notification_id = store.add(
            title,
            message,
            type_,
            persistent=persistent,
            duration_ms=duration_ms,
            category=category,
            priority=priority,
        )
        console_provider().print(notification_id)

    @app.command("read")
    def mark_read(
        notification_id: Optional[str] = typer.Argument(None, help="Id (or id prefix) to mark as read."),
        all_: bool = typer.Option(False, "--all", help="Mark every notification as read."),
        store_path: Optional[Path] = StoreOption,
    ) -> None:
        """Mark one or all notifications as read."""
        store = _open_store(store_path)
        console = console_provider()
        if all_:
            store.mark_all_read()
        elif notification_id:
            store.mark_read(_resolve_id(store, notification_id, console))
        else:
            console.print("[red]Provide an id or --all[/red]")
            raise typer.Exit(1)
        console.print(f"{store.unread_count} unread")

    @app.command("remove")
    def remove(
        notification_id: str = typer.Argument(..., help="Id (or id prefix) to remove."),
        store_path: Optional[Path] = StoreOption,
    ) -> None:
        """Dismiss a notification."""
        store = _open_store(store_path)
        console = console_provider()
        store.remove(_resolve_id(store, notification_id, console))
        console.print(f"{len(store)} remaining")

    @app.command("clear")
    def clear(store_path: Optional[Path] = StoreOption) -> None:
        """Remove every notification."""
        store = _open_store(store_path)
        store.clear_all()
        console_provider().print("Cleared")

    return app


def _resolve_id(store: NotificationStore, prefix: str, console: Console) -> str:
    """Expand an id prefix to the single notification it names, or exit 1."""
    matches = [n.id for n in store.notifications if n.id.startswith(prefix)]
    if prefix in matches:
        return prefix
    if len(matches) == 1:
        return matches[0]
    if matches:
        console.print(f"[red]Id prefix '{prefix}' matches {len(matches)} notifications[/red]")
    else:
        console.print(f"[red]No notification matches '{prefix}'[/red]")
    raise typer.Exit(1)
