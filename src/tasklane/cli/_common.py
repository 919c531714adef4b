"""Helpers shared by the CLI commands."""

from __future__ import annotations

import typer
from rich.table import Table

from tasklane.config import Settings
from tasklane.config import settings as default_settings
from tasklane.manager import CacheManager
from tasklane.models import Event
from tasklane.observability.logging import configure_logging

BACKEND_URL_OPTION = typer.Option(
    None,
    "--backend-url",
    "-u",
    help="Backend URL (defaults to TASKLANE_BACKEND_URL)",
)

VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log cache activity",
)


def build_manager(backend_url: str | None, verbose: bool) -> CacheManager:
    configure_logging(
        json_format=default_settings.log_json,
        level="DEBUG" if verbose else default_settings.log_level,
    )
    settings = default_settings
    if backend_url:
        settings = Settings(backend_url=backend_url)
    return CacheManager.from_settings(settings)


def events_table(title: str, events: list[Event]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Priority", style="yellow")
    table.add_column("Deadline")
    table.add_column("Done")
    table.add_column("Tags", style="magenta")

    for event in events:
        table.add_row(
            event.id,
            event.title,
            event.priority.value,
            event.deadline,
            "✓" if event.finished else "",
            ", ".join(event.tags or ()) or "-",
        )
    return table
