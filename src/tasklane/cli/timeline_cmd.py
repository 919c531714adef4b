"""CLI command for showing the timeline.

Usage:
    tasklane timeline
    tasklane timeline --all
"""

from __future__ import annotations

import asyncio

import typer

from tasklane.cli._common import BACKEND_URL_OPTION, VERBOSE_OPTION, build_manager, events_table

# Group colors mapped to rich styles
_STYLES = {
    "primary": "blue",
    "secondary": "cyan",
    "info": "magenta",
    "error": "red",
}


def timeline(
    show_empty: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Also show empty buckets",
    ),
    backend_url: str | None = BACKEND_URL_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show events grouped by date bucket, highest priority first."""
    asyncio.run(_timeline(show_empty, backend_url, verbose))


async def _timeline(show_empty: bool, backend_url: str | None, verbose: bool) -> None:
    from rich.console import Console

    console = Console()

    async with build_manager(backend_url, verbose) as manager:
        store = manager.timeline_store
        await store.fetch_events()

        # Partial results are still shown
        if store.error:
            console.print(f"[yellow]Warning:[/yellow] {store.error}")

        groups = store.groups if show_empty else store.visible_groups()
        if not groups:
            console.print("[yellow]Nothing scheduled[/yellow]")
            return

        for group in groups:
            style = _STYLES.get(group.color, "bold")
            title = f"[{style}]{group.title}[/{style}]"
            console.print(events_table(title, store.sorted_items(group.bucket)))
