"""CLI command for listing lists.

Usage:
    tasklane lists
    tasklane lists --backend-url http://127.0.0.1:7878
"""

from __future__ import annotations

import asyncio

import typer

from tasklane.cli._common import BACKEND_URL_OPTION, VERBOSE_OPTION, build_manager


def lists(
    backend_url: str | None = BACKEND_URL_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show every list, sorted by title."""
    asyncio.run(_lists(backend_url, verbose))


async def _lists(backend_url: str | None, verbose: bool) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()

    async with build_manager(backend_url, verbose) as manager:
        store = manager.list_store
        await store.fetch_lists()

        if store.error:
            console.print(f"[red]Error:[/red] {store.error}")
            raise typer.Exit(code=1)

        table = Table(title="Lists")
        table.add_column("ID", style="cyan")
        table.add_column("Title", style="green")
        table.add_column("Icon", style="yellow")
        for item in store.sorted_lists:
            table.add_row(item.id, item.title, item.icon)

        console.print(table)
        console.print(f"[bold]Total:[/bold] {len(store.lists)} lists")
