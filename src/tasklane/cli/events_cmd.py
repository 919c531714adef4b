"""CLI command for showing the events of a list.

Usage:
    tasklane events LIST_ID
    tasklane events LIST_ID --page 3
"""

from __future__ import annotations

import asyncio

import typer

from tasklane.cli._common import BACKEND_URL_OPTION, VERBOSE_OPTION, build_manager, events_table


def events(
    list_id: str = typer.Argument(..., help="ID of the list"),
    page: int = typer.Option(
        1,
        "--page",
        "-p",
        min=1,
        help="Load pages 1..N",
    ),
    backend_url: str | None = BACKEND_URL_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show the events of a list, loading pages up to ``--page``."""
    asyncio.run(_events(list_id, page, backend_url, verbose))


async def _events(list_id: str, page: int, backend_url: str | None, verbose: bool) -> None:
    from rich.console import Console

    console = Console()

    async with build_manager(backend_url, verbose) as manager:
        store = manager.event_store
        await store.fetch_events_by_list_id(list_id)
        while not store.error and store.get_page_info(list_id).current_page < page:
            if not store.get_page_info(list_id).has_more:
                break
            await store.fetch_events_by_list_id(list_id, load_more=True)

        if store.error:
            console.print(f"[red]Error:[/red] {store.error}")
            raise typer.Exit(code=1)

        info = store.get_page_info(list_id)
        console.print(events_table(f"Events of {list_id}", store.get_events_by_list_id(list_id)))
        more = "more available" if info.has_more else "no more pages"
        console.print(f"[bold]Pages:[/bold] 1..{info.current_page} ({more})")
