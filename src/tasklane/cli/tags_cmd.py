"""CLI command for showing tags.

Usage:
    tasklane tags
    tasklane tags --tag urgent
"""

from __future__ import annotations

import asyncio

import typer

from tasklane.cli._common import BACKEND_URL_OPTION, VERBOSE_OPTION, build_manager, events_table


def tags(
    tag: str | None = typer.Option(
        None,
        "--tag",
        "-t",
        help="Show the events carrying this tag",
    ),
    backend_url: str | None = BACKEND_URL_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show every tag, or the events of one tag."""
    asyncio.run(_tags(tag, backend_url, verbose))


async def _tags(tag: str | None, backend_url: str | None, verbose: bool) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()

    async with build_manager(backend_url, verbose) as manager:
        store = manager.tag_store

        if tag is not None:
            events = await store.get_tag_content(tag)
            if store.error:
                console.print(f"[red]Error:[/red] {store.error}")
                raise typer.Exit(code=1)
            console.print(events_table(f"Events tagged {tag}", events))
            return

        await store.fetch_tags()
        if store.error:
            console.print(f"[red]Error:[/red] {store.error}")
            raise typer.Exit(code=1)

        table = Table(title="Tags")
        table.add_column("Name", style="cyan")
        table.add_column("Color", style="green")
        for item in store.tags:
            table.add_row(item.name, item.color.value)
        console.print(table)
