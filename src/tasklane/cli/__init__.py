"""CLI commands for tasklane.

Provides a command-line view of the cache layer using Typer:
- tasklane lists: Show all lists
- tasklane events: Show a page of a list's events
- tasklane timeline: Show the timeline buckets
- tasklane tags: Show tags, or the events of one tag

Usage:
    tasklane --help
    tasklane lists --backend-url http://127.0.0.1:7878
    tasklane events 3f2c... --page 2
    tasklane timeline
    tasklane tags --tag urgent
"""

import typer

from tasklane.cli.events_cmd import events
from tasklane.cli.lists_cmd import lists
from tasklane.cli.tags_cmd import tags
from tasklane.cli.timeline_cmd import timeline

# Main CLI application
app = typer.Typer(
    name="tasklane",
    help="tasklane: cached client for the task/event backend",
    no_args_is_help=True,
)

app.command("lists")(lists)
app.command("events")(events)
app.command("timeline")(timeline)
app.command("tags")(tags)


@app.callback()
def callback() -> None:
    """tasklane: cached client for the task/event backend."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
