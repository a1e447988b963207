"""Main CLI application entry point.

Defines the Typer application for the ``dr`` command. All modes are
exclusive:

    dr foo.txt      drop the file
    dr -r foo.txt   recover the file
    dr -d foo.txt   delete forever
    dr -l           list all dropped files
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from dropctl import __version__
from dropctl.core.config import ConfigError, resolve_holding_dir
from dropctl.core.dispatcher import BatchOutcome, Dispatcher
from dropctl.models.entry import DroppedEntry, ListedEntry, Verb
from dropctl.models.request import Request, RequestError
from dropctl.store.holding import HoldingStore, HoldingStoreError
from dropctl.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_plain,
    print_success,
)

app = typer.Typer(
    name="dr",
    help=(
        "Drop files from the current filesystem into a holding directory. "
        "Dropped entries can be recovered until they are purged or the "
        "holding directory is cleared (by default on reboot)."
    ),
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dr (dropctl) version {__version__}")
        raise typer.Exit()


@app.command()
def main(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Files or directories to act on.", show_default=False),
    ] = None,
    recover: Annotated[
        bool,
        typer.Option("--recover", "-r", help="Recover previously dropped entries."),
    ] = False,
    delete: Annotated[
        bool,
        typer.Option("--delete", "-d", help="Delete dropped entries permanently."),
    ] = False,
    list_entries: Annotated[
        bool,
        typer.Option("--list", "-l", help="List all dropped entries."),
    ] = False,
    long: Annotated[
        bool,
        typer.Option("--long", help="With --list, show drop time and stored name."),
    ] = False,
    holding_dir: Annotated[
        Path | None,
        typer.Option(
            "--holding-dir",
            help="Holding directory to use instead of the configured one.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Drop, recover, purge or list entries in the holding directory."""
    _configure_logging(verbose)

    # Validate the request before touching the filesystem
    try:
        request = Request(
            verb=_select_verb(recover=recover, delete=delete, list_entries=list_entries),
            paths=tuple(paths or ()),
        )
    except RequestError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    try:
        root = resolve_holding_dir(holding_dir)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    store = HoldingStore(root)
    try:
        store.ensure_exists()
        outcome = Dispatcher(store).run(request)
    except HoldingStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if outcome.verb == Verb.LIST:
        _print_listing(outcome.listing, long)
    _print_results(outcome)

    if outcome.failed:
        raise typer.Exit(code=1)


# === Private helper functions ===


def _select_verb(recover: bool, delete: bool, list_entries: bool) -> Verb:
    """Map the exclusive mode flags to a verb."""
    selected = [
        verb
        for verb, flag in (
            (Verb.RECOVER, recover),
            (Verb.PURGE, delete),
            (Verb.LIST, list_entries),
        )
        if flag
    ]
    if len(selected) > 1:
        msg = "Options --recover, --delete and --list are mutually exclusive"
        raise RequestError(msg)
    return selected[0] if selected else Verb.DROP


def _configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_results(outcome: BatchOutcome) -> None:
    """Print one line per entry: successes to stdout, failures to stderr."""
    for result in outcome.results:
        if result.success:
            print_success(result.message or result.path)
        else:
            print_error(result.error or f"Unknown error for {result.path}")


def _format_dropped_at(entry: DroppedEntry) -> str:
    # Hand-made names can carry timestamps outside the datetime range
    try:
        return entry.dropped_at.strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, OverflowError, OSError):
        return "-"


def _print_listing(listing: list[ListedEntry], long: bool) -> None:
    """Print the holding store contents."""
    if not long:
        for listed in listing:
            print_plain(listed.display_path)
        return

    if not listing:
        print_info("No dropped entries.")
        return

    table = Table(
        title="Dropped Entries",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Dropped (UTC)", style="muted", no_wrap=True)
    table.add_column("Path", overflow="fold")
    table.add_column("Stored Name", style="muted", overflow="fold")

    for listed in listing:
        if listed.entry is None:
            table.add_row("-", f"[foreign]{escape(listed.stored_name)}[/]", "(foreign)")
            continue
        table.add_row(
            _format_dropped_at(listed.entry),
            f"[dropped]{escape(listed.entry.original_path)}[/]",
            escape(listed.stored_name),
        )

    console.print(table)
    console.print(f"\n[dim]{len(listing)} entr{'y' if len(listing) == 1 else 'ies'}[/dim]")


if __name__ == "__main__":
    app()
