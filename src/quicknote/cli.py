"""Typer-based CLI for Quick Note."""

import json
from pathlib import Path
from typing import List, Optional

import pendulum
import typer
from rich.markup import escape
from rich.table import Table

from .config import QuickNoteConfig
from .console import console, setup_logging
from .errors import StorageError
from .formats import format_moment
from .ledger import LedgerWriter, read_ledger_tail
from .models.vault import Notice
from .paths import VaultPaths
from .service import DailyNoteService
from .storage import VaultStore

app = typer.Typer(
    name="quicknote",
    help="Quick Note - capture timestamped notes into daily notes",
    add_completion=False,
)

_NOTICE_STYLES = {"success": "green", "failure": "red", "info": "yellow"}

VAULT_HELP = "Path to vault directory (default: QUICKNOTE_VAULT env or nearest .quicknote)"


def print_notice(notice: Notice) -> None:
    """Notifier that prints notices to the console."""
    style = _NOTICE_STYLES[notice.level]
    console.print(notice.message, style=style, markup=False, highlight=False)


def _load(vault_path: Optional[str]) -> tuple[QuickNoteConfig, VaultPaths]:
    config = QuickNoteConfig.from_env(cli_vault_path=vault_path)
    return config, VaultPaths.from_config(config)


def _require_vault(config: QuickNoteConfig, paths: VaultPaths) -> None:
    if not paths.system.exists():
        console.print(f"[red]Error: Vault not initialized at {config.vault_path}[/red]")
        console.print("[yellow]Run 'quicknote init' first[/yellow]")
        raise typer.Exit(code=1)


def _service(config: QuickNoteConfig, paths: VaultPaths) -> DailyNoteService:
    return DailyNoteService(
        store=VaultStore(paths.root),
        config=config,
        ledger_writer=LedgerWriter(paths.ledger_file),
        notifier=print_notice,
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Quick Note command line."""
    setup_logging(verbose=verbose)


@app.command()
def init(
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Initialize a vault: .quicknote/ folder, config.toml and ledger.

    This command is idempotent - it will not overwrite existing data.
    """
    config, paths = _load(vault_path)

    directories_created = []
    for directory in paths.get_all_directories():
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            directories_created.append(directory)

    if directories_created:
        console.print(f"[green]+[/green] Created {len(directories_created)} directories")
    else:
        console.print("[dim]All directories already exist[/dim]")

    if not paths.config_file.exists():
        paths.config_file.write_text(config.to_toml_str(), encoding="utf-8")
        console.print(f"[green]+[/green] Created config: {paths.config_file}")
    else:
        console.print(f"[dim]Config already exists: {paths.config_file}[/dim]")

    if not paths.ledger_file.exists():
        paths.ledger_file.touch()
        console.print(f"[green]+[/green] Created ledger: {paths.ledger_file}")

    console.print(f"[bold green]Vault ready:[/bold green] {paths.root}")


@app.command()
def note(
    text: str = typer.Argument("", help="Note text"),
    attach: Optional[List[Path]] = typer.Option(
        None,
        "--attach",
        "-a",
        help="File to attach (repeatable)",
    ),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Append a timestamped note to today's daily note."""
    config, paths = _load(vault_path)
    _require_vault(config, paths)

    if not text.strip() and not attach:
        console.print("[red]Error: Provide note text or at least one --attach file[/red]")
        raise typer.Exit(code=1)

    service = _service(config, paths)
    try:
        result = service.capture(text, attach or [])
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    except StorageError:
        # Already reported through the notifier
        raise typer.Exit(code=1)

    console.print(f"  [dim]{escape(result.document.path)}[/dim]  {result.entry.timestamp}", highlight=False)


@app.command()
def timeline(
    days: int = typer.Option(None, "--days", "-n", min=1, help="Number of days (default: timeline_days)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Show entries of the last N days, newest first."""
    config, paths = _load(vault_path)
    _require_vault(config, paths)
    service = _service(config, paths)

    try:
        window = service.timeline(day_count=days)
    except StorageError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    day_count = days or config.timeline_days
    console.print(f"[bold]Timeline (Last {day_count} Days)[/bold]")
    if not window.days:
        console.print("[dim]No notes in this period[/dim]")
        return

    for day in window.days:
        console.print(f"\n[cyan]{day.date_key}[/cyan]", highlight=False)
        for entry in day.entries:
            when = service.display_time(day.date_key, entry)
            console.print(f"  [magenta]{entry.timestamp}[/magenta] [dim]({when})[/dim]", highlight=False)
            if entry.content:
                for line in entry.content.split("\n"):
                    console.print(f"    {line}", markup=False, highlight=False)
            for attachment in entry.attachments:
                console.print(f"    [yellow]attachment:[/yellow] {escape(attachment)}", highlight=False)


@app.command()
def show(
    date: str = typer.Option(None, "--date", "-d", help="Daily note key (default: today)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Show the entries of one daily note as a table."""
    config, paths = _load(vault_path)
    _require_vault(config, paths)
    service = _service(config, paths)

    if not date:
        date = format_moment(pendulum.now(), config.date_format)

    try:
        entries = service.entries_for(date)
    except StorageError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if not entries:
        console.print(f"[dim]No entries for {date}[/dim]")
        return

    table = Table(title=f"Entries for {date}")
    table.add_column("Time", style="magenta", no_wrap=True)
    table.add_column("Content")
    table.add_column("Attachments", style="yellow")
    for entry in entries:
        table.add_row(entry.timestamp, escape(entry.content), escape("\n".join(entry.attachments)) or "-")
    console.print(table)


@app.command("config")
def show_config(
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Show the effective configuration."""
    config, _ = _load(vault_path)
    table = Table(title="Quick Note Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.model_dump(mode="json").items():
        table.add_row(key, escape(repr(value)))
    table.add_row("insertion_policy", config.insertion_policy.kind)
    console.print(table)


ledger_app = typer.Typer(help="Ledger commands")
app.add_typer(ledger_app, name="ledger")


@ledger_app.command("tail")
def ledger_tail(
    n: int = typer.Option(20, "--n", help="Number of recent events to display"),
    date: str = typer.Option(None, "--date", "-d", help="Only events for this daily note key"),
    event_type: Optional[List[str]] = typer.Option(
        None,
        "--type",
        "-t",
        help="Only events of this type (repeatable), e.g. NOTE_APPEND_FAILED",
    ),
    full: bool = typer.Option(False, "--full", help="Show full payloads with JSON pretty-print"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_HELP),
):
    """Display the last N events from the ledger."""
    config, paths = _load(vault_path)
    _require_vault(config, paths)

    events = read_ledger_tail(paths.ledger_file, n=n, date_key=date, event_types=event_type or None)
    if not events:
        console.print("[dim]No events in ledger[/dim]")
        return

    if full:
        for i, event in enumerate(events, 1):
            console.print(f"[cyan]Event {i}/{len(events)}[/cyan] [magenta]{event.event_type}[/magenta]")
            console.print(f"  [dim]Timestamp:[/dim] {event.ts.strftime('%Y-%m-%d %H:%M:%S')} UTC")
            console.print(f"  [dim]Date key:[/dim]  {event.date_key or '-'}")
            console.print_json(json.dumps(event.payload))
        return

    table = Table(title=f"Last {len(events)} Ledger Event(s)")
    table.add_column("Timestamp (UTC)", style="cyan", no_wrap=True)
    table.add_column("Event Type", style="magenta")
    table.add_column("Date", style="yellow")
    table.add_column("Payload", style="dim")
    for event in events:
        payload_str = str(event.payload)
        if len(payload_str) > 60:
            payload_str = payload_str[:57] + "..."
        table.add_row(event.ts.strftime("%Y-%m-%d %H:%M:%S"), event.event_type, event.date_key or "-", payload_str)
    console.print(table)


@app.command()
def version():
    """Show Quick Note version."""
    from . import __version__

    console.print(f"Quick Note v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
