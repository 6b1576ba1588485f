"""Display logic for status, log, projects, welcome and docs commands."""

from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import DEFAULT_UI_PORT, IGNORE_FILE
from .core import Commit, StatusReport
from .registry import RegistryEntry
from .utils import format_timestamp, humanize_age


# (usage, description) pairs for `treesnap docs`
COMMAND_REFERENCE = [
    ("init [PATH] [--strategy metadata|hash]", "Initialize a project"),
    ("status [--deleted]", "Show files changed since the last commit"),
    ("commit -m MESSAGE", "Record a snapshot of the project"),
    ("log", "Show commit history, oldest first"),
    ("projects", "List every project registered on this machine"),
    (f"ui [--port {DEFAULT_UI_PORT}] [--static DIR]", "Launch the read-only dashboard"),
    ("welcome", "Show the quick-start"),
    ("docs", "Show this command reference"),
]


def display_status(report: StatusReport, console: Console, show_deleted: bool = False) -> None:
    """Display the working tree classification.

    Args:
        report: Result of CommitEngine.status()
        console: Rich console for output
        show_deleted: Also list files removed since the latest commit
    """
    console.print(f"[bold]Project:[/bold] {escape(str(report.root))}")
    noun = "commit" if report.commit_count == 1 else "commits"
    console.print(f"[green]✓[/green] {report.commit_count} {noun} recorded")

    diff = report.diff
    if not diff.has_changes:
        console.print("No changes since last commit.")
    else:
        if diff.untracked:
            console.print("[bold]Untracked files:[/bold]")
            for path in diff.untracked:
                console.print(f"  [green]+[/green] {escape(path)}")
        if diff.modified:
            console.print("[bold]Modified files:[/bold]")
            for path in diff.modified:
                console.print(f"  [yellow]~[/yellow] {escape(path)}")

    if show_deleted and diff.deleted:
        console.print("[bold]Deleted files:[/bold]")
        for path in diff.deleted:
            console.print(f"  [red]-[/red] {escape(path)}")


def display_log(commits: List[Commit], console: Console) -> None:
    """Display commit history, oldest first."""
    if not commits:
        console.print("[dim]No commits yet[/dim]")
        return

    table = Table(title="Commit history")
    table.add_column("Id", justify="right", style="cyan")
    table.add_column("Date")
    table.add_column("Age", style="dim")
    table.add_column("Author")
    table.add_column("Message")

    for commit in commits:
        table.add_row(
            str(commit.id),
            format_timestamp(commit.timestamp),
            humanize_age(commit.timestamp),
            escape(commit.author),
            escape(commit.message),
        )
    console.print(table)


def display_projects(entries: List[RegistryEntry], console: Console) -> None:
    """Display the cross-project registry."""
    if not entries:
        console.print("[dim]No projects registered[/dim]")
        return

    table = Table(title=f"Projects ({len(entries)})")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    table.add_column("Created")
    for entry in entries:
        table.add_row(escape(entry.name), escape(entry.path), format_timestamp(entry.created_at))
    console.print(table)


def display_welcome(console: Console) -> None:
    """Display the quick-start shown by `treesnap` and `treesnap welcome`."""
    console.print()
    console.print("[bold]Welcome to treesnap![/bold]")
    console.print("Fast, simple personal version control")
    console.print()
    console.print("[bold]Quickstart:[/bold]")
    console.print("  1) cd into a project and run: [cyan]treesnap init[/cyan]")
    console.print("  2) check changes: [cyan]treesnap status[/cyan]")
    console.print('  3) commit: [cyan]treesnap commit -m "Your message"[/cyan]')
    console.print()
    console.print("[bold]UI Dashboard:[/bold]")
    console.print(f"  [cyan]treesnap ui[/cyan]  # then open http://localhost:{DEFAULT_UI_PORT}")
    console.print()
    console.print("Next steps: [cyan]treesnap docs[/cyan] or [cyan]treesnap --help[/cyan]")


def display_docs(console: Console) -> None:
    """Display a reference of every command."""
    table = Table(title="treesnap commands")
    table.add_column("Command", style="cyan")
    table.add_column("Description")
    for command, description in COMMAND_REFERENCE:
        table.add_row(escape(command), description)
    console.print(table)
    console.print(f"[dim]Ignore patterns live in {IGNORE_FILE}; one glob per line, `dir/` for directories.[/dim]")
    console.print("[dim]Run `treesnap COMMAND --help` for the options of a command.[/dim]")
