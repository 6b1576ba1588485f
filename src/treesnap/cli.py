"""CLI for treesnap."""

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .constants import DEFAULT_UI_PORT, IGNORE_FILE, TREESNAP_DIR
from .context import ProjectContext
from .core import FingerprintStrategy
from .engine import CommitEngine, init_project
from .errors import (
    ConfigError,
    LockTimeout,
    NotInitialized,
    StoreUnavailable,
    WriteFailure,
)
from .registry import ProjectRegistry
from .status_display import (
    display_docs,
    display_log,
    display_projects,
    display_status,
    display_welcome,
)


app = typer.Typer(help="""\
Fast, simple personal version control. Record snapshots of a directory
tree and see what changed since the last one.""")

console = Console()


def _configure_logging() -> None:
    """Route library logging through rich; DEBUG=1 enables debug output."""
    level = logging.DEBUG if os.environ.get("DEBUG") else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    project: Optional[Path] = typer.Option(
        None, "--project", "-C", help="Project root (default: search upward from the current directory)"
    ),
):
    """Fast, simple personal version control."""
    _configure_logging()
    ctx.obj = {"project": project}
    if ctx.invoked_subcommand is None:
        display_welcome(console)


def _print_not_initialized(e: NotInitialized) -> None:
    console.print(f"[red]✗[/red] {e}")
    console.print()
    console.print("To initialize a new project, run:")
    console.print("  [cyan]treesnap init[/cyan]")


def require_engine(ctx: typer.Context) -> CommitEngine:
    """Resolve the project and return its engine.

    Raises:
        typer.Exit: If not inside an initialized project
    """
    project = (ctx.obj or {}).get("project")
    try:
        if project is not None:
            context = ProjectContext(project).require_initialized()
        else:
            context = ProjectContext.discover()
    except NotInitialized as e:
        _print_not_initialized(e)
        raise typer.Exit(1)
    return CommitEngine(context)


def _fail(e: Exception) -> None:
    """Report an operation failure and exit."""
    console.print(f"[red]✗[/red] {e}")
    if os.environ.get("DEBUG"):
        console.print(f"[dim]{type(e).__name__}[/dim]")
    raise typer.Exit(1)


@app.command()
def init(
    path: Optional[str] = typer.Argument(None, help="Directory to initialize (default: current directory)"),
    strategy: FingerprintStrategy = typer.Option(
        FingerprintStrategy.METADATA, "--strategy", "-s",
        help="How to detect changes: size+mtime (metadata) or content hash (hash)",
    ),
):
    """Initialize a project.

    Examples:
        # Initialize the current directory
        treesnap init

        # Create and initialize a new directory, detecting changes by content
        treesnap init my-project --strategy hash
    """
    target_dir = Path(path).resolve() if path else Path.cwd()
    if not target_dir.exists():
        target_dir.mkdir(parents=True)
        console.print(f"[green]✓[/green] Created directory: {target_dir}")

    try:
        result = init_project(target_dir, strategy=strategy)
    except (ConfigError, StoreUnavailable, OSError) as e:
        _fail(e)

    storage_dir = result.root / TREESNAP_DIR
    if not result.created:
        console.print(f"[yellow]⚠[/yellow] {TREESNAP_DIR} already exists at: {storage_dir}")
        return

    try:
        ProjectRegistry().add(result.config.project_name, result.root, result.config.created_at)
    except OSError as e:
        console.print(f"[yellow]⚠[/yellow] Could not update project registry: {e}")

    console.print(f"[green]✓[/green] Initialized project `{result.config.project_name}` at {storage_dir}")
    console.print(f"[dim]Change detection: {result.config.fingerprint_strategy.value}[/dim]")
    console.print(f"[dim]Edit {IGNORE_FILE} to exclude files from snapshots[/dim]")


@app.command()
def status(
    ctx: typer.Context,
    deleted: bool = typer.Option(False, "--deleted", help="Also list files removed since the last commit"),
):
    """Show files changed since the last commit."""
    engine = require_engine(ctx)
    try:
        report = engine.status()
    except NotInitialized as e:
        _print_not_initialized(e)
        raise typer.Exit(1)
    except (StoreUnavailable, ConfigError) as e:
        _fail(e)
    display_status(report, console, show_deleted=deleted)


@app.command()
def commit(
    ctx: typer.Context,
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Commit message"),
):
    """Record a snapshot of the project."""
    if not message or not message.strip():
        console.print("[red]✗[/red] A commit message is required")
        console.print('Example: [cyan]treesnap commit -m "Initial commit"[/cyan]')
        raise typer.Exit(1)

    engine = require_engine(ctx)
    try:
        result = engine.commit(message)
    except NotInitialized as e:
        _print_not_initialized(e)
        raise typer.Exit(1)
    except (StoreUnavailable, WriteFailure, LockTimeout, ConfigError) as e:
        _fail(e)
    console.print(f"[green]✓[/green] {result.summary()}")


@app.command()
def log(ctx: typer.Context):
    """Show commit history, oldest first."""
    engine = require_engine(ctx)
    try:
        commits = engine.log()
    except NotInitialized as e:
        _print_not_initialized(e)
        raise typer.Exit(1)
    except StoreUnavailable as e:
        _fail(e)
    display_log(commits, console)


@app.command()
def projects():
    """List every project registered on this machine."""
    display_projects(ProjectRegistry().load(), console)


@app.command()
def welcome():
    """Show the quick-start."""
    display_welcome(console)


@app.command()
def docs():
    """Show a reference of every command."""
    display_docs(console)


@app.command()
def ui(
    ctx: typer.Context,
    port: int = typer.Option(DEFAULT_UI_PORT, "--port", "-p", help="Port to listen on"),
    static: Optional[Path] = typer.Option(Path("ui"), "--static", help="Directory of dashboard assets"),
):
    """Launch the read-only dashboard."""
    from .server import serve

    engine = require_engine(ctx)
    console.print(f"🚀 Starting treesnap dashboard at http://localhost:{port}")
    serve(engine.root, port=port, static_dir=static)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
