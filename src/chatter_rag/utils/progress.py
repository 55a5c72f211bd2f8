"""Console logging and progress reporting shared by indexing and search."""

from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .symbols import SYMBOLS

# Everything goes to stderr so the MCP stdio transport stays clean
console = Console(stderr=True, legacy_windows=False)
error_console = Console(stderr=True, legacy_windows=False)


def create_progress_bar(description: str = "Processing", total: Optional[int] = None) -> tuple[Progress, TaskID]:
    """Create a progress bar for indexing operations.

    Args:
        description: Description text for the progress bar
        total: Total number of items (None for indeterminate)

    Returns:
        Tuple of (Progress instance, TaskID) for updating
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    task_id = progress.add_task(description, total=total)
    return progress, task_id


def update_progress(
    progress: Progress,
    task_id: TaskID,
    advance: int = 1,
    description: Optional[str] = None,
) -> None:
    """Advance a progress bar, optionally replacing its description."""
    if description:
        progress.update(task_id, description=description)
    progress.advance(task_id, advance)


def log_debug(message: str, **kwargs: Any) -> None:
    """Log a debug message (only when DebugLogger is enabled)."""
    from .debug import DebugLogger

    if DebugLogger.is_enabled():
        console.print(f"[dim][DEBUG] {escape(message)}[/dim]", **kwargs)


def log_info(message: str, **kwargs: Any) -> None:
    """Log an info message.

    Args:
        message: Message to log
        **kwargs: Additional arguments passed to rich console
    """
    console.print(f"[blue]{SYMBOLS['info']}[/blue] {escape(message)}", **kwargs)


def log_warning(message: str, **kwargs: Any) -> None:
    """Log a warning message."""
    console.print(f"[yellow]{SYMBOLS['warning']}[/yellow] {escape(message)}", **kwargs)


def log_error(message: str, **kwargs: Any) -> None:
    """Log an error message."""
    error_console.print(f"[red]{SYMBOLS['error']}[/red] {escape(message)}", **kwargs)


def log_success(message: str, **kwargs: Any) -> None:
    """Log a success message."""
    console.print(f"[green]{SYMBOLS['success']}[/green] {escape(message)}", **kwargs)
