"""Rich console utilities for styled terminal output.

All operator-facing output goes through this module: status lines,
skip reports for documents or fields that could not be processed,
progress while loading manifests and the final sealing summary.
"""

from collections.abc import Generator, Iterable
from contextlib import contextmanager

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

console = Console(theme=_THEME)


def info(message: str) -> None:
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{escape(text)}[/highlight]"


def secret_ref(namespace: str, name: str, field: str | None = None) -> str:
    """Format a secret (and optionally one of its fields) for messages.

    Args:
        namespace: The secret namespace.
        name: The secret name.
        field: Optional data key.

    Returns:
        ``namespace/name`` or ``namespace/name[field]``, highlighted.

    """
    ref = f"{namespace or '<no namespace>'}/{name or '<no name>'}"
    if field is not None:
        ref = f"{ref}[{field}]"
    return highlight(ref)


def skipped(reason: str, target: str) -> None:
    """Report a document or field that was skipped and can be retried.

    Args:
        reason: Why it was skipped.
        target: What was skipped, usually from ``secret_ref``.

    """
    warning(f"Skipped {target}: {escape(reason)}")


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while performing an operation.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def create_task_progress() -> Progress:
    """Create a progress bar configured for batch operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("[muted]{task.completed}/{task.total}[/muted]"),
        console=console,
        transient=True,
    )


def summary_panel(title: str, items: dict[str, str], *, failed: bool = False) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.
        failed: Render the panel border in the warning color.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{label}:", value)

    border = "yellow" if failed else "green"
    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style=border))


def sealed_secrets_table(rows: Iterable[tuple[str, str, str, str]]) -> None:
    """Print written SealedSecrets as a table.

    Args:
        rows: ``(namespace, name, sealed fields, output path)`` tuples.

    """
    table = Table(title="Sealed secrets", title_style="bold", header_style="bold")
    table.add_column("Namespace", style="cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Sealed fields")
    table.add_column("Output", style="muted")

    for row in rows:
        table.add_row(*row)

    console.print(table)


def newline() -> None:
    """Print an empty line."""
    console.print()
