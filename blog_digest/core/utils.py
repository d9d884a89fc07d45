"""Console output and logging helpers shared by the CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
    from rich.status import Status

console = Console()
err_console = Console(stderr=True)


def setup_logging(log_level: str, log_file: str | None, *, quiet: bool) -> None:
    """Configure the root logger.

    Logs go to stderr through Rich unless ``quiet`` is set, and additionally to
    ``log_file`` when given.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)
    handlers: list[logging.Handler] = []
    if not quiet:
        handler = RichHandler(
            console=err_console,
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(handler)
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers or [logging.NullHandler()], force=True)

    # Suppress noisy logs from libraries
    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


def print_with_style(message: str, style: str = "bold green") -> None:
    """Print a message with a Rich style."""
    console.print(Text(message, style=style))


def print_error_message(message: str, suggestion: str | None = None) -> None:
    """Print an error panel to stderr with an optional suggestion."""
    body = Text(message, style="bold red")
    if suggestion:
        body.append(f"\n\n{suggestion}")
    err_console.print(Panel(body, title="Error", border_style="red"))


def print_output_panel(text: str, title: str = "Output", subtitle: str | None = None) -> None:
    """Print output content in a panel."""
    console.print(
        Panel(Text(text), title=f"[bold]{title}[/bold]", subtitle=subtitle, border_style="green"),
    )


def create_status(message: str, style: str = "bold yellow") -> Status:
    """Create a spinner status context."""
    return console.status(f"[{style}]{message}[/{style}]")


def print_command_line_args(args: dict[str, Any]) -> None:
    """Print the command line arguments of a command."""
    console.print("[bold]Command line arguments:[/bold]")
    for key, value in sorted(args.items()):
        shown = "***" if value and "api_key" in key else value
        console.print(f"  {key}: [cyan]{shown}[/cyan]")
