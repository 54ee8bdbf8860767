import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm, Prompt
from rich.table import Table

_console = Console()
_err_console = Console(stderr=True)


def _target(stderr: bool) -> Console:
    return _err_console if stderr else _console


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def is_interactive() -> bool:
    """Check if we are in an interactive TTY session."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def print_step(title: str) -> None:
    """Print a step header."""
    _console.rule(f"[bold blue]{title}[/]")


def print_success(message: str, stderr: bool = False) -> None:
    _target(stderr).print(f"[bold green]SUCCESS:[/] {message}")


def print_warning(message: str, stderr: bool = False) -> None:
    _target(stderr).print(f"[bold yellow]WARNING:[/] {message}")


def print_error(message: str, exit_code: Optional[int] = None, stderr: bool = False) -> None:
    """Print an error message and optionally exit."""
    _target(stderr).print(f"[bold red]ERROR:[/] {message}")

    if exit_code is not None:
        sys.exit(exit_code)


def print_line(message: str = "", style: Optional[str] = None, stderr: bool = False) -> None:
    _target(stderr).print(message, style=style, highlight=False)


def print_table(title: str, columns: List[str], rows: List[List[str]]) -> None:
    """Print a table with optional title."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    _console.print(table)


def ask_input(prompt_text: str, default: Optional[str] = None) -> str:
    """
    Prompt for user input (interactive only).
    If not interactive, returns default if present, else raises generic error.
    """
    if not is_interactive():
        if default is not None:
            return default
        raise RuntimeError("Interactive input required but not in TTY mode.")

    if default is not None:
        return str(Prompt.ask(prompt_text, default=default))
    return str(Prompt.ask(prompt_text))


def ask_confirm(prompt_text: str, default: bool = False) -> bool:
    """Ask for yes/no confirmation. Non-interactive sessions get the default."""
    if not is_interactive():
        return default
    return bool(Confirm.ask(prompt_text, default=default))
