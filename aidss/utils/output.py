"""Output formatting utilities.

Provides TTY-aware console output for the aidss CLI:
- stdout console: for results and status
- JSON error output for scripting (--json-errors)
"""

import json
import sys
from typing import Any, Optional

from rich.console import Console

from ..core.exceptions import ExitCode, format_json_error

_stdout_is_tty = sys.stdout.isatty()

console = Console(
    force_terminal=_stdout_is_tty,
    no_color=not _stdout_is_tty,
)


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"[red]✗ {message}[/red]")


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓ {message}[/green]")


def print_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]⚠ {message}[/yellow]")


def handle_error(
    exc: Exception,
    json_errors: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> int:
    """Handle an exception with appropriate output format.

    Returns:
        Exit code to use for sys.exit()
    """
    if json_errors:
        print(format_json_error(exc, context))
    else:
        print_error(str(exc))

    if hasattr(exc, "exit_code"):
        return exc.exit_code
    return ExitCode.GENERAL_ERROR


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    print(json.dumps(data, indent=2, default=str))
