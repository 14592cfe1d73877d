"""
Output formatters for shell commands.

Provides an abstract interface for rendering command output so handlers
never print directly.

Design:
- Formatters are pure output - they only render, never execute logic
- Message text passed in is plain; formatters escape it before styling
- confirm() is the only method that reads input
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.table import Table

from fmshell.core import messages


class OutputFormatter(ABC):
    """Abstract base class for output formatters"""

    @abstractmethod
    def print(self, text: RenderableType = ""):
        """Output rich markup"""
        pass

    @abstractmethod
    def print_text(self, text: str):
        """Output text literally, without markup interpretation"""
        pass

    @abstractmethod
    def format_error(self, message: str):
        """Format and output error message"""
        pass

    @abstractmethod
    def format_success(self, message: str):
        """Format and output success message"""
        pass

    @abstractmethod
    def format_warning(self, message: str):
        """Format and output warning message"""
        pass

    @abstractmethod
    def format_info(self, message: str):
        """Format and output info message"""
        pass

    @abstractmethod
    def print_table(self, columns: Sequence[str], rows: Sequence[Sequence[str]], title: Optional[str] = None):
        """Format and output a table"""
        pass

    @abstractmethod
    def clear_screen(self):
        pass

    @abstractmethod
    def show_current_directory(self, path):
        pass

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Prompt user for confirmation, return True if confirmed"""
        pass


def _prompt_toolkit_confirm(message: str) -> bool:
    from prompt_toolkit.shortcuts import confirm
    return confirm(message)


class TUIFormatter(OutputFormatter):
    """
    TUI formatter using Rich library for terminal output.

    Designed for the interactive shell.
    """

    def __init__(self, console: Optional[Console] = None,
                 confirm_func: Optional[Callable[[str], bool]] = None):
        """
        Initialize TUI formatter.

        Args:
            console: Rich Console instance (creates new one if None)
            confirm_func: Yes/no prompt; defaults to prompt_toolkit's confirm
        """
        self.console = console or Console()
        self.confirm_func = confirm_func or _prompt_toolkit_confirm

    def print(self, text: RenderableType = ""):
        self.console.print(text)

    def print_text(self, text: str):
        self.console.print(text, markup=False, highlight=False)

    def format_error(self, message: str):
        """Format error message"""
        self.console.print(f"[red]Error: {escape(message)}[/red]")

    def format_success(self, message: str):
        """Format success message"""
        self.console.print(f"[green]{escape(message)}[/green]")

    def format_warning(self, message: str):
        """Format warning message"""
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def format_info(self, message: str):
        """Format info message"""
        self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def print_table(self, columns: Sequence[str], rows: Sequence[Sequence[str]], title: Optional[str] = None):
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*[escape(str(value)) for value in row])
        self.console.print(table)

    def clear_screen(self):
        self.console.clear()

    def show_current_directory(self, path):
        self.console.print(f"[dim]{escape(messages.current_directory(path))}[/dim]")

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question; interrupting the prompt counts as no"""
        try:
            return bool(self.confirm_func(message))
        except (EOFError, KeyboardInterrupt):
            return False
