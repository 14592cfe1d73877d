"""
Search command handlers

Implements: find, grep, where

All three walk directory trees and honor the cancellation token, so a
Ctrl+C during a large search stops it at the next directory entry or line.
"""

import re
from typing import List, Optional

from rich.markup import escape
from rich.text import Text

from fmshell.core import messages
from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.constants import GREP_LINE_WIDTH
from fmshell.core.errors import MissingArgument
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter


def truncate_line(content: str, width: int = GREP_LINE_WIDTH) -> str:
    """Shorten content longer than width to width - 3 chars plus '...'"""
    if len(content) > width:
        return content[:width - 3] + "..."
    return content


class SearchCommands:
    """Handler for name and content search commands"""

    def __init__(self, file_manager: FileManager, formatter: OutputFormatter):
        self.file_manager = file_manager
        self.formatter = formatter

    def cmd_find(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Find files and directories by name

        Usage:
            find <pattern> [path]   - Wildcards: * any characters, ? one character
        """
        if not args:
            raise MissingArgument("pattern")

        pattern = args[0]
        search_path = args[1] if len(args) > 1 else None

        self.formatter.format_info(messages.searching(pattern))
        results = self.file_manager.find_files(pattern, search_path, token)

        if not results:
            self.formatter.format_warning(messages.NO_MATCHES)
            return CommandResult(success=True, data=results)

        self.formatter.print(f"\n[green]Found[/green] [bold]{len(results)}[/bold] [green]match(es):[/green]\n")

        directories = [r for r in results if r.type == "directory"]
        files = [r for r in results if r.type == "file"]

        if directories:
            self.formatter.print("[bold]Directories:[/bold]")
            for directory in directories:
                self.formatter.print(f"  [blue]\\[DIR][/blue]  {escape(str(directory.path))}")
            self.formatter.print()

        if files:
            self.formatter.print("[bold]Files:[/bold]")
            for file in files:
                self.formatter.print(f"  [green]\\[FILE][/green] {escape(str(file.path))}")

        return CommandResult(success=True, data=results)

    def cmd_grep(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Search file contents with a regular expression

        Usage:
            grep <pattern> <path>   - Case-insensitive; directories are searched recursively
        """
        if not args:
            raise MissingArgument("search pattern")
        if len(args) < 2:
            raise MissingArgument("path")

        pattern, search_path = args[0], args[1]

        self.formatter.format_info(messages.searching_in(pattern, search_path))
        results = self.file_manager.grep(pattern, search_path, token)

        if not results:
            self.formatter.format_warning(messages.NO_MATCHES)
            return CommandResult(success=True, data=results)

        total_matches = sum(len(result.matches) for result in results)
        self.formatter.print(
            f"\n[green]Found[/green] [bold]{total_matches}[/bold] [green]match(es) in[/green] "
            f"[bold]{len(results)}[/bold] [green]file(s):[/green]\n"
        )

        highlight = re.compile(pattern, re.IGNORECASE)
        for result in results:
            self.formatter.print(f"\n[cyan]{escape(str(result.path))}[/cyan]:")
            for match in result.matches:
                line = Text("  ")
                line.append("Line", style="dim")
                line.append(" ")
                line.append(str(match.line), style="yellow")
                line.append(": ")
                content = Text(truncate_line(match.content))
                content.highlight_regex(highlight, style="bold magenta")
                line.append_text(content)
                self.formatter.print(line)

        return CommandResult(success=True, data=results)

    def cmd_where(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        List files under the current directory containing some text

        Usage:
            where <text>    - Shorthand for grep <text> .
        """
        if not args:
            raise MissingArgument("search text")

        text = args[0]
        self.formatter.format_info(messages.searching(text))
        results = self.file_manager.grep(text, ".", token)

        if not results:
            self.formatter.format_warning(f'{messages.NO_MATCHES} (searched for "{text}")')
            return CommandResult(success=True, data=results)

        self.formatter.print(f'\n[green]Files containing[/green] [bold]"{escape(text)}"[/bold]:\n')
        for result in results:
            count = len(result.matches)
            label = "match" if count == 1 else "matches"
            self.formatter.print(f"  {escape(str(result.path))} [dim]({count} {label})[/dim]")

        return CommandResult(success=True, data=results)


def register_search_commands(registry: CommandRegistry, file_manager: FileManager,
                             formatter: OutputFormatter) -> SearchCommands:
    search = SearchCommands(file_manager, formatter)

    registry.register("find", search.cmd_find, CommandDoc(
        description="Find files by name pattern",
        syntax="find <pattern> [path]",
        example="find *.txt",
        details="Searches for files and directories matching the given pattern. "
                "Supports wildcards: * (any characters), ? (single character). "
                "If no path is specified, searches from the current directory.",
        category=CommandCategory.SEARCH,
    ))
    registry.register_alias("search", "find")

    registry.register("grep", search.cmd_grep, CommandDoc(
        description="Search for text within files",
        syntax="grep <pattern> <path>",
        example="grep TODO ./src",
        details="Searches for text matching the given pattern within files. "
                "If path is a directory, searches recursively. "
                "The pattern is treated as a regular expression.",
        category=CommandCategory.SEARCH,
    ))

    registry.register("where", search.cmd_where, CommandDoc(
        description="Find files containing specific text",
        syntax="where <text>",
        example="where function",
        details="Searches the current directory recursively for files "
                "containing the specified text. Simpler alternative to grep.",
        category=CommandCategory.SEARCH,
    ))

    return search
