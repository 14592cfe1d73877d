"""
Utility command handlers

Implements: man (help, ?), clear (cls), version (ver, -v, --version)
"""

from typing import List, Optional

from rich.markup import escape

from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.constants import APP_NAME, APP_VERSION
from fmshell.core.formatters import OutputFormatter


class UtilityCommands:
    """Handler for help, screen and version commands"""

    def __init__(self, registry: CommandRegistry, formatter: OutputFormatter):
        self.registry = registry
        self.formatter = formatter

    def cmd_man(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Show help

        Usage:
            man             - List all commands grouped by category
            man <command>   - Manual for one command (aliases accepted)
        """
        command_name = args[0] if args else None

        if command_name and command_name != "man":
            manual = self.registry.generate_command_help(command_name)
            if manual is None:
                self.formatter.format_warning(f"No manual entry for '{command_name}'")
                self.formatter.print("Type [bold]'man'[/bold] to see all available commands.")
                return CommandResult(success=False)
            return CommandResult(success=True, output=manual, data=self.registry.get(command_name))

        return CommandResult(success=True, output=self.registry.generate_help_text())

    def cmd_clear(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        self.formatter.clear_screen()
        return CommandResult(success=True)

    def cmd_version(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        self.formatter.print()
        self.formatter.print(f"[bold]{escape(APP_NAME)}[/bold] [cyan]v{APP_VERSION}[/cyan]")
        self.formatter.print("[dim]Built with Python, rich and prompt_toolkit[/dim]")
        self.formatter.print()
        return CommandResult(success=True, data=APP_VERSION)


def register_utility_commands(registry: CommandRegistry, formatter: OutputFormatter) -> UtilityCommands:
    utility = UtilityCommands(registry, formatter)

    registry.register("man", utility.cmd_man, CommandDoc(
        description="Display the help manual",
        syntax="man [command]",
        example="man cp",
        details="Without arguments, lists all available commands. "
                "Provide a command name to get detailed help on it.",
        category=CommandCategory.UTILITY,
    ))
    registry.register_alias("help", "man")
    registry.register_alias("?", "man")

    registry.register("clear", utility.cmd_clear, CommandDoc(
        description="Clear the terminal screen",
        syntax="clear",
        example="clear",
        details="Clears all output from the terminal and resets the prompt position. "
                "You can also use Ctrl + L as a shortcut.",
        category=CommandCategory.UTILITY,
    ))
    registry.register_alias("cls", "clear")

    registry.register("version", utility.cmd_version, CommandDoc(
        description="Display application version",
        syntax="version",
        example="version",
        details=f"Shows the current version of {APP_NAME}.",
        category=CommandCategory.UTILITY,
    ))
    for alias in ("ver", "-v", "--version"):
        registry.register_alias(alias, "version")

    return utility
