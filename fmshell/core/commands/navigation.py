"""
Navigation command handlers

Implements: up, cd, ls (dir), pwd
"""

from typing import List, Optional

from fmshell.core import messages
from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.errors import MissingArgument
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter


class NavigationCommands:
    """Handler for directory navigation commands"""

    def __init__(self, file_manager: FileManager, formatter: OutputFormatter):
        """
        Initialize navigation command handlers

        Args:
            file_manager: File engine bound to the session
            formatter: Output sink
        """
        self.file_manager = file_manager
        self.formatter = formatter

    def cmd_up(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Move to the parent directory

        Usage:
            up              - Go up one level (never above home)
        """
        moved = self.file_manager.navigate_up()
        if not moved:
            self.formatter.format_warning(messages.CANNOT_NAVIGATE_ABOVE_HOME)
        return CommandResult(success=moved, data=self.file_manager.current_dir)

    def cmd_cd(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Change directory

        Usage:
            cd <path>       - Change to path (absolute or relative)
            cd ..           - Go up one level
            cd ~            - Go to the home directory
        """
        if not args:
            raise MissingArgument("path")

        new_dir = self.file_manager.change_directory(args[0])
        return CommandResult(success=True, data=new_dir)

    def cmd_ls(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        List directory contents

        Usage:
            ls              - Table of the current directory, directories first
        """
        entries = self.file_manager.list_directory()

        if not entries:
            self.formatter.print(f"[dim]{messages.EMPTY_DIRECTORY}[/dim]")
            return CommandResult(success=True, data=entries)

        rows = [(entry.name, entry.type, entry.size, entry.modified) for entry in entries]
        self.formatter.print_table(["Name", "Type", "Size", "Modified"], rows)
        self.formatter.print(f"[dim]Total: {len(entries)} item(s)[/dim]")
        return CommandResult(success=True, data=entries)

    def cmd_pwd(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Print working directory

        Usage:
            pwd             - Show the absolute current path
        """
        current_path = self.file_manager.pwd()
        return CommandResult(success=True, output=f"{current_path}\n", data=current_path)


def register_navigation_commands(registry: CommandRegistry, file_manager: FileManager,
                                 formatter: OutputFormatter) -> NavigationCommands:
    """
    Register navigation commands and their aliases

    Returns:
        The handler instance
    """
    nav = NavigationCommands(file_manager, formatter)

    registry.register("up", nav.cmd_up, CommandDoc(
        description="Move up one directory level",
        syntax="up",
        example="up",
        details="Navigates to the parent of the current working directory. "
                "You cannot move above the home directory.",
        category=CommandCategory.NAVIGATION,
    ))

    registry.register("cd", nav.cmd_cd, CommandDoc(
        description="Change the current directory",
        syntax="cd <path_to_directory>",
        example="cd Documents",
        details="Changes your working directory to the given path. "
                "The path may be absolute or relative.",
        category=CommandCategory.NAVIGATION,
    ))

    registry.register("ls", nav.cmd_ls, CommandDoc(
        description="List contents of the current directory",
        syntax="ls",
        example="ls",
        details="Displays a table with name, type, size, and last modified date. "
                "Lists directories first, followed by files, sorted alphabetically.",
        category=CommandCategory.NAVIGATION,
    ))
    registry.register_alias("dir", "ls")

    registry.register("pwd", nav.cmd_pwd, CommandDoc(
        description="Print current working directory",
        syntax="pwd",
        example="pwd",
        details="Displays the absolute path of the current working directory.",
        category=CommandCategory.NAVIGATION,
    ))

    return nav
