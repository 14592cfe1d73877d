"""
OS information command handlers

Implements: os, sysinfo
"""

import logging
from typing import List, Optional

from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.errors import InvalidOSInfoFlag, MissingArgument, ShellError
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter
from fmshell.core.shell_parser import parse_flags

logger = logging.getLogger(__name__)

# sysinfo display order
SYSINFO_FLAGS = ("--platform", "--architecture", "--cpus", "--memory", "--homedir", "--username", "--EOL")


class OSInfoCommands:
    """Handler for host system information commands"""

    def __init__(self, file_manager: FileManager, formatter: OutputFormatter):
        self.file_manager = file_manager
        self.formatter = formatter

    def cmd_os(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Show one or more pieces of system information

        Usage:
            os --cpus               - CPU count, model and speed
            os --memory --platform  - Several flags are printed in order
        """
        if not args:
            raise MissingArgument("OS info parameter")

        flags, remaining = parse_flags(args)
        if remaining:
            raise InvalidOSInfoFlag(remaining[0])

        lines = [self.file_manager.get_os_info(f"--{name}") for name in flags]
        for info in lines:
            self.formatter.print_text(info)
        return CommandResult(success=True, data=lines)

    def cmd_sysinfo(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """Print every available piece of system information"""
        collected = {}

        self.formatter.print()
        self.formatter.print("[bold cyan]=== System Information ===[/bold cyan]")
        self.formatter.print()

        for flag in SYSINFO_FLAGS:
            try:
                info = self.file_manager.get_os_info(flag)
            except (ShellError, OSError) as e:
                logger.debug("Skipping %s: %s", flag, e)
                continue
            collected[flag] = info
            self.formatter.print_text(info)
            self.formatter.print()

        self.formatter.print("[bold cyan]==========================[/bold cyan]")
        self.formatter.print()
        return CommandResult(success=True, data=collected)


def register_os_info_commands(registry: CommandRegistry, file_manager: FileManager,
                              formatter: OutputFormatter) -> OSInfoCommands:
    os_info = OSInfoCommands(file_manager, formatter)

    registry.register("os", os_info.cmd_os, CommandDoc(
        description="Show system-related information",
        syntax="os <option>",
        example="os --cpus",
        details="Displays system info based on the option provided:\n"
                "  --EOL: Show the End-Of-Line marker used by your OS\n"
                "  --cpus: List CPU model, speed, and core count\n"
                "  --homedir: Display the current user's home directory\n"
                "  --username: Show your system username\n"
                "  --architecture: Print the CPU architecture (e.g., x86_64)\n"
                "  --platform: Show the operating system platform\n"
                "  --memory: Display total and free memory",
        category=CommandCategory.OS_INFO,
    ))

    registry.register("sysinfo", os_info.cmd_sysinfo, CommandDoc(
        description="Display all system information",
        syntax="sysinfo",
        example="sysinfo",
        details="Displays comprehensive system information including CPU, "
                "memory, platform, architecture, and user details.",
        category=CommandCategory.OS_INFO,
    ))
    registry.register_alias("systeminfo", "sysinfo")

    return os_info
