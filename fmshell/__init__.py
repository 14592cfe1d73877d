"""
File Manager Shell - An interactive shell for file system operations
"""

__version__ = "1.0.0"
__author__ = "fmshell Contributors"

from .core.cancellation import CancellationToken
from .core.command_registry import (
    Command,
    CommandCategory,
    CommandDoc,
    CommandRegistry,
    CommandResult,
)
from .core.file_manager import FileManager
from .core.session import ShellState
from .core.shell_parser import parse_command_with_quotes
