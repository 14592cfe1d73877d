"""
Hash command handlers

Implements: hash, md5, sha1, sha256, sha512
"""

from typing import List, Optional

from rich.markup import escape

from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.constants import DEFAULT_HASH_ALGORITHM, HASH_ALGORITHMS
from fmshell.core.errors import MissingArgument, UnsupportedAlgorithm
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter

# Shortcut command -> (algorithm, display label)
HASH_SHORTCUTS = {
    "md5": ("md5", "MD5"),
    "sha1": ("sha1", "SHA-1"),
    "sha256": ("sha256", "SHA-256"),
    "sha512": ("sha512", "SHA-512"),
}


class HashCommands:
    """Handler for file hashing commands"""

    def __init__(self, file_manager: FileManager, formatter: OutputFormatter,
                 default_algorithm: str = DEFAULT_HASH_ALGORITHM):
        self.file_manager = file_manager
        self.formatter = formatter
        self.default_algorithm = default_algorithm

    def cmd_hash(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Hash a file

        Usage:
            hash <file>             - Default algorithm (sha256 unless configured)
            hash <file> sha512      - Explicit algorithm
        """
        if not args:
            raise MissingArgument("file path")

        algorithm = (args[1] if len(args) > 1 else self.default_algorithm).lower()
        if algorithm not in HASH_ALGORITHMS:
            raise UnsupportedAlgorithm(algorithm, HASH_ALGORITHMS)

        self.formatter.format_info("Calculating hash...")
        result = self.file_manager.calculate_hash(args[0], algorithm, token)

        self.formatter.print()
        self.formatter.print(f"[bold]File:[/bold]      {escape(str(result.file_path))}")
        self.formatter.print(f"[bold]Algorithm:[/bold] [cyan]{result.algorithm.upper()}[/cyan]")
        self.formatter.print(f"[bold]Hash:[/bold]      [green]{result.hash}[/green]")
        self.formatter.print()
        return CommandResult(success=True, data=result)

    def shortcut(self, command_name: str):
        """Build the handler for a fixed-algorithm shortcut such as md5"""
        algorithm, label = HASH_SHORTCUTS[command_name]

        def handler(args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
            if not args:
                raise MissingArgument("file path")

            result = self.file_manager.calculate_hash(args[0], algorithm, token)
            self.formatter.print(f"[cyan]{label}:[/cyan] [green]{result.hash}[/green]")
            return CommandResult(success=True, data=result)

        handler.__name__ = f"cmd_{command_name}"
        return handler


def register_hash_commands(registry: CommandRegistry, file_manager: FileManager,
                           formatter: OutputFormatter,
                           default_algorithm: str = DEFAULT_HASH_ALGORITHM) -> HashCommands:
    hashes = HashCommands(file_manager, formatter, default_algorithm)

    registry.register("hash", hashes.cmd_hash, CommandDoc(
        description="Generate hash of a file",
        syntax="hash <path_to_file> [algorithm]",
        example="hash document.pdf sha256",
        details="Calculates the cryptographic hash of the provided file. "
                f"Supported algorithms: {', '.join(HASH_ALGORITHMS)}. "
                f"Default algorithm: {default_algorithm}.",
        category=CommandCategory.HASH,
    ))

    shortcut_details = {
        "md5": "Shortcut command to calculate MD5 hash of a file.",
        "sha1": "Shortcut command to calculate SHA-1 hash of a file. "
                "Note: SHA-1 is considered cryptographically weak and should not be used "
                "for security purposes.",
        "sha256": "Shortcut command to calculate SHA-256 hash of a file.",
        "sha512": "Shortcut command to calculate SHA-512 hash of a file. "
                  "SHA-512 produces a 128-character hexadecimal hash.",
    }

    for name, (_, label) in HASH_SHORTCUTS.items():
        registry.register(name, hashes.shortcut(name), CommandDoc(
            description=f"Generate {label} hash of a file",
            syntax=f"{name} <path_to_file>",
            example=f"{name} file.txt",
            details=shortcut_details[name],
            category=CommandCategory.HASH,
        ))

    return hashes
