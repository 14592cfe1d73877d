"""
Compression command handlers

Implements: compress, decompress, brotli, gzip, deflate, unbrotli, gunzip, inflate

Output files are streamed chunk by chunk; an interrupted or failed run
removes the partially written destination.
"""

from typing import List, Optional, Tuple

from rich.markup import escape

from fmshell.core import messages
from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.constants import COMPRESSION, COMPRESSION_ALGORITHMS, DEFAULT_COMPRESSION_ALGORITHM
from fmshell.core.errors import FileOperationError, MissingArgument, UnsupportedAlgorithm
from fmshell.core.file_manager import CompressionResult, FileManager, format_size
from fmshell.core.formatters import OutputFormatter

DISPLAY_NAMES = {
    "brotli": "Brotli",
    "gzip": "Gzip",
    "deflate": "Deflate",
}

# Decompression shortcut -> algorithm
DECOMPRESS_SHORTCUTS = {
    "unbrotli": "brotli",
    "gunzip": "gzip",
    "inflate": "deflate",
}


def _source_and_destination(args: List[str]) -> Tuple[str, str]:
    if not args:
        raise MissingArgument("source path")
    if len(args) < 2:
        raise MissingArgument("destination path")
    return args[0], args[1]


def _validate_algorithm(algorithm: str) -> str:
    algorithm = algorithm.lower()
    if algorithm not in COMPRESSION_ALGORITHMS:
        raise UnsupportedAlgorithm(algorithm, COMPRESSION_ALGORITHMS)
    return algorithm


class CompressionCommands:
    """Handler for compression and decompression commands"""

    def __init__(self, file_manager: FileManager, formatter: OutputFormatter,
                 default_algorithm: str = DEFAULT_COMPRESSION_ALGORITHM):
        self.file_manager = file_manager
        self.formatter = formatter
        self.default_algorithm = default_algorithm

    def _print_sizes(self, result: CompressionResult):
        self.formatter.print(
            f"[dim]Original:[/dim] {format_size(result.original_size)} [dim]->[/dim] "
            f"[dim]Compressed:[/dim] {format_size(result.compressed_size)} "
            f"[dim]([/dim][green]{result.ratio:.1f}% saved[/green][dim])[/dim]"
        )

    def cmd_compress(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Compress a file

        Usage:
            compress <src> <dest> [brotli|gzip|deflate]
        """
        source, destination = _source_and_destination(args)
        algorithm = _validate_algorithm(args[2] if len(args) > 2 else self.default_algorithm)

        self.formatter.print(
            f"[cyan]Compressing[/cyan] {escape(source)} [dim]using[/dim] [bold]{algorithm}[/bold]..."
        )
        result = self.file_manager.compress_file(source, destination, algorithm, token)

        self.formatter.format_success(messages.compressed(source, destination))
        self._print_sizes(result)
        return CommandResult(success=True, data=result)

    def cmd_decompress(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Decompress a file

        Usage:
            decompress <src> <dest>             - Algorithm detected from .br/.gz/.zz
            decompress <src> <dest> <algorithm>
        """
        source, destination = _source_and_destination(args)

        if len(args) > 2:
            algorithm = _validate_algorithm(args[2])
        else:
            algorithm = self.file_manager.detect_compression_algorithm(source)
            if algorithm is None:
                raise FileOperationError(
                    "Cannot detect compression algorithm. "
                    f"Please specify: {', '.join(COMPRESSION_ALGORITHMS)}"
                )

        self.formatter.print(
            f"[cyan]Decompressing[/cyan] {escape(source)} [dim]using[/dim] [bold]{algorithm}[/bold]..."
        )
        dest_path = self.file_manager.decompress_file(source, destination, algorithm, token)

        self.formatter.format_success(messages.decompressed(source, destination))
        return CommandResult(success=True, data=dest_path)

    def compress_shortcut(self, algorithm: str):
        """Build the handler for brotli/gzip/deflate"""
        display_name = DISPLAY_NAMES[algorithm]

        def handler(args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
            source, destination = _source_and_destination(args)

            self.formatter.print(f"[cyan]Compressing with {display_name}[/cyan] {escape(source)}...")
            result = self.file_manager.compress_file(source, destination, algorithm, token)
            self.formatter.print(
                f"[green]Done![/green] {format_size(result.original_size)} -> "
                f"{format_size(result.compressed_size)} ([bold]{result.ratio:.1f}% saved[/bold])"
            )
            return CommandResult(success=True, data=result)

        handler.__name__ = f"cmd_{algorithm}"
        return handler

    def decompress_shortcut(self, command_name: str):
        """Build the handler for unbrotli/gunzip/inflate"""
        algorithm = DECOMPRESS_SHORTCUTS[command_name]
        display_name = DISPLAY_NAMES[algorithm]

        def handler(args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
            source, destination = _source_and_destination(args)

            self.formatter.print(f"[cyan]Decompressing {display_name}[/cyan] {escape(source)}...")
            dest_path = self.file_manager.decompress_file(source, destination, algorithm, token)
            self.formatter.format_success(messages.decompressed(source, destination))
            return CommandResult(success=True, data=dest_path)

        handler.__name__ = f"cmd_{command_name}"
        return handler


def register_compression_commands(registry: CommandRegistry, file_manager: FileManager,
                                  formatter: OutputFormatter,
                                  default_algorithm: str = DEFAULT_COMPRESSION_ALGORITHM) -> CompressionCommands:
    compression = CompressionCommands(file_manager, formatter, default_algorithm)
    supported = ', '.join(COMPRESSION_ALGORITHMS)

    registry.register("compress", compression.cmd_compress, CommandDoc(
        description="Compress a file",
        syntax="compress <source> <destination> [algorithm]",
        example="compress large.txt large.txt.gz gzip",
        details="Compresses a file using the specified algorithm and saves "
                f"the result to the destination. Supported algorithms: {supported}. "
                f"Default: {default_algorithm}.",
        category=CommandCategory.COMPRESSION,
    ))

    registry.register("decompress", compression.cmd_decompress, CommandDoc(
        description="Decompress a compressed file",
        syntax="decompress <source> <destination> [algorithm]",
        example="decompress large.txt.gz large.txt gzip",
        details="Decompresses a file and writes the output to the destination. "
                "If algorithm is not specified, it will be detected from the file extension. "
                f"Supported: {supported}.",
        category=CommandCategory.COMPRESSION,
    ))

    for algorithm in COMPRESSION_ALGORITHMS:
        extension = COMPRESSION[algorithm]["extension"]
        registry.register(algorithm, compression.compress_shortcut(algorithm), CommandDoc(
            description=f"Compress using {DISPLAY_NAMES[algorithm]} algorithm",
            syntax=f"{algorithm} <source> <destination>",
            example=f"{algorithm} file.txt file.txt{extension}",
            details=COMPRESSION[algorithm]["description"],
            category=CommandCategory.COMPRESSION,
        ))

    for name, algorithm in DECOMPRESS_SHORTCUTS.items():
        extension = COMPRESSION[algorithm]["extension"]
        registry.register(name, compression.decompress_shortcut(name), CommandDoc(
            description=f"Decompress a {DISPLAY_NAMES[algorithm]} file",
            syntax=f"{name} <source> <destination>",
            example=f"{name} file.txt{extension} file.txt",
            details=f"Decompresses a {DISPLAY_NAMES[algorithm]}-compressed file ({extension} extension).",
            category=CommandCategory.COMPRESSION,
        ))

    return compression
