"""
Shell command handlers

This package contains the command groups registered into the shell's
CommandRegistry. Commands are organized by category:
- navigation.py: up, cd, ls, pwd
- file_ops.py: cat, add, touch, write, mkdir, rn, cp, move, rm, rmdir, info
- search.py: find, grep, where
- os_info.py: os, sysinfo
- hash.py: hash, md5, sha1, sha256, sha512
- compression.py: compress, decompress, brotli, gzip, deflate, unbrotli, gunzip, inflate
- utility.py: man, clear, version

The exit command is registered by the shell itself.
"""

from typing import Optional

from fmshell.core.command_registry import CommandRegistry
from fmshell.core.commands.compression import register_compression_commands
from fmshell.core.commands.file_ops import register_file_operation_commands
from fmshell.core.commands.hash import register_hash_commands
from fmshell.core.commands.navigation import register_navigation_commands
from fmshell.core.commands.os_info import register_os_info_commands
from fmshell.core.commands.search import register_search_commands
from fmshell.core.commands.utility import register_utility_commands
from fmshell.core.config import Config
from fmshell.core.constants import DEFAULT_COMPRESSION_ALGORITHM, DEFAULT_HASH_ALGORITHM
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter


def register_all_commands(registry: CommandRegistry, file_manager: FileManager,
                          formatter: OutputFormatter, config: Optional[Config] = None) -> CommandRegistry:
    """
    Register every command group

    Args:
        registry: Registry to populate
        file_manager: File engine shared by all handlers
        formatter: Output sink shared by all handlers
        config: Supplies default hash and compression algorithms

    Returns:
        The populated registry
    """
    hash_algorithm = DEFAULT_HASH_ALGORITHM
    compression_algorithm = DEFAULT_COMPRESSION_ALGORITHM
    if config is not None:
        hash_algorithm = config.get('hash.default_algorithm', hash_algorithm)
        compression_algorithm = config.get('compression.default_algorithm', compression_algorithm)

    register_navigation_commands(registry, file_manager, formatter)
    register_file_operation_commands(registry, file_manager, formatter)
    register_search_commands(registry, file_manager, formatter)
    register_os_info_commands(registry, file_manager, formatter)
    register_hash_commands(registry, file_manager, formatter, hash_algorithm)
    register_compression_commands(registry, file_manager, formatter, compression_algorithm)
    register_utility_commands(registry, formatter)

    return registry
