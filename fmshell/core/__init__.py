"""Core components of the File Manager Shell"""

from .command_registry import CommandRegistry
from .errors import OperationAborted, ShellError

__all__ = ['CommandRegistry', 'OperationAborted', 'ShellError']
