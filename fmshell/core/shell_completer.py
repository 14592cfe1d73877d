"""
Shell completer for commands and file paths.

Provides tab completion for:
- Command names and aliases from the registry
- File system paths relative to the session's current directory
- OS info flags after the os command
"""

import logging
import os
from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from fmshell.core.command_registry import CommandRegistry
from fmshell.core.constants import OS_INFO_FLAGS
from fmshell.core.session import ShellState

logger = logging.getLogger(__name__)


class ShellCompleter(Completer):
    """
    Tab completer for shell commands and file paths.

    Supports:
    - Command and alias completion at start of line
    - Path completion for every argument of other commands
    - Flag completion for os
    """

    # Commands whose arguments are not paths
    NO_PATH_COMMANDS = {'os', 'sysinfo', 'systeminfo', 'man', 'help', '?', 'version', 'clear', 'cls'}

    def __init__(self, registry: CommandRegistry, state: ShellState):
        """
        Initialize completer.

        Args:
            registry: Source of command names and aliases
            state: Session whose current directory anchors relative paths
        """
        self.registry = registry
        self.state = state

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        """Generate completions for the current input."""
        text = document.text_before_cursor
        words = text.split()

        if not words:
            yield from self._complete_commands('')
            return

        # Completing the first word
        if len(words) == 1 and not text.endswith(' '):
            yield from self._complete_commands(words[0])
            return

        command = words[0]
        partial = '' if text.endswith(' ') else words[-1]

        if command == 'os':
            yield from self._complete_flags(partial)
        elif command in ('man', 'help', '?'):
            yield from self._complete_commands(partial)
        elif command not in self.NO_PATH_COMMANDS:
            yield from self._complete_paths(partial)

    def _command_names(self) -> List[str]:
        return sorted(set(self.registry.get_command_names()) | set(self.registry.get_aliases()))

    def _complete_commands(self, prefix: str) -> Iterable[Completion]:
        """Complete command names and aliases."""
        prefix_lower = prefix.lower()
        for name in self._command_names():
            if name.startswith(prefix_lower):
                command = self.registry.get(name)
                meta = command.doc.description if command else 'command'
                yield Completion(name, start_position=-len(prefix), display_meta=meta)

    def _complete_flags(self, prefix: str) -> Iterable[Completion]:
        for flag in OS_INFO_FLAGS:
            if flag.lower().startswith(prefix.lower()):
                yield Completion(flag, start_position=-len(prefix), display_meta='flag')

    def _complete_paths(self, partial: str) -> Iterable[Completion]:
        """Complete entries of the directory the partial path points into."""
        head, prefix = os.path.split(partial)
        directory = self.state.resolve(head) if head else self.state.current_directory

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name.lower())
        except OSError as e:
            logger.debug("No path completions for %s: %s", directory, e)
            return

        prefix_lower = prefix.lower()
        for entry in entries:
            if not entry.name.lower().startswith(prefix_lower):
                continue

            is_dir = entry.is_dir()
            display = entry.name + ('/' if is_dir else '')
            completion = os.path.join(head, entry.name) if head else entry.name
            if is_dir:
                completion += '/'

            yield Completion(
                completion,
                start_position=-len(partial),
                display=display,
                display_meta='dir' if is_dir else 'file',
            )


def create_shell_completer(registry: CommandRegistry, state: ShellState) -> ShellCompleter:
    """Create a shell completer instance."""
    return ShellCompleter(registry, state)
