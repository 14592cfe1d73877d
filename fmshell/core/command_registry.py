"""
Command registry for shell mode

Maps command names and aliases to handlers plus their documentation,
category and confirmation requirement, and executes resolved commands.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

from fmshell.core.cancellation import CancellationToken
from fmshell.core.constants import HELP_SYNTAX_WIDTH
from fmshell.core.errors import RegistryIntegrityError, UnknownCommand

logger = logging.getLogger(__name__)

# handler(args, token) -> CommandResult | str | None
CommandHandler = Callable[[List[str], Optional[CancellationToken]], Any]


class CommandCategory(str, Enum):
    """Closed set of categories used for grouped help display"""
    NAVIGATION = "navigation"
    FILE_OPERATIONS = "file-operations"
    SEARCH = "search"
    OS_INFO = "os-info"
    HASH = "hash"
    COMPRESSION = "compression"
    UTILITY = "utility"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    CommandCategory.NAVIGATION: "Navigation",
    CommandCategory.FILE_OPERATIONS: "File Operations",
    CommandCategory.SEARCH: "Search",
    CommandCategory.OS_INFO: "OS Information",
    CommandCategory.HASH: "Hash",
    CommandCategory.COMPRESSION: "Compression",
    CommandCategory.UTILITY: "Utility",
}


@dataclass(frozen=True)
class CommandDoc:
    """Documentation shown by man/help"""
    description: str
    syntax: str
    example: str
    details: str
    category: CommandCategory


@dataclass(frozen=True)
class Command:
    """A registered command; replaced wholesale on re-registration"""
    name: str
    handler: CommandHandler
    doc: CommandDoc
    requires_confirmation: bool = False


@dataclass
class CommandResult:
    """Result from command execution"""
    success: bool = True
    output: str = ''
    data: Any = None


class CommandRegistry:
    """Register, resolve and execute shell commands"""

    def __init__(self):
        self._commands: Dict[str, Command] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        doc: CommandDoc,
        requires_confirmation: bool = False,
    ) -> Command:
        """
        Register a command handler, replacing any command with the same name

        Args:
            name: Command name (e.g., 'cp', 'ls')
            handler: Callable with signature handler(args, token)
            doc: Documentation and category
            requires_confirmation: Ask the user before running it

        Returns:
            The registered Command
        """
        command = Command(
            name=name,
            handler=handler,
            doc=doc,
            requires_confirmation=requires_confirmation,
        )
        if name in self._commands:
            logger.debug("Replacing command %r", name)
        self._commands[name] = command
        return command

    def register_alias(self, alias: str, command_name: str) -> None:
        """
        Register an alternate name for an existing command

        Raises:
            RegistryIntegrityError: If command_name is not registered
        """
        if command_name not in self._commands:
            raise RegistryIntegrityError(command_name)
        self._aliases[alias] = command_name

    def _resolve_name(self, name: str) -> str:
        # Aliases are single-hop
        return self._aliases.get(name, name)

    def get(self, name: str) -> Optional[Command]:
        """Resolve a command or alias name; None if absent"""
        return self._commands.get(self._resolve_name(name))

    def has(self, name: str) -> bool:
        return self._resolve_name(name) in self._commands

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def execute(
        self,
        name: str,
        args: Sequence[str] = (),
        token: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Execute a command by name

        Handler failures propagate unmodified.

        Args:
            name: Command or alias name
            args: Command arguments
            token: Cancellation token for this invocation

        Returns:
            Whatever the handler returns

        Raises:
            UnknownCommand: If the name does not resolve
        """
        command = self.get(name)
        if command is None:
            raise UnknownCommand(name)

        logger.debug("Executing %s with args %r", command.name, list(args))
        return command.handler(list(args), token)

    def requires_confirmation(self, name: str) -> bool:
        command = self.get(name)
        return command.requires_confirmation if command else False

    def get_command_names(self) -> List[str]:
        return list(self._commands)

    def get_aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def get_aliases_for_command(self, command_name: str) -> List[str]:
        """Find all aliases that point to a specific command"""
        return [alias for alias, target in self._aliases.items() if target == command_name]

    def get_commands_by_category(self, category: Union[CommandCategory, str]) -> List[Command]:
        try:
            category = CommandCategory(category)
        except ValueError:
            return []
        return [command for command in self._commands.values() if command.doc.category == category]

    def get_all_commands_by_category(self) -> Dict[CommandCategory, List[Command]]:
        """Group all commands; every category is present, possibly empty"""
        categories: Dict[CommandCategory, List[Command]] = {category: [] for category in CommandCategory}
        for command in self._commands.values():
            categories[command.doc.category].append(command)
        return categories

    def get_doc(self, name: str) -> Optional[CommandDoc]:
        command = self.get(name)
        return command.doc if command else None

    @property
    def size(self) -> int:
        return len(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def clear(self) -> None:
        self._commands.clear()
        self._aliases.clear()

    def to_list(self) -> List[Command]:
        return list(self._commands.values())

    def list_all(self) -> List[Command]:
        """All registered commands, each exactly once, in registration order"""
        return self.to_list()

    def __iter__(self) -> Iterator[Command]:
        return iter(self.to_list())

    def generate_help_text(self) -> str:
        """Plain-text listing of every command grouped by category"""
        categories = self.get_all_commands_by_category()
        lines = ["", "=== File Manager Commands ==="]

        for category in CommandCategory:
            commands = categories[category]
            if not commands:
                continue
            lines.append("")
            lines.append(f"-- {category.display_name} --")
            for command in commands:
                lines.append(f"{command.doc.syntax.ljust(HELP_SYNTAX_WIDTH)} - {command.doc.description}")

        lines.append("")
        lines.append("Type 'man <command>' for detailed help on a specific command.")
        return '\n'.join(lines) + '\n'

    def generate_command_help(self, name: str) -> Optional[str]:
        """Plain-text manual for one command; None for an unknown name"""
        command = self.get(name)
        if command is None:
            return None

        doc = command.doc
        lines = [
            "",
            "=== Command Manual ===",
            f"Command: {command.name}",
            f"Description: {doc.description}",
            f"Syntax: {doc.syntax}",
            f"Example: {doc.example}",
        ]
        aliases = self.get_aliases_for_command(command.name)
        if aliases:
            lines.append(f"Aliases: {', '.join(aliases)}")
        lines.append(f"Details: {doc.details}")
        lines.append("=====================")
        return '\n'.join(lines) + '\n'
