"""
Interactive dispatch loop.

Reads a line, parses it, resolves the command through the registry, asks
for confirmation when the command requires it, and runs the handler with a
fresh CancellationToken. Handlers run on a daemon worker thread so that
Ctrl+C, which always lands on the main thread, can abort the token of the
operation in flight, and a confirmed exit never waits for a handler that
ignores its token.
"""

import logging
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, List, Optional, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from fmshell.core import messages
from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import (
    Command,
    CommandCategory,
    CommandDoc,
    CommandRegistry,
    CommandResult,
)
from fmshell.core.commands import register_all_commands
from fmshell.core.config import Config, get_config
from fmshell.core.constants import (
    APP_NAME,
    APP_VERSION,
    CHUNK_SIZE,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_USERNAME,
    INTERRUPT_THRESHOLD,
    POLL_INTERVAL,
    PROMPT_CHAR,
)
from fmshell.core.errors import InvalidCommand, OperationAborted, ShellError, describe_error
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter, TUIFormatter
from fmshell.core.session import ShellState
from fmshell.core.shell_completer import create_shell_completer
from fmshell.core.shell_parser import parse_command_with_quotes

logger = logging.getLogger(__name__)

EXIT_ALIASES = ("exit", "quit", "q")


class FileManagerShell:
    """Read-parse-resolve-confirm-execute loop of the file manager"""

    def __init__(
        self,
        username: str = DEFAULT_USERNAME,
        state: Optional[ShellState] = None,
        formatter: Optional[OutputFormatter] = None,
        config: Optional[Config] = None,
        registry: Optional[CommandRegistry] = None,
        file_manager: Optional[FileManager] = None,
        prompt_session: Optional[PromptSession] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the shell

        Args:
            username: Display name; empty falls back to Anonymous
            state: Session state (created from username if None)
            formatter: Output sink (rich TUIFormatter if None)
            config: Configuration (global config if None)
            registry: Pre-populated registry; when None a new one is
                created with every built-in command group
            file_manager: File engine (created from state and config if None)
            prompt_session: prompt_toolkit session (created lazily if None)
            clock: Monotonic time source for double-interrupt detection
        """
        self.config = config or get_config()
        self.state = state or ShellState(username=username)
        self.formatter = formatter or TUIFormatter()
        self.clock = clock

        self.interrupt_threshold = float(self.config.get('shell.interrupt_threshold', INTERRUPT_THRESHOLD))
        self.poll_interval = float(self.config.get('shell.poll_interval', POLL_INTERVAL))

        self.file_manager = file_manager or FileManager(
            self.state,
            chunk_size=int(self.config.get('files.chunk_size', CHUNK_SIZE)),
            compression_level=int(self.config.get('compression.level', DEFAULT_COMPRESSION_LEVEL)),
        )

        if registry is None:
            registry = register_all_commands(CommandRegistry(), self.file_manager, self.formatter, self.config)
        self.registry = registry
        self._register_exit_command()

        # Loop state
        self.running = False
        self.is_prompting = False
        self.current_token: Optional[CancellationToken] = None
        self._last_interrupt: Optional[float] = None
        self._show_directory = True

        self._session = prompt_session

        self.style = Style.from_dict({
            'prompt': '#00aa00 bold',
        })

    @property
    def username(self) -> str:
        return self.state.username

    # --- Setup ---

    def _register_exit_command(self):
        self.registry.register(".exit", self._cmd_exit, CommandDoc(
            description="Exit the File Manager",
            syntax=".exit",
            example=".exit",
            details="Safely closes the File Manager session and displays a farewell message. "
                    "Pressing Ctrl+C twice in quick succession also exits.",
            category=CommandCategory.UTILITY,
        ))
        for alias in EXIT_ALIASES:
            self.registry.register_alias(alias, ".exit")

    def _cmd_exit(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        self.exit()
        return CommandResult(success=True)

    def _create_key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()
        not_prompting = Condition(lambda: not self.is_prompting)

        @bindings.add('c-l', filter=not_prompting)
        def _clear_screen(event):
            """Clear the screen and redraw the prompt"""
            event.app.renderer.clear()

        return bindings

    @property
    def session(self) -> PromptSession:
        """prompt_toolkit session, created on first use so tests never need a terminal"""
        if self._session is None:
            self._session = PromptSession(
                history=InMemoryHistory(),
                auto_suggest=AutoSuggestFromHistory(),
                completer=create_shell_completer(self.registry, self.state),
                key_bindings=self._create_key_bindings(),
            )
        return self._session

    # --- Output ---

    def display_banner(self):
        """Print welcome header"""
        header_text = Text()
        header_text.append(APP_NAME, style="bold cyan")
        header_text.append(f" v{APP_VERSION}\n", style="dim")
        header_text.append("Type ", style="dim")
        header_text.append("'man'", style="bold")
        header_text.append(" for help, ", style="dim")
        header_text.append("'.exit'", style="bold")
        header_text.append(" to quit", style="dim")

        self.formatter.print(Panel(header_text, border_style="cyan"))
        self.formatter.print(f"[green]{escape(messages.welcome(self.username))}[/green]")

    def _render_result(self, result: Any):
        if isinstance(result, CommandResult):
            output = result.output
        elif isinstance(result, str):
            output = result
        else:
            output = ''

        if output:
            self.formatter.print_text(output.rstrip('\n'))

    # --- Loop ---

    def run(self) -> int:
        """
        Run the interactive loop until an exit command or end of input

        Returns:
            Process exit code (always 0; a double Ctrl+C raises SystemExit(0))
        """
        self.running = True
        self.display_banner()

        while self.running:
            try:
                if self._show_directory:
                    self.formatter.print()
                    self.formatter.show_current_directory(self.state.current_directory)
                self._show_directory = True

                line = self.read_line()
                if line is not None:
                    self.handle_line(line)
            except KeyboardInterrupt:
                # Landed outside the prompt and the wait, e.g. while rendering output
                self._show_directory = False
                self.handle_interrupt()

        return 0

    def read_line(self) -> Optional[str]:
        """
        Read one line from the prompt

        Returns:
            The line, or None when the prompt was interrupted or closed
        """
        try:
            return self.session.prompt(
                HTML('<prompt>{}</prompt>').format(PROMPT_CHAR),
                style=self.style,
            )
        except KeyboardInterrupt:
            # Keep the user's place: no directory header before the next prompt
            self._show_directory = False
            self.handle_interrupt()
            return None
        except EOFError:
            self.exit()
            return None

    def handle_line(self, line: str) -> Optional[CommandResult]:
        """
        Dispatch one input line and report any failure

        Never raises for command failures: aborts are silent, everything
        else is printed as "Error: <message>".
        """
        if self.is_prompting:
            logger.debug("Dropping input received during confirmation: %r", line)
            return None

        try:
            return self.dispatch(line)
        except OperationAborted:
            logger.debug("Operation aborted: %r", line)
        except (ShellError, OSError) as e:
            self.formatter.format_error(describe_error(e))
        except Exception as e:
            logger.exception("Unexpected error while running %r", line)
            self.formatter.format_error(describe_error(e))
        return None

    def dispatch(self, line: str) -> Optional[CommandResult]:
        """
        Parse, resolve, confirm and execute one line

        Returns:
            The handler's result, or None for empty input and declined
            confirmations

        Raises:
            InvalidCommand: If the command name does not resolve
        """
        line = line.strip()
        if not line:
            return None

        parsed = parse_command_with_quotes(line)
        if not parsed.command:
            return None

        command = self.registry.get(parsed.command)
        if command is None:
            raise InvalidCommand(parsed.command)

        if command.requires_confirmation and not self.confirm_action(line):
            self.formatter.format_warning(messages.OPERATION_CANCELLED)
            return None

        result = self.execute(command, parsed.args)
        self._render_result(result)
        return result

    def confirm_action(self, command_line: str) -> bool:
        """Ask before running a destructive command; input is dropped meanwhile"""
        self.is_prompting = True
        try:
            return self.formatter.confirm(messages.confirm_execute(command_line))
        finally:
            self.is_prompting = False

    def execute(self, command: Command, args: Sequence[str]) -> Any:
        """
        Run a command with a new cancellation token

        The token is current for exactly this invocation and cleared
        afterwards, whether the handler returned or raised.
        """
        token = CancellationToken()
        self.current_token = token
        logger.debug("Dispatching %s %r", command.name, args)

        try:
            future = self._start_worker(self.registry.execute, command.name, list(args), token)
            result = self._wait_for(future)
        finally:
            self.current_token = None

        logger.debug("Finished %s", command.name)
        return result

    def _start_worker(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Run fn on a daemon thread and return a future for its outcome"""
        future: Future = Future()

        def _run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn(*args)
            except BaseException as e:
                future.set_exception(e)
            else:
                future.set_result(result)

        threading.Thread(target=_run, name="fmshell-op", daemon=True).start()
        return future

    def _wait_for(self, future: Future) -> Any:
        # Short timeouts keep the main thread responsive to KeyboardInterrupt
        while True:
            try:
                return future.result(timeout=self.poll_interval)
            except FutureTimeoutError:
                # On 3.11+ this is the builtin TimeoutError, which a handler may raise too
                if future.done():
                    return future.result()
            except KeyboardInterrupt:
                # Keep waiting: the worker still has to clean up after an abort
                self.handle_interrupt()

    # --- Interrupts and exit ---

    def handle_interrupt(self):
        """
        React to Ctrl+C

        A second interrupt within the threshold exits immediately. Otherwise
        the running operation, if any, is aborted; with nothing running a
        hint is printed.
        """
        now = self.clock()
        last = self._last_interrupt
        self._last_interrupt = now

        if last is not None and now - last <= self.interrupt_threshold:
            self.terminate()

        token = self.current_token
        if token is not None and not token.aborted:
            token.abort()
            self.formatter.format_warning(messages.OPERATION_INTERRUPTED)
        else:
            self.formatter.format_info(messages.EXIT_HINT)

    def exit(self):
        """Graceful exit: print the farewell and stop the loop"""
        self.formatter.print()
        self.formatter.format_success(messages.farewell(self.username))
        self.running = False

    def terminate(self):
        """Confirmed double interrupt: abort any running work and exit the process"""
        token = self.current_token
        if token is not None:
            token.abort()

        self.exit()
        # The worker is a daemon thread; a handler still running is not joined
        raise SystemExit(0)
