"""
Unit tests for the dispatch loop

The prompt is replaced by a scripted session and time by a fake clock, so
confirmation, interrupt and exit handling run without a terminal.
"""

import json
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError

import pytest

from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandResult
from fmshell.core.config import Config
from fmshell.core.errors import OperationAborted
from fmshell.shell import FileManagerShell


class ScriptedSession:
    """Stands in for PromptSession; raises EOFError when the script runs out"""

    def __init__(self, lines=None):
        self.lines = list(lines or [])
        self.prompts = 0

    def prompt(self, *args, **kwargs):
        self.prompts += 1
        if not self.lines:
            raise EOFError()
        item = self.lines.pop(0)
        if isinstance(item, type) and issubclass(item, BaseException):
            raise item()
        return item


class FakeClock:
    def __init__(self, *times):
        self.times = list(times)

    def __call__(self):
        return self.times.pop(0)


class FlakyFuture:
    """Future whose first result() call raises, second returns"""

    def __init__(self, first_error, value="done", done=True):
        self.first_error = first_error
        self.value = value
        self._done = done
        self.calls = 0

    def result(self, timeout=None):
        self.calls += 1
        if self.calls == 1:
            raise self.first_error
        return self.value

    def done(self):
        return self._done


def make_doc(description="test command"):
    return CommandDoc(
        description=description,
        syntax="test",
        example="test",
        details="",
        category=CommandCategory.UTILITY,
    )


@pytest.fixture
def session():
    return ScriptedSession()


@pytest.fixture
def shell(state, formatter, config, registry, file_manager, session):
    shell = FileManagerShell(
        state=state,
        formatter=formatter,
        config=config,
        registry=registry,
        file_manager=file_manager,
        prompt_session=session,
        clock=FakeClock(),
    )
    return shell


class TestRun:

    @pytest.mark.unit
    def test_exit_command(self, shell, session, formatter):
        session.lines = [".exit"]

        assert shell.run() == 0
        assert shell.running is False
        assert "Welcome, Tester!" in formatter.text
        assert "Farewell, Tester! Thanks for using File Manager Shell. Until next time!" in formatter.text

    @pytest.mark.unit
    @pytest.mark.parametrize('word', ["exit", "quit", "q"])
    def test_exit_aliases(self, shell, session, word):
        session.lines = [word, "pwd"]

        shell.run()

        assert session.lines == ["pwd"]

    @pytest.mark.unit
    def test_end_of_input_exits(self, shell, session, formatter):
        assert shell.run() == 0
        assert "Farewell, Tester!" in formatter.text

    @pytest.mark.unit
    def test_directory_header_before_each_prompt(self, shell, session, formatter, home_dir):
        session.lines = ["cd docs", ".exit"]

        shell.run()

        assert f"Current Directory: {home_dir}" in formatter.text
        assert f"Current Directory: {home_dir / 'docs'}" in formatter.text

    @pytest.mark.unit
    def test_commands_run_in_order(self, shell, session, home_dir):
        session.lines = ["mkdir out", "cd out", "write a.txt hello", ".exit"]

        shell.run()

        assert (home_dir / "out" / "a.txt").read_text() == "hello"

    @pytest.mark.unit
    def test_banner(self, shell, formatter):
        shell.display_banner()

        assert "File Manager Shell" in formatter.text
        assert 'Type "man" to view available commands.' in formatter.text


class TestDispatch:

    @pytest.mark.unit
    def test_empty_line(self, shell, formatter):
        assert shell.handle_line("   ") is None
        assert formatter.text == ""

    @pytest.mark.unit
    def test_pwd_output_is_printed(self, shell, formatter, home_dir):
        shell.handle_line("pwd")
        assert formatter.text == f"{home_dir}\n"

    @pytest.mark.unit
    def test_invalid_command(self, shell, formatter):
        shell.handle_line("frobnicate now")
        assert "Error: Invalid command. Type 'man' for available commands." in formatter.text

    @pytest.mark.unit
    def test_handler_error_is_reported(self, shell, formatter):
        result = shell.handle_line("cat nope.txt")

        assert result is None
        assert "Error: File not found: nope.txt" in formatter.text

    @pytest.mark.unit
    def test_missing_argument_is_reported(self, shell, formatter):
        shell.handle_line("cd")
        assert "Error: Missing required argument: path" in formatter.text

    @pytest.mark.unit
    def test_quoted_arguments(self, shell, home_dir):
        shell.handle_line('write "my notes.txt" "hello   world"')
        assert (home_dir / "my notes.txt").read_text() == "hello   world"

    @pytest.mark.unit
    def test_os_error_message(self, shell, registry, formatter):
        def denied(args, token):
            raise PermissionError(13, "Permission denied", "/secret")

        registry.register("denied", denied, make_doc())
        shell.handle_line("denied")

        assert "Error: Permission denied: /secret" in formatter.text

    @pytest.mark.unit
    def test_unexpected_error_is_reported(self, shell, registry, formatter):
        def boom(args, token):
            raise RuntimeError("boom")

        registry.register("boom", boom, make_doc())
        shell.handle_line("boom")

        assert "Error: boom" in formatter.text
        assert shell.current_token is None

    @pytest.mark.unit
    def test_abort_is_silent(self, shell, registry, formatter):
        def aborted(args, token):
            raise OperationAborted()

        registry.register("aborted", aborted, make_doc())
        shell.handle_line("aborted")

        assert "Error" not in formatter.text

    @pytest.mark.unit
    def test_each_invocation_gets_fresh_token(self, shell, registry):
        seen = []

        def capture(args, token):
            seen.append((token, shell.current_token))
            return CommandResult()

        registry.register("capture", capture, make_doc())
        shell.handle_line("capture")
        shell.handle_line("capture")

        (first, first_current), (second, second_current) = seen
        assert isinstance(first, CancellationToken)
        assert first is first_current
        assert second is second_current
        assert first is not second
        assert shell.current_token is None

    @pytest.mark.unit
    def test_string_result_is_printed(self, shell, registry, formatter):
        registry.register("hello", lambda args, token: "hello [bold]there[/bold]\n", make_doc())
        shell.handle_line("hello")
        assert formatter.text == "hello [bold]there[/bold]\n"


class TestConfirmation:

    @pytest.mark.unit
    def test_declined(self, shell, formatter, home_dir):
        formatter.answers = [False]

        shell.handle_line("rm readme.txt")

        assert (home_dir / "readme.txt").exists()
        assert formatter.questions == ['Are you sure you want to execute "rm readme.txt"?']
        assert "Operation cancelled." in formatter.text

    @pytest.mark.unit
    def test_accepted(self, shell, formatter, home_dir):
        formatter.answers = [True]

        shell.handle_line("del readme.txt")

        assert not (home_dir / "readme.txt").exists()
        assert "File deleted: readme.txt" in formatter.text

    @pytest.mark.unit
    def test_non_destructive_commands_do_not_ask(self, shell, formatter):
        shell.handle_line("ls")
        assert formatter.questions == []

    @pytest.mark.unit
    def test_unknown_command_is_not_confirmed(self, shell, formatter):
        shell.handle_line("remove readme.txt")
        assert formatter.questions == []

    @pytest.mark.unit
    def test_is_prompting_during_question(self, shell, formatter):
        states = []

        def answer(message):
            states.append(shell.is_prompting)
            return False

        formatter.confirm_func = answer
        shell.handle_line("rmdir docs")

        assert states == [True]
        assert shell.is_prompting is False

    @pytest.mark.unit
    def test_input_dropped_while_prompting(self, shell, formatter, home_dir):
        shell.is_prompting = True

        assert shell.handle_line("rm readme.txt") is None
        assert (home_dir / "readme.txt").exists()
        assert formatter.questions == []


class TestInterrupts:

    @pytest.mark.unit
    def test_interrupt_when_idle_prints_hint(self, shell, formatter):
        shell.clock = FakeClock(10.0)

        shell.handle_interrupt()

        assert "Press Ctrl+C again to exit, or type '.exit' to quit." in formatter.text

    @pytest.mark.unit
    def test_interrupt_aborts_running_operation(self, shell, formatter):
        shell.clock = FakeClock(10.0)
        token = CancellationToken()
        shell.current_token = token

        shell.handle_interrupt()

        assert token.aborted
        assert "Operation interrupted." in formatter.text

    @pytest.mark.unit
    def test_double_interrupt_exits(self, shell, formatter):
        shell.clock = FakeClock(10.0, 10.4)
        token = CancellationToken()

        shell.handle_interrupt()
        shell.current_token = token
        with pytest.raises(SystemExit) as excinfo:
            shell.handle_interrupt()

        assert excinfo.value.code == 0
        assert token.aborted
        assert shell.running is False
        assert "Farewell, Tester!" in formatter.text

    @pytest.mark.unit
    def test_slow_interrupts_do_not_exit(self, shell, formatter):
        shell.clock = FakeClock(10.0, 11.5, 13.0)

        shell.handle_interrupt()
        shell.handle_interrupt()
        shell.handle_interrupt()

        assert formatter.text.count("Press Ctrl+C again") == 3

    @pytest.mark.unit
    def test_threshold_from_config(self, state, formatter, registry, file_manager, tmp_path):
        config_path = tmp_path / "slow-fingers.json"
        config_path.write_text(json.dumps({"shell": {"interrupt_threshold": 5.0}}))
        shell = FileManagerShell(
            state=state, formatter=formatter, config=Config(config_path), registry=registry,
            file_manager=file_manager, prompt_session=ScriptedSession(),
            clock=FakeClock(10.0, 14.0),
        )

        shell.handle_interrupt()
        with pytest.raises(SystemExit):
            shell.handle_interrupt()

    @pytest.mark.unit
    def test_ctrl_c_at_prompt(self, shell, session, formatter):
        shell.clock = FakeClock(10.0)
        session.lines = [KeyboardInterrupt]

        assert shell.read_line() is None
        assert "Press Ctrl+C again" in formatter.text
        assert shell._show_directory is False

    @pytest.mark.unit
    def test_double_ctrl_c_at_prompt_exits_run(self, shell, session, formatter):
        shell.clock = FakeClock(10.0, 10.2)
        session.lines = [KeyboardInterrupt, KeyboardInterrupt, "pwd"]

        with pytest.raises(SystemExit) as excinfo:
            shell.run()

        assert excinfo.value.code == 0
        assert session.lines == ["pwd"]
        assert "Farewell, Tester!" in formatter.text

    @pytest.mark.unit
    def test_ctrl_c_while_waiting_keeps_waiting(self, shell, formatter):
        shell.clock = FakeClock(10.0)
        token = CancellationToken()
        shell.current_token = token
        future = FlakyFuture(KeyboardInterrupt())

        assert shell._wait_for(future) == "done"
        assert future.calls == 2
        assert token.aborted
        assert "Operation interrupted." in formatter.text

    @pytest.mark.unit
    def test_wait_polls_until_done(self, shell):
        future = FlakyFuture(FutureTimeoutError(), done=False)
        assert shell._wait_for(future) == "done"

    @pytest.mark.unit
    def test_clear_screen_binding_disabled_while_prompting(self, shell):
        bindings = shell._create_key_bindings().bindings

        assert len(bindings) == 1
        assert bindings[0].keys == ("c-l",)
        assert bindings[0].filter() is True
        shell.is_prompting = True
        assert bindings[0].filter() is False

    @pytest.mark.unit
    def test_ctrl_c_while_rendering_output_keeps_loop(self, shell, session, formatter, monkeypatch):
        shell.clock = FakeClock(10.0)
        session.lines = ["pwd", "pwd", ".exit"]
        original = formatter.print_text
        calls = []

        def interrupted_once(text):
            calls.append(text)
            if len(calls) == 1:
                raise KeyboardInterrupt()
            original(text)

        monkeypatch.setattr(formatter, "print_text", interrupted_once)

        assert shell.run() == 0
        assert len(calls) == 2
        assert session.lines == []
        assert "Press Ctrl+C again to exit" in formatter.text
        assert "Farewell, Tester!" in formatter.text

    @pytest.mark.unit
    def test_ctrl_c_during_directory_header(self, shell, session, formatter, monkeypatch):
        shell.clock = FakeClock(10.0)
        session.lines = [".exit"]
        original = formatter.show_current_directory
        calls = []

        def interrupted_once(path):
            calls.append(path)
            if len(calls) == 1:
                raise KeyboardInterrupt()
            original(path)

        monkeypatch.setattr(formatter, "show_current_directory", interrupted_once)

        assert shell.run() == 0
        assert "Press Ctrl+C again to exit" in formatter.text
        assert session.lines == []


class TestWorker:

    @pytest.mark.unit
    def test_handlers_run_on_daemon_thread(self, shell, registry):
        seen = []

        def capture(args, token):
            thread = threading.current_thread()
            seen.append((thread is threading.main_thread(), thread.daemon))
            return CommandResult()

        registry.register("capture", capture, make_doc())
        shell.handle_line("capture")

        assert seen == [(False, True)]

    @pytest.mark.unit
    def test_handler_exception_reaches_main_thread(self, shell):
        def fail():
            raise ValueError("bad value")

        future = shell._start_worker(fail)

        with pytest.raises(ValueError, match="bad value"):
            shell._wait_for(future)

    @pytest.mark.unit
    def test_worker_result(self, shell):
        future = shell._start_worker(lambda a, b: a + b, 2, 3)
        assert shell._wait_for(future) == 5
