"""
Pytest configuration and shared fixtures
"""

import io
import tempfile
from pathlib import Path

import pytest
from rich.console import Console

from fmshell.core.command_registry import CommandRegistry
from fmshell.core.commands import register_all_commands
from fmshell.core.config import Config
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import TUIFormatter
from fmshell.core.session import ShellState


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests spanning the dispatch loop and file system")


class RecordingFormatter(TUIFormatter):
    """TUIFormatter writing plain text to a buffer, with scripted confirmation answers"""

    def __init__(self, answers=None):
        self.buffer = io.StringIO()
        self.answers = list(answers or [])
        self.questions = []
        console = Console(file=self.buffer, width=200, color_system=None, force_terminal=False)
        super().__init__(console=console, confirm_func=self._answer)

    def _answer(self, message: str) -> bool:
        self.questions.append(message)
        return self.answers.pop(0) if self.answers else False

    @property
    def text(self) -> str:
        return self.buffer.getvalue()

    def reset(self):
        self.buffer.seek(0)
        self.buffer.truncate()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.fmshell"""
    config_path = tmp_path / "config" / "config.json"
    monkeypatch.setenv("FMSHELL_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def temp_dir():
    """Create a temporary directory"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def home_dir(tmp_path):
    """Home directory with a small tree:

    home/
        docs/
            notes.txt
            report.md
        src/
            main.py
            util/
                helpers.py
        readme.txt
    """
    home = tmp_path / "home"
    (home / "docs").mkdir(parents=True)
    (home / "src" / "util").mkdir(parents=True)
    (home / "docs" / "notes.txt").write_text("first line\nTODO: buy milk\nlast line\n")
    (home / "docs" / "report.md").write_text("# Report\nNothing to do here\n")
    (home / "src" / "main.py").write_text("import os\n# TODO refactor\nprint('hi')\n")
    (home / "src" / "util" / "helpers.py").write_text("def helper():\n    return 42\n")
    (home / "readme.txt").write_text("Read me\n")
    return home


@pytest.fixture
def state(home_dir):
    return ShellState(username="Tester", home_dir=home_dir)


@pytest.fixture
def file_manager(state):
    return FileManager(state, chunk_size=16)


@pytest.fixture
def formatter():
    return RecordingFormatter()


@pytest.fixture
def config(isolated_config):
    return Config(isolated_config)


@pytest.fixture
def registry(file_manager, formatter, config):
    return register_all_commands(CommandRegistry(), file_manager, formatter, config)
