"""
Unit tests for the command-line entry point
"""

import logging
from unittest.mock import patch

import pytest

from fmshell import cli


class FakeShell:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        FakeShell.instances.append(self)

    def run(self):
        return 0


@pytest.fixture
def fake_shell(monkeypatch):
    FakeShell.instances = []
    monkeypatch.setattr(cli, "FileManagerShell", FakeShell)
    return FakeShell


class TestParseArgs:

    @pytest.mark.unit
    def test_defaults(self):
        args, unknown = cli.parse_args([])

        assert args.username == "Anonymous"
        assert args.config is None
        assert args.verbose is False
        assert unknown == []

    @pytest.mark.unit
    def test_username(self):
        args, _ = cli.parse_args(["--username", "Alice"])
        assert args.username == "Alice"

    @pytest.mark.unit
    def test_username_equals_form(self):
        args, _ = cli.parse_args(["--username=Bob"])
        assert args.username == "Bob"

    @pytest.mark.unit
    def test_empty_username_falls_back(self):
        args, _ = cli.parse_args(["--username="])
        assert args.username == "Anonymous"

    @pytest.mark.unit
    def test_unknown_arguments_are_ignored(self):
        args, unknown = cli.parse_args(["--color", "blue", "extra", "--username", "Eve"])

        assert args.username == "Eve"
        assert unknown == ["--color", "blue", "extra"]

    @pytest.mark.unit
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.parse_args(["--version"])

        assert excinfo.value.code == 0
        assert "File Manager Shell v1.0.0" in capsys.readouterr().out


class TestSetupLogging:

    @pytest.mark.unit
    def test_default_level_is_warning(self):
        with patch.object(logging, "basicConfig") as basic_config:
            cli.setup_logging()
        assert basic_config.call_args.kwargs["level"] == logging.WARNING

    @pytest.mark.unit
    def test_verbose_level_is_debug(self):
        with patch.object(logging, "basicConfig") as basic_config:
            cli.setup_logging(verbose=True)
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG


class TestMain:

    @pytest.mark.unit
    def test_main_builds_shell(self, fake_shell, tmp_path):
        config_path = tmp_path / "custom.json"

        with patch.object(cli, "setup_logging"):
            code = cli.main(["--username", "Alice", "--config", str(config_path), "--bogus"])

        assert code == 0
        shell = fake_shell.instances[0]
        assert shell.kwargs["username"] == "Alice"
        assert shell.kwargs["state"].username == "Alice"
        assert shell.kwargs["config"].config_path == config_path
        assert config_path.exists()

    @pytest.mark.unit
    def test_main_uses_env_config(self, fake_shell, isolated_config):
        with patch.object(cli, "setup_logging"):
            cli.main([])

        assert fake_shell.instances[0].kwargs["config"].config_path == isolated_config
