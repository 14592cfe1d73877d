"""
Per-process shell state.

The current working directory lives here instead of in the process, so
handlers resolve paths against an explicit ShellState and tests can drive
navigation without touching os.getcwd().
"""

import os
from pathlib import Path
from typing import Optional, Union

from fmshell.core.constants import DEFAULT_USERNAME
from fmshell.core.errors import PathNotFound

PathLike = Union[str, Path]


def is_within(path: Path, root: Path) -> bool:
    """True if path equals root or lies below it"""
    try:
        return os.path.commonpath([str(path), str(root)]) == str(root)
    except ValueError:
        # Different drives on Windows
        return False


class ShellState:
    """Username, home directory and current directory of a shell session"""

    def __init__(
        self,
        username: str = DEFAULT_USERNAME,
        home_dir: Optional[PathLike] = None,
        current_directory: Optional[PathLike] = None,
    ):
        self._username = username or DEFAULT_USERNAME
        self.home_dir = Path(os.path.abspath(home_dir or Path.home()))
        self.current_directory = Path(os.path.abspath(current_directory or self.home_dir))

    @property
    def username(self) -> str:
        return self._username

    @username.setter
    def username(self, value: str):
        self._username = value or DEFAULT_USERNAME

    def resolve(self, path: PathLike) -> Path:
        """
        Resolve a user-supplied path against the current directory.

        ``~`` is expanded and ``.``/``..`` segments are normalised; symlinks
        are left alone.
        """
        expanded = os.path.expanduser(str(path))
        if not os.path.isabs(expanded):
            expanded = os.path.join(str(self.current_directory), expanded)
        return Path(os.path.normpath(expanded))

    def navigate_up(self) -> bool:
        """
        Move to the parent directory.

        Returns:
            False (without moving) when already at home, at the filesystem
            root, or outside the home directory
        """
        current = self.current_directory
        parent = current.parent

        if current == self.home_dir or current == parent or not is_within(current, self.home_dir):
            return False

        self.current_directory = parent
        return True

    def change_directory(self, path: PathLike) -> Path:
        target = self.resolve(path)
        if not target.is_dir():
            raise PathNotFound(str(path), kind="Directory")
        self.current_directory = target
        return target

    def __repr__(self) -> str:
        return (
            f"ShellState(username={self._username!r}, home_dir={str(self.home_dir)!r}, "
            f"current_directory={str(self.current_directory)!r})"
        )
