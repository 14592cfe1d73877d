"""
Input validation utilities for file and directory names.

Names are checked against the strictest common rules (Windows) so that
anything created from the shell stays portable.
"""

import re

from fmshell.core.constants import RESERVED_FILE_NAMES
from fmshell.core.errors import InvalidName

ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
ONLY_DOTS_OR_SPACES = re.compile(r'^[\s.]+$')


def is_valid_file_name(name: str) -> bool:
    """
    Check whether a single path component is a valid, portable name.

    Args:
        name: Candidate file or directory name (no separators)

    Returns:
        False for empty names, names with illegal characters, reserved
        device names (CON, NUL, COM1, ...), and names made only of dots or
        spaces; True otherwise
    """
    if not name:
        return False

    if ILLEGAL_CHARS.search(name):
        return False

    # Reserved names apply regardless of extension (e.g. "nul.txt")
    if name.split('.')[0].upper() in RESERVED_FILE_NAMES:
        return False

    if ONLY_DOTS_OR_SPACES.match(name):
        return False

    return True


def validate_file_name(name: str, kind: str = "file") -> str:
    """
    Validate a file or directory name.

    Raises:
        InvalidName: If validation fails
    """
    if not is_valid_file_name(name):
        raise InvalidName(name, kind)
    return name
