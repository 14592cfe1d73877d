"""
User-facing message templates.

Templates return plain text; the formatter decides the styling and escapes
interpolated values.
"""

from fmshell.core.constants import APP_NAME

OPERATION_CANCELLED = "Operation cancelled."
OPERATION_INTERRUPTED = "Operation interrupted."
EXIT_HINT = "Press Ctrl+C again to exit, or type '.exit' to quit."
EMPTY_DIRECTORY = "Directory is empty."
CANNOT_NAVIGATE_ABOVE_HOME = "Cannot navigate above home directory"
NO_MATCHES = "No matches found."


def welcome(username: str) -> str:
    return f'Welcome, {username}! Type "man" to view available commands.'


def farewell(username: str) -> str:
    return f"Farewell, {username}! Thanks for using {APP_NAME}. Until next time!"


def current_directory(path) -> str:
    return f"Current Directory: {path}"


def confirm_execute(command_line: str) -> str:
    return f'Are you sure you want to execute "{command_line}"?'


def file_created(path) -> str:
    return f"File created: {path}"


def directory_created(path) -> str:
    return f"Directory created: {path}"


def file_deleted(path) -> str:
    return f"File deleted: {path}"


def directory_deleted(path) -> str:
    return f"Directory deleted: {path}"


def file_renamed(old_name, new_name) -> str:
    return f"Renamed: {old_name} -> {new_name}"


def file_copied(source, destination) -> str:
    return f"Copied: {source} -> {destination}"


def file_moved(source, destination) -> str:
    return f"Moved: {source} -> {destination}"


def compressed(source, destination) -> str:
    return f"Compressed: {source} -> {destination}"


def decompressed(source, destination) -> str:
    return f"Decompressed: {source} -> {destination}"


def searching(pattern: str) -> str:
    return f'Searching for "{pattern}"...'


def searching_in(pattern: str, path: str) -> str:
    return f'Searching for "{pattern}" in {path}...'
