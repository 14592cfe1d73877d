"""
Error types raised by the registry, the file engine and command handlers.

Every error the user should see derives from ShellError. The dispatch loop
prints them as ``Error: <message>``, except OperationAborted, which marks a
user-initiated cancellation and is suppressed.
"""

from typing import Optional


class ShellError(Exception):
    """Base class for errors reported to the shell user."""
    pass


class UnknownCommand(ShellError):
    """Raised when a command name cannot be resolved."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Unknown command: {name}")


class InvalidCommand(UnknownCommand):
    """Raised by the dispatch loop for input naming no registered command."""

    def __init__(self, name: str):
        super().__init__(name, "Invalid command. Type 'man' for available commands.")


class RegistryIntegrityError(UnknownCommand):
    """Raised when an alias is registered for a command that does not exist."""

    def __init__(self, name: str):
        super().__init__(name, f"Cannot create alias for non-existent command: {name}")


class MissingArgument(ShellError):
    """Raised by a handler when a required argument is absent."""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"Missing required argument: {argument}")


class OperationAborted(ShellError):
    """Raised when work observes that its cancellation token was aborted."""

    def __init__(self, message: str = "Operation aborted"):
        super().__init__(message)


class FileOperationError(ShellError):
    """Base class for file engine failures."""
    pass


class PathNotFound(FileOperationError):
    def __init__(self, path: str, kind: str = "File"):
        self.path = path
        super().__init__(f"{kind} not found: {path}")


class PathExists(FileOperationError):
    def __init__(self, path: str, kind: str = "File"):
        self.path = path
        super().__init__(f"{kind} already exists: {path}")


class InvalidName(FileOperationError):
    def __init__(self, name: str, kind: str = "file"):
        self.name = name
        super().__init__(f"Invalid {kind} name: {name}")


class UnsupportedAlgorithm(FileOperationError):
    def __init__(self, algorithm: str, supported):
        self.algorithm = algorithm
        super().__init__(
            f"Invalid algorithm: {algorithm}. Supported: {', '.join(supported)}"
        )


class InvalidOSInfoFlag(FileOperationError):
    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"Invalid OS info parameter: {flag}")


def describe_error(exc: BaseException) -> str:
    """
    Render an exception as a one-line message for the user.

    OSError messages drop the ``[Errno N]`` prefix and keep the offending
    file name when there is one.
    """
    if isinstance(exc, OSError) and exc.strerror:
        if exc.filename:
            return f"{exc.strerror}: {exc.filename}"
        return exc.strerror
    message = str(exc)
    return message or exc.__class__.__name__
