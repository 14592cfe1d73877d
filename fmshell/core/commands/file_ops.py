"""
File operation command handlers

Implements: cat, add, touch, write, mkdir, rn, cp, move, rm, rmdir, info
"""

from typing import List, Optional

from rich.markup import escape

from fmshell.core import messages
from fmshell.core.cancellation import CancellationToken
from fmshell.core.command_registry import CommandCategory, CommandDoc, CommandRegistry, CommandResult
from fmshell.core.errors import MissingArgument
from fmshell.core.file_manager import FileManager
from fmshell.core.formatters import OutputFormatter

INFO_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _require(args: List[str], index: int, name: str) -> str:
    if len(args) <= index or not args[index]:
        raise MissingArgument(name)
    return args[index]


class FileOperationCommands:
    """Handler for file CRUD commands"""

    def __init__(self, file_manager: FileManager, formatter: OutputFormatter):
        self.file_manager = file_manager
        self.formatter = formatter

    def cmd_cat(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Display file content

        Usage:
            cat <file>      - Print the whole file between markers
        """
        file_path = _require(args, 0, "file path")

        self.formatter.print(f"[dim]--- {escape(file_path)} ---[/dim]")
        content = self.file_manager.read_file(file_path, token)
        self.formatter.print_text(content)
        self.formatter.print("[dim]--- end ---[/dim]")
        return CommandResult(success=True, data=content)

    def cmd_add(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """Create an empty file in the current directory"""
        file_name = _require(args, 0, "file name")
        file_path = self.file_manager.create_file(file_name)
        self.formatter.format_success(messages.file_created(file_path))
        return CommandResult(success=True, data=file_path)

    def cmd_write(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Create or overwrite a file

        Usage:
            write <file> <content...>   - Remaining arguments are joined by spaces
        """
        file_name = _require(args, 0, "file name")
        if len(args) < 2:
            raise MissingArgument("content")

        content = ' '.join(args[1:])
        file_path = self.file_manager.write_file(file_name, content)
        self.formatter.format_success(messages.file_created(file_path))
        return CommandResult(success=True, data=file_path)

    def cmd_mkdir(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        dir_name = _require(args, 0, "directory name")
        dir_path = self.file_manager.create_directory(dir_name)
        self.formatter.format_success(messages.directory_created(dir_path))
        return CommandResult(success=True, data=dir_path)

    def cmd_rn(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        file_path = _require(args, 0, "file path")
        new_name = _require(args, 1, "new file name")

        new_path = self.file_manager.rename_file(file_path, new_name)
        self.formatter.format_success(messages.file_renamed(file_path, new_name))
        return CommandResult(success=True, data=new_path)

    def cmd_cp(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Copy a file into a directory

        Usage:
            cp <file> <directory>   - Streams the file; Ctrl+C removes the partial copy
        """
        source = _require(args, 0, "source path")
        destination = _require(args, 1, "destination path")

        dest_path = self.file_manager.copy_file(source, destination, token)
        self.formatter.format_success(messages.file_copied(source, dest_path))
        return CommandResult(success=True, data=dest_path)

    def cmd_move(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        source = _require(args, 0, "source path")
        destination = _require(args, 1, "destination path")

        dest_path = self.file_manager.move_file(source, destination, token)
        self.formatter.format_success(messages.file_moved(source, dest_path))
        return CommandResult(success=True, data=dest_path)

    def cmd_rm(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        file_path = _require(args, 0, "file path")
        self.file_manager.delete_file(file_path)
        self.formatter.format_success(messages.file_deleted(file_path))
        return CommandResult(success=True)

    def cmd_rmdir(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        dir_path = _require(args, 0, "directory path")
        self.file_manager.delete_directory(dir_path)
        self.formatter.format_success(messages.directory_deleted(dir_path))
        return CommandResult(success=True)

    def cmd_info(self, args: List[str], token: Optional[CancellationToken] = None) -> CommandResult:
        """
        Show file metadata

        Usage:
            info <path>     - Path, name, type, size, dates and permissions
        """
        file_path = _require(args, 0, "file path")
        info = self.file_manager.get_file_info(file_path)

        rows = [
            ("Path:", info.path),
            ("Name:", info.name),
            ("Type:", "Directory" if info.is_directory else "File"),
            ("Size:", f"{info.size} bytes"),
            ("Created:", info.created.strftime(INFO_DATE_FORMAT)),
            ("Modified:", info.modified.strftime(INFO_DATE_FORMAT)),
            ("Permissions:", info.permissions),
        ]

        self.formatter.print()
        self.formatter.print("[bold cyan]=== File Information ===[/bold cyan]")
        for label, value in rows:
            self.formatter.print(f"[bold]{label.ljust(13)}[/bold]{escape(str(value))}")
        self.formatter.print("[bold cyan]========================[/bold cyan]")
        self.formatter.print()
        return CommandResult(success=True, data=info)


def register_file_operation_commands(registry: CommandRegistry, file_manager: FileManager,
                                     formatter: OutputFormatter) -> FileOperationCommands:
    """Register file operation commands; rm and rmdir require confirmation"""
    ops = FileOperationCommands(file_manager, formatter)
    category = CommandCategory.FILE_OPERATIONS

    registry.register("cat", ops.cmd_cat, CommandDoc(
        description="Read and display a file's content",
        syntax="cat <path_to_file>",
        example="cat example.txt",
        details="Outputs the contents of a file to the console, reading it in chunks.",
        category=category,
    ))
    registry.register_alias("type", "cat")

    registry.register("add", ops.cmd_add, CommandDoc(
        description="Create an empty file",
        syntax="add <new_file_name>",
        example="add newfile.txt",
        details="Creates a new, empty file in your current working directory "
                "with the specified name.",
        category=category,
    ))

    # Separate entry so it gets its own manual page
    registry.register("touch", ops.cmd_add, CommandDoc(
        description="Create an empty file (alias for add)",
        syntax="touch <file_name>",
        example="touch newfile.txt",
        details="Creates a new, empty file in your current working directory. "
                "This is an alias for the 'add' command.",
        category=category,
    ))

    registry.register("write", ops.cmd_write, CommandDoc(
        description="Create or overwrite a file with content",
        syntax="write <file_name> <content>",
        example='write notes.txt "Hello, World!"',
        details="Creates a new file with the specified content, or overwrites "
                "an existing file. Content should be quoted if it contains spaces.",
        category=category,
    ))

    registry.register("mkdir", ops.cmd_mkdir, CommandDoc(
        description="Create a new directory",
        syntax="mkdir <new_directory_name>",
        example="mkdir new_folder",
        details="Creates a new directory inside the current working directory "
                "with the given name.",
        category=category,
    ))
    registry.register_alias("md", "mkdir")

    registry.register("rn", ops.cmd_rn, CommandDoc(
        description="Rename an existing file",
        syntax="rn <path_to_file> <new_filename>",
        example="rn old.txt new.txt",
        details="Renames a file without altering its content. "
                "The new name is applied in the same location.",
        category=category,
    ))
    registry.register_alias("rename", "rn")
    registry.register_alias("mv", "rn")

    registry.register("cp", ops.cmd_cp, CommandDoc(
        description="Copy a file to a new location",
        syntax="cp <path_to_file> <path_to_new_directory>",
        example="cp file.txt backups/",
        details="Copies a file into the specified directory, streaming it in chunks. "
                "An interrupted copy leaves no partial file behind.",
        category=category,
    ))
    registry.register_alias("copy", "cp")

    registry.register("move", ops.cmd_move, CommandDoc(
        description="Move a file to a new location",
        syntax="move <path_to_file> <path_to_new_directory>",
        example="move file.txt archive/",
        details="Transfers a file to the new directory by copying it first, "
                "then deleting it from the original location.",
        category=category,
    ))

    registry.register("rm", ops.cmd_rm, CommandDoc(
        description="Delete a file",
        syntax="rm <path_to_file>",
        example="rm file.txt",
        details="Removes the specified file permanently from the file system.",
        category=category,
    ), requires_confirmation=True)
    registry.register_alias("del", "rm")
    registry.register_alias("delete", "rm")

    registry.register("rmdir", ops.cmd_rmdir, CommandDoc(
        description="Delete an empty directory",
        syntax="rmdir <path_to_directory>",
        example="rmdir empty_folder",
        details="Removes the specified directory. The directory must be empty.",
        category=category,
    ), requires_confirmation=True)
    registry.register_alias("rd", "rmdir")

    registry.register("info", ops.cmd_info, CommandDoc(
        description="Display detailed file information",
        syntax="info <path_to_file>",
        example="info document.pdf",
        details="Shows detailed information about a file including size, "
                "creation date, modification date, and permissions.",
        category=category,
    ))
    registry.register_alias("stat", "info")

    return ops
