"""
File engine for the shell.

All paths resolve against the session's current directory. Operations whose
cost grows with input size or directory breadth take an optional
CancellationToken, check it before starting and again at every chunk or
directory entry, and raise OperationAborted once it is aborted. Operations
that write a destination file remove the partial output before any failure,
aborts included, reaches the caller.
"""

import errno
import getpass
import hashlib
import json
import logging
import os
import platform
import re
import sys
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional, Pattern, Tuple

import brotli
import psutil

from fmshell.core.cancellation import CancellationToken, check_cancelled
from fmshell.core.constants import (
    CHUNK_SIZE,
    COMPRESSION,
    COMPRESSION_ALGORITHMS,
    COMPRESSION_EXTENSIONS,
    DEFAULT_COMPRESSION_ALGORITHM,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_HASH_ALGORITHM,
    HASH_ALGORITHMS,
    SIZE_UNITS,
)
from fmshell.core.errors import (
    FileOperationError,
    InvalidOSInfoFlag,
    PathExists,
    PathNotFound,
    UnsupportedAlgorithm,
)
from fmshell.core.input_validation import validate_file_name
from fmshell.core.session import ShellState

logger = logging.getLogger(__name__)

Transform = Callable[[bytes], bytes]
Finisher = Callable[[], bytes]


@dataclass
class DirectoryEntry:
    name: str
    type: str  # "file" or "directory"
    size: str
    modified: str


@dataclass
class FileInfo:
    path: Path
    name: str
    size: int
    is_file: bool
    is_directory: bool
    created: datetime
    modified: datetime
    permissions: str


@dataclass
class GrepMatch:
    line: int
    content: str


@dataclass
class SearchResult:
    path: Path
    name: str
    type: str
    matches: List[GrepMatch] = field(default_factory=list)


@dataclass
class HashResult:
    algorithm: str
    hash: str
    file_path: Path


@dataclass
class CompressionResult:
    algorithm: str
    source_path: Path
    dest_path: Path
    original_size: int
    compressed_size: int

    @property
    def ratio(self) -> float:
        """Percentage of the original size saved"""
        if not self.original_size:
            return 0.0
        return (1 - self.compressed_size / self.original_size) * 100


def format_size(num_bytes: float) -> str:
    """Convert bytes to human-readable format (no decimals for bytes)"""
    size = float(num_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {SIZE_UNITS[0]}"
    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def glob_to_regex(pattern: str) -> Pattern:
    """
    Convert a * / ? wildcard pattern to a case-insensitive regex.

    The result is unanchored: it matches anywhere in a name.
    """
    parts = []
    for char in pattern:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile(''.join(parts), re.IGNORECASE)


def create_compressor(algorithm: str, level: int = DEFAULT_COMPRESSION_LEVEL) -> Tuple[Transform, Finisher]:
    """Return (process, finish) callables for a streaming compressor"""
    if algorithm == 'brotli':
        compressor = brotli.Compressor(quality=max(0, min(level, 11)))
        return compressor.process, compressor.finish
    if algorithm == 'gzip':
        compressor = zlib.compressobj(max(0, min(level, 9)), zlib.DEFLATED, 31)
        return compressor.compress, compressor.flush
    if algorithm == 'deflate':
        compressor = zlib.compressobj(max(0, min(level, 9)), zlib.DEFLATED, 15)
        return compressor.compress, compressor.flush
    raise UnsupportedAlgorithm(algorithm, COMPRESSION_ALGORITHMS)


def create_decompressor(algorithm: str) -> Tuple[Transform, Finisher]:
    """Return (process, finish) callables for a streaming decompressor"""
    if algorithm == 'brotli':
        decompressor = brotli.Decompressor()

        def finish_brotli() -> bytes:
            if not decompressor.is_finished():
                raise brotli.error("incomplete or truncated stream")
            return b''

        return decompressor.process, finish_brotli
    if algorithm in ('gzip', 'deflate'):
        decompressor = zlib.decompressobj(31 if algorithm == 'gzip' else 15)

        def finish() -> bytes:
            tail = decompressor.flush()
            if not decompressor.eof:
                raise zlib.error("incomplete or truncated stream")
            return tail

        return decompressor.decompress, finish
    raise UnsupportedAlgorithm(algorithm, COMPRESSION_ALGORITHMS)


class FileManager:
    """File operations bound to a shell session"""

    def __init__(
        self,
        state: ShellState,
        chunk_size: int = CHUNK_SIZE,
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    ):
        self.state = state
        self.chunk_size = chunk_size
        self.compression_level = compression_level

    # --- Session / navigation ---

    @property
    def username(self) -> str:
        return self.state.username

    @property
    def home_dir(self) -> Path:
        return self.state.home_dir

    @property
    def current_dir(self) -> Path:
        return self.state.current_directory

    def pwd(self) -> Path:
        return self.state.current_directory

    def navigate_up(self) -> bool:
        return self.state.navigate_up()

    def change_directory(self, target_path: str) -> Path:
        return self.state.change_directory(target_path)

    def list_directory(self) -> List[DirectoryEntry]:
        """List the current directory, directories first, then files"""
        directory = self.state.current_directory
        entries = []

        with os.scandir(directory) as it:
            for entry in it:
                # lstat: show the link itself, not its target
                stats = entry.stat(follow_symlinks=False)
                is_dir = entry.is_dir(follow_symlinks=False)
                entries.append(DirectoryEntry(
                    name=entry.name,
                    type="directory" if is_dir else "file",
                    size=format_size(stats.st_size),
                    modified=datetime.fromtimestamp(stats.st_mtime).strftime('%Y-%m-%d %H:%M'),
                ))

        entries.sort(key=lambda e: (e.type != "directory", e.name.lower(), e.name))
        return entries

    # --- Streaming helpers ---

    def _read_chunks(self, stream: BinaryIO, token: Optional[CancellationToken]) -> Iterator[bytes]:
        while True:
            check_cancelled(token)
            chunk = stream.read(self.chunk_size)
            if not chunk:
                return
            yield chunk

    def _remove_partial(self, path: Path) -> None:
        try:
            path.unlink()
            logger.debug("Removed partial output %s", path)
        except FileNotFoundError:
            pass

    def _stream_to_file(
        self,
        source: Path,
        destination: Path,
        token: Optional[CancellationToken],
        transform: Optional[Transform] = None,
        finish: Optional[Finisher] = None,
    ) -> None:
        """Copy source to destination chunk by chunk through an optional codec"""
        with open(source, 'rb') as src, open(destination, 'wb') as out:
            # Only output this call opened is removed on failure
            try:
                for chunk in self._read_chunks(src, token):
                    data = transform(chunk) if transform else chunk
                    if data:
                        out.write(data)
                if finish is not None:
                    out.write(finish())
            except BaseException:
                out.close()
                self._remove_partial(destination)
                raise

    def _require_file(self, path_arg: str) -> Path:
        resolved = self.state.resolve(path_arg)
        if not resolved.is_file():
            raise PathNotFound(path_arg)
        return resolved

    # --- File CRUD ---

    def read_file(self, file_path: str, token: Optional[CancellationToken] = None) -> str:
        check_cancelled(token)
        resolved = self._require_file(file_path)

        chunks = []
        with open(resolved, 'rb') as f:
            for chunk in self._read_chunks(f, token):
                chunks.append(chunk)

        return b''.join(chunks).decode('utf-8', errors='replace')

    def create_file(self, file_name: str) -> Path:
        validate_file_name(file_name)
        file_path = self.state.current_directory / file_name

        if os.path.lexists(file_path):
            raise PathExists(file_name)

        file_path.touch(exist_ok=False)
        return file_path

    def write_file(self, file_name: str, content: str) -> Path:
        """Create or overwrite a file in the current directory"""
        validate_file_name(file_name)
        file_path = self.state.current_directory / file_name
        file_path.write_text(content, encoding='utf-8')
        return file_path

    def create_directory(self, dir_name: str) -> Path:
        validate_file_name(dir_name, kind="directory")
        dir_path = self.state.current_directory / dir_name

        if os.path.lexists(dir_path):
            raise PathExists(dir_name, kind="Directory")

        dir_path.mkdir(parents=False)
        return dir_path

    def rename_file(self, old_path: str, new_file_name: str) -> Path:
        """Rename a file, keeping it in the same directory"""
        validate_file_name(new_file_name)
        source = self._require_file(old_path)
        destination = source.parent / new_file_name

        if os.path.lexists(destination):
            raise PathExists(new_file_name)

        source.rename(destination)
        return destination

    def copy_file(self, source_path: str, dest_dir_path: str,
                  token: Optional[CancellationToken] = None) -> Path:
        """
        Copy a file into a directory, keeping its name.

        Args:
            source_path: File to copy
            dest_dir_path: Existing destination directory
            token: Cancellation token checked before every chunk

        Returns:
            Path of the new file

        Raises:
            PathNotFound: Missing source file or destination directory
            PathExists: Destination file already exists
            OperationAborted: Token aborted; no destination file is left behind
        """
        check_cancelled(token)
        source = self._require_file(source_path)
        dest_dir = self.state.resolve(dest_dir_path)

        if not dest_dir.is_dir():
            raise PathNotFound(dest_dir_path, kind="Directory")

        destination = dest_dir / source.name
        if os.path.lexists(destination):
            raise PathExists(str(destination))

        self._stream_to_file(source, destination, token)
        return destination

    def move_file(self, source_path: str, dest_dir_path: str,
                  token: Optional[CancellationToken] = None) -> Path:
        """Move = copy + delete original"""
        destination = self.copy_file(source_path, dest_dir_path, token)
        self.delete_file(source_path)
        return destination

    def delete_file(self, file_path: str) -> None:
        self._require_file(file_path).unlink()

    def delete_directory(self, dir_path: str) -> None:
        """Remove an empty directory"""
        resolved = self.state.resolve(dir_path)
        if not resolved.is_dir():
            raise PathNotFound(dir_path, kind="Directory")

        try:
            resolved.rmdir()
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                raise FileOperationError(f"Directory not empty: {dir_path}") from e
            raise

    def get_file_info(self, file_path: str) -> FileInfo:
        resolved = self.state.resolve(file_path)
        try:
            stats = resolved.stat()
        except FileNotFoundError:
            raise PathNotFound(file_path) from None

        created = getattr(stats, 'st_birthtime', stats.st_ctime)
        return FileInfo(
            path=resolved,
            name=resolved.name,
            size=stats.st_size,
            is_file=resolved.is_file(),
            is_directory=resolved.is_dir(),
            created=datetime.fromtimestamp(created),
            modified=datetime.fromtimestamp(stats.st_mtime),
            permissions=oct(stats.st_mode)[-3:],
        )

    # --- Search ---

    def _list_entries(self, directory: Path) -> List[os.DirEntry]:
        """Directory entries sorted by name; unreadable directories yield none"""
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return []

    def find_files(self, pattern: str, search_path: Optional[str] = None,
                   token: Optional[CancellationToken] = None) -> List[SearchResult]:
        """
        Find files and directories whose names match a wildcard pattern.

        The walk is depth-first: each entry is tested, then descended into
        if it is a directory. Symlinked directories are not followed.
        """
        check_cancelled(token)
        base = self.state.resolve(search_path) if search_path else self.state.current_directory
        if not base.is_dir():
            raise PathNotFound(search_path or str(base), kind="Directory")

        regex = glob_to_regex(pattern)
        results: List[SearchResult] = []
        self._search_recursive(base, regex, results, token)
        return results

    def _search_recursive(self, directory: Path, pattern: Pattern,
                          results: List[SearchResult], token: Optional[CancellationToken]) -> None:
        check_cancelled(token)

        for entry in self._list_entries(directory):
            check_cancelled(token)
            is_dir = entry.is_dir(follow_symlinks=False)

            if pattern.search(entry.name):
                results.append(SearchResult(
                    path=Path(entry.path),
                    name=entry.name,
                    type="directory" if is_dir else "file",
                ))

            if is_dir:
                self._search_recursive(Path(entry.path), pattern, results, token)

    def grep(self, search_pattern: str, path: str,
             token: Optional[CancellationToken] = None) -> List[SearchResult]:
        """
        Search file contents for a case-insensitive regular expression.

        Args:
            search_pattern: Regular expression
            path: File, or directory searched recursively
            token: Cancellation token checked per directory entry and per line

        Returns:
            One SearchResult per file with at least one matching line
        """
        check_cancelled(token)
        try:
            regex = re.compile(search_pattern, re.IGNORECASE)
        except re.error as e:
            raise FileOperationError(f"Invalid search pattern: {search_pattern} ({e})") from e

        target = self.state.resolve(path)
        results: List[SearchResult] = []

        if target.is_file():
            matches = self._grep_file(target, regex, token)
            if matches:
                results.append(SearchResult(path=target, name=target.name, type="file", matches=matches))
        elif target.is_dir():
            self._grep_recursive(target, regex, results, token)
        else:
            raise PathNotFound(path)

        return results

    def _grep_file(self, file_path: Path, pattern: Pattern,
                   token: Optional[CancellationToken]) -> List[GrepMatch]:
        matches = []
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                for number, line in enumerate(f, 1):
                    check_cancelled(token)
                    if pattern.search(line.rstrip('\r\n')):
                        matches.append(GrepMatch(line=number, content=line.strip()))
        except (OSError, UnicodeDecodeError) as e:
            # Binary or unreadable files are skipped
            logger.debug("Skipping %s: %s", file_path, e)
            return []
        return matches

    def _grep_recursive(self, directory: Path, pattern: Pattern,
                        results: List[SearchResult], token: Optional[CancellationToken]) -> None:
        check_cancelled(token)

        for entry in self._list_entries(directory):
            check_cancelled(token)
            entry_path = Path(entry.path)

            if entry.is_file(follow_symlinks=False):
                matches = self._grep_file(entry_path, pattern, token)
                if matches:
                    results.append(SearchResult(path=entry_path, name=entry.name, type="file", matches=matches))
            elif entry.is_dir(follow_symlinks=False):
                self._grep_recursive(entry_path, pattern, results, token)

    # --- Hashing ---

    def calculate_hash(self, file_path: str, algorithm: str = DEFAULT_HASH_ALGORITHM,
                       token: Optional[CancellationToken] = None) -> HashResult:
        algorithm = algorithm.lower()
        if algorithm not in HASH_ALGORITHMS:
            raise UnsupportedAlgorithm(algorithm, HASH_ALGORITHMS)

        check_cancelled(token)
        resolved = self._require_file(file_path)

        digest = hashlib.new(algorithm)
        with open(resolved, 'rb') as f:
            for chunk in self._read_chunks(f, token):
                digest.update(chunk)

        return HashResult(algorithm=algorithm, hash=digest.hexdigest(), file_path=resolved)

    # --- Compression ---

    def _validate_compression_algorithm(self, algorithm: str) -> str:
        algorithm = (algorithm or DEFAULT_COMPRESSION_ALGORITHM).lower()
        if algorithm not in COMPRESSION_ALGORITHMS:
            raise UnsupportedAlgorithm(algorithm, COMPRESSION_ALGORITHMS)
        return algorithm

    def _codec_paths(self, source_path: str, dest_path: str) -> Tuple[Path, Path]:
        source = self._require_file(source_path)
        destination = self.state.resolve(dest_path)
        if destination == source:
            raise FileOperationError("Source and destination must be different files")
        return source, destination

    def compress_file(self, source_path: str, dest_path: str,
                      algorithm: str = DEFAULT_COMPRESSION_ALGORITHM,
                      token: Optional[CancellationToken] = None) -> CompressionResult:
        """
        Compress a file with brotli, gzip or deflate.

        An existing destination is overwritten. On abort or failure the
        destination is removed.
        """
        algorithm = self._validate_compression_algorithm(algorithm)
        check_cancelled(token)
        source, destination = self._codec_paths(source_path, dest_path)

        original_size = source.stat().st_size
        process, finish = create_compressor(algorithm, self.compression_level)
        self._stream_to_file(source, destination, token, process, finish)

        return CompressionResult(
            algorithm=algorithm,
            source_path=source,
            dest_path=destination,
            original_size=original_size,
            compressed_size=destination.stat().st_size,
        )

    def decompress_file(self, source_path: str, dest_path: str,
                        algorithm: str = DEFAULT_COMPRESSION_ALGORITHM,
                        token: Optional[CancellationToken] = None) -> Path:
        algorithm = self._validate_compression_algorithm(algorithm)
        check_cancelled(token)
        source, destination = self._codec_paths(source_path, dest_path)

        process, finish = create_decompressor(algorithm)
        try:
            self._stream_to_file(source, destination, token, process, finish)
        except (zlib.error, brotli.error) as e:
            raise FileOperationError(f"Invalid {algorithm} data in {source_path}: {e}") from e

        return destination

    def detect_compression_algorithm(self, file_path: str) -> Optional[str]:
        """Detect algorithm based on file extension"""
        return COMPRESSION_EXTENSIONS.get(Path(file_path).suffix.lower())

    def get_compression_extension(self, algorithm: str) -> str:
        info = COMPRESSION.get(algorithm)
        return info["extension"] if info else ".compressed"

    # --- OS info ---

    def get_os_info(self, flag: str) -> str:
        if flag == "--EOL":
            # json.dumps shows the actual escape sequence
            return f"EOL character: {json.dumps(os.linesep)}"

        if flag == "--cpus":
            count = psutil.cpu_count(logical=True) or os.cpu_count() or 0
            model = _cpu_model()
            frequencies = _cpu_frequencies()
            lines = [f"Total CPUs: {count}"]
            for index in range(count):
                mhz = frequencies[index] if index < len(frequencies) else (frequencies[0] if frequencies else 0)
                if mhz:
                    lines.append(f"CPU {index + 1}: {model} ({mhz / 1000:.2f} GHz)")
                else:
                    lines.append(f"CPU {index + 1}: {model}")
            return '\n'.join(lines)

        if flag == "--homedir":
            return f"Home directory: {Path.home()}"

        if flag == "--username":
            return f"System Username: {_system_username()}"

        if flag == "--architecture":
            return f"CPU Architecture: {platform.machine() or 'unknown'}"

        if flag == "--platform":
            return f"Platform: {sys.platform}"

        if flag == "--memory":
            memory = psutil.virtual_memory()
            return f"Total Memory: {format_size(memory.total)}\nFree Memory: {format_size(memory.available)}"

        raise InvalidOSInfoFlag(flag)


def _cpu_model() -> str:
    cpuinfo = Path('/proc/cpuinfo')
    if cpuinfo.exists():
        try:
            for line in cpuinfo.read_text(encoding='utf-8', errors='replace').splitlines():
                if line.lower().startswith('model name'):
                    return line.split(':', 1)[1].strip()
        except OSError as e:
            logger.debug("Could not read %s: %s", cpuinfo, e)
    return platform.processor() or platform.machine() or "Unknown"


def _cpu_frequencies() -> List[float]:
    """Per-CPU current frequency in MHz; empty when the platform hides it"""
    cpu_freq = getattr(psutil, 'cpu_freq', None)
    if cpu_freq is None:
        return []
    try:
        frequencies = cpu_freq(percpu=True) or []
    except (NotImplementedError, OSError) as e:
        logger.debug("CPU frequency unavailable: %s", e)
        return []
    return [freq.current for freq in frequencies]


def _system_username() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return os.environ.get('USER') or os.environ.get('USERNAME') or "unknown"
