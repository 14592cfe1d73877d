"""
Global constants for fmshell.

Centralizes names, defaults and magic numbers used across the shell, the
file engine and the command handlers. Import from here instead of
hardcoding values.
"""

APP_NAME = "File Manager Shell"
APP_VERSION = "1.0.0"

DEFAULT_USERNAME = "Anonymous"
PROMPT_CHAR = "> "

# --- Dispatch loop ---

INTERRUPT_THRESHOLD = 1.0    # Seconds between two Ctrl+C presses that exit
POLL_INTERVAL = 0.1          # Wake-up interval while waiting on an operation

# --- Streaming I/O ---

CHUNK_SIZE = 64 * 1024       # Bytes per read; the token is checked per chunk

# --- Hashing ---

HASH_ALGORITHMS = ("sha256", "sha512", "md5", "sha1")
DEFAULT_HASH_ALGORITHM = "sha256"

# --- Compression ---

COMPRESSION_ALGORITHMS = ("brotli", "gzip", "deflate")
DEFAULT_COMPRESSION_ALGORITHM = "brotli"
DEFAULT_COMPRESSION_LEVEL = 6

COMPRESSION = {
    "brotli": {
        "extension": ".br",
        "description": "Brotli - Best compression ratio, slower",
    },
    "gzip": {
        "extension": ".gz",
        "description": "Gzip - Good balance of speed and compression",
    },
    "deflate": {
        "extension": ".zz",
        "description": "Deflate - Fast compression, moderate ratio",
    },
}

# Extension -> algorithm, for decompress without an explicit algorithm
COMPRESSION_EXTENSIONS = {
    ".br": "brotli",
    ".gz": "gzip",
    ".zz": "deflate",
    ".deflate": "deflate",
}

# --- OS info ---

OS_INFO_FLAGS = (
    "--EOL",
    "--cpus",
    "--homedir",
    "--username",
    "--architecture",
    "--platform",
    "--memory",
)

# --- Display ---

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
GREP_LINE_WIDTH = 80         # Longer grep lines are truncated for display
HELP_SYNTAX_WIDTH = 30       # Column width for syntax in help listings

# --- Input validation ---

RESERVED_FILE_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)
