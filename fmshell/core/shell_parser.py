"""
Shell command parser for the file manager REPL

Parses command lines with support for:
- Quoted arguments (single and double quotes, one style nested in the other)
- Backslash escapes for quotes and backslashes
- Flag extraction (--name, --name=value, -n value)

The parser never fails: unterminated quotes and stray escapes are absorbed
into the current token rather than rejected.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple, Union


QUOTE_CHARS = ('"', "'")
ESCAPABLE_CHARS = ('"', "'", '\\')

FlagValue = Union[str, bool]


@dataclass(frozen=True)
class ParsedCommand:
    """Represents a parsed shell command"""
    command: str
    args: Tuple[str, ...] = ()
    raw_line: str = ''


def _split_tokens(line: str) -> List[str]:
    """Single left-to-right scan producing the non-empty tokens of a line"""
    tokens = []
    current = []
    in_quotes = False
    quote_char = ''

    i = 0
    while i < len(line):
        char = line[i]
        prev_char = line[i - 1] if i > 0 else ''

        # A preceding backslash suppresses quote toggling
        if char in QUOTE_CHARS and prev_char != '\\':
            if not in_quotes:
                in_quotes = True
                quote_char = char
            elif char == quote_char:
                in_quotes = False
                quote_char = ''
            else:
                # The other quote style inside quotes is literal
                current.append(char)
            i += 1
            continue

        if char == ' ' and not in_quotes:
            if current:
                tokens.append(''.join(current))
                current = []
            i += 1
            continue

        if char == '\\' and i + 1 < len(line) and line[i + 1] in ESCAPABLE_CHARS:
            current.append(line[i + 1])
            i += 2
            continue

        current.append(char)
        i += 1

    if current:
        tokens.append(''.join(current))

    return tokens


def parse_command_with_quotes(line: str) -> ParsedCommand:
    """
    Parse a command line into command name and arguments

    Args:
        line: Raw input line

    Returns:
        ParsedCommand with the first token as command and the rest as args

    Examples:
        >>> parse_command_with_quotes('cat "my file.txt"').args
        ('my file.txt',)
        >>> parse_command_with_quotes('write file.txt ""').args
        ('file.txt',)
        >>> parse_command_with_quotes('echo \\\\"hello\\\\"').args
        ('"hello"',)
        >>> parse_command_with_quotes('').command
        ''
    """
    tokens = _split_tokens(line)

    if not tokens:
        return ParsedCommand(command='', args=(), raw_line=line)

    return ParsedCommand(command=tokens[0], args=tuple(tokens[1:]), raw_line=line)


def tokenize(line: str) -> List[str]:
    """Parse a line and flatten it into one list of non-empty tokens"""
    parsed = parse_command_with_quotes(line)
    return [token for token in [parsed.command, *parsed.args] if token]


def is_flag(value: str) -> bool:
    """Syntactic flag check: starts with '-' and is longer than one char"""
    return value.startswith('-') and len(value) > 1


def parse_flags(args: List[str]) -> Tuple[Dict[str, FlagValue], List[str]]:
    """
    Separate flags from positional arguments

    Long flags (``--name`` or ``--name=value``) split on the first ``=``, so
    ``--key=a=b`` yields ``{'key': 'a=b'}``. Short flags (``-n``) consume the
    next token as their value unless it is missing or starts with ``-``; a
    value that legitimately starts with a hyphen (a negative number, say) is
    therefore not consumed.

    Args:
        args: Token sequence

    Returns:
        Tuple of (flags mapping, remaining arguments in original order)

    Examples:
        >>> parse_flags(['--level=9', '-o', 'out.gz', 'in.txt'])
        ({'level': '9', 'o': 'out.gz'}, ['in.txt'])
        >>> parse_flags(['--force', '-v'])
        ({'force': True, 'v': True}, [])
    """
    flags: Dict[str, FlagValue] = {}
    remaining: List[str] = []

    i = 0
    while i < len(args):
        arg = args[i]

        if arg.startswith('--'):
            body = arg[2:]
            if '=' in body:
                key, value = body.split('=', 1)
                flags[key] = value
            else:
                flags[body] = True
        elif arg.startswith('-') and len(arg) == 2:
            name = arg[1]
            next_arg = args[i + 1] if i + 1 < len(args) else None
            if next_arg and not next_arg.startswith('-'):
                flags[name] = next_arg
                i += 1
            else:
                flags[name] = True
        else:
            remaining.append(arg)

        i += 1

    return flags, remaining


def escape_string(value: str) -> str:
    """Escape backslashes, quotes and control whitespace for display"""
    return (
        value.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace("'", "\\'")
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('\t', '\\t')
    )


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace into single spaces and trim the ends"""
    return re.sub(r'\s+', ' ', value.strip())
