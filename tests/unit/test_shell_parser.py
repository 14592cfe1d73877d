"""
Unit tests for shell parser

Tests the parser functions for:
- Quote-aware tokenization
- Escape sequences
- Flag extraction
- Display helpers
"""

from dataclasses import FrozenInstanceError

import pytest

from fmshell.core.shell_parser import (
    ParsedCommand,
    escape_string,
    is_flag,
    normalize_whitespace,
    parse_command_with_quotes,
    parse_flags,
    tokenize,
)


class TestParseCommandWithQuotes:
    """Test parse_command_with_quotes"""

    @pytest.mark.unit
    def test_double_quoted_argument(self):
        """Test quoted argument keeps its spaces"""
        result = parse_command_with_quotes('cat "my file.txt"')
        assert result.command == 'cat'
        assert result.args == ('my file.txt',)

    @pytest.mark.unit
    def test_empty_quoted_argument_is_dropped(self):
        """Test only non-empty tokens are flushed"""
        result = parse_command_with_quotes('write file.txt ""')
        assert result.command == 'write'
        assert result.args == ('file.txt',)

    @pytest.mark.unit
    def test_escaped_quotes_are_literal(self):
        """Test backslash-quote produces a literal quote"""
        result = parse_command_with_quotes('echo \\"hello\\"')
        assert result.command == 'echo'
        assert result.args == ('"hello"',)

    @pytest.mark.unit
    def test_empty_input(self):
        result = parse_command_with_quotes('')
        assert result.command == ''
        assert result.args == ()

    @pytest.mark.unit
    def test_whitespace_only_input(self):
        result = parse_command_with_quotes('    ')
        assert result.command == ''
        assert result.args == ()

    @pytest.mark.unit
    def test_simple_command(self):
        result = parse_command_with_quotes('cp a.txt backups')
        assert result == ParsedCommand(command='cp', args=('a.txt', 'backups'), raw_line='cp a.txt backups')

    @pytest.mark.unit
    def test_parsed_command_is_immutable(self):
        result = parse_command_with_quotes('rm a.txt')

        with pytest.raises(AttributeError):
            result.args.append('b.txt')
        with pytest.raises(FrozenInstanceError):
            result.args = ('b.txt',)
        assert result.args == ('a.txt',)

    @pytest.mark.unit
    def test_repeated_spaces_separate_once(self):
        result = parse_command_with_quotes('cp   a.txt    b')
        assert result.args == ('a.txt', 'b')

    @pytest.mark.unit
    def test_single_quote_inside_double_quotes(self):
        """Test the other quote style is literal inside quotes"""
        result = parse_command_with_quotes('write f.txt "it\'s fine"')
        assert result.args == ('f.txt', "it's fine")

    @pytest.mark.unit
    def test_double_quote_inside_single_quotes(self):
        result = parse_command_with_quotes("write f.txt 'say \"hi\" now'")
        assert result.args == ('f.txt', 'say "hi" now')

    @pytest.mark.unit
    def test_quotes_join_adjacent_text(self):
        """Test quoting only toggles; it does not split tokens"""
        result = parse_command_with_quotes('cat pre"fix name"post')
        assert result.args == ('prefix namepost',)

    @pytest.mark.unit
    def test_unterminated_quote_absorbs_rest_of_line(self):
        """Test unterminated quote is not an error"""
        result = parse_command_with_quotes('cat "my file.txt  and more')
        assert result.args == ('my file.txt  and more',)

    @pytest.mark.unit
    def test_escaped_backslash(self):
        result = parse_command_with_quotes('echo a\\\\b')
        assert result.args == ('a\\b',)

    @pytest.mark.unit
    def test_backslash_before_other_char_is_literal(self):
        result = parse_command_with_quotes('cd C:\\Users')
        assert result.args == ('C:\\Users',)

    @pytest.mark.unit
    def test_trailing_backslash_is_literal(self):
        result = parse_command_with_quotes('echo end\\')
        assert result.args == ('end\\',)

    @pytest.mark.unit
    def test_escaped_quote_inside_quotes(self):
        result = parse_command_with_quotes('write f.txt "say \\"hi\\" now"')
        assert result.args == ('f.txt', 'say "hi" now')

    @pytest.mark.unit
    def test_tab_is_not_a_separator(self):
        result = parse_command_with_quotes('a\tb c')
        assert result.command == 'a\tb'
        assert result.args == ('c',)

    @pytest.mark.unit
    @pytest.mark.parametrize('line', [
        '"', "'", '\\', '\\"', '"\'"\'', 'a "b \'c', '\\\\\\', '" "', "''''", 'x\\ y',
    ])
    def test_never_raises_and_yields_no_empty_tokens(self, line):
        """Test the parser absorbs any malformed input"""
        result = parse_command_with_quotes(line)
        assert isinstance(result.command, str)
        assert all(arg for arg in result.args)
        assert all(token for token in tokenize(line))

    @pytest.mark.unit
    @pytest.mark.parametrize('line', [
        'ls',
        'cp a.txt backups',
        'grep  TODO   ./src',
        'os --cpus --memory',
    ])
    def test_unquoted_input_reconstructs(self, line):
        """Test command + args re-joined by spaces is an equivalent invocation"""
        result = parse_command_with_quotes(line)
        rebuilt = ' '.join([result.command, *result.args])
        assert parse_command_with_quotes(rebuilt).args == result.args
        assert rebuilt == ' '.join(line.split())


class TestTokenize:
    """Test tokenize"""

    @pytest.mark.unit
    def test_includes_command(self):
        assert tokenize('cp "a b" c') == ['cp', 'a b', 'c']

    @pytest.mark.unit
    def test_empty_input(self):
        assert tokenize('') == []


class TestFlags:
    """Test is_flag and parse_flags"""

    @pytest.mark.unit
    @pytest.mark.parametrize('value,expected', [
        ('-', False),
        ('--', True),
        ('-123', True),
        ('-v', True),
        ('--cpus', True),
        ('file.txt', False),
        ('', False),
    ])
    def test_is_flag(self, value, expected):
        assert is_flag(value) is expected

    @pytest.mark.unit
    def test_long_flag_without_value(self):
        flags, remaining = parse_flags(['--cpus'])
        assert flags == {'cpus': True}
        assert remaining == []

    @pytest.mark.unit
    def test_long_flag_with_value(self):
        flags, _ = parse_flags(['--level=9'])
        assert flags == {'level': '9'}

    @pytest.mark.unit
    def test_long_flag_splits_on_first_equals(self):
        flags, _ = parse_flags(['--key=value=with=equals'])
        assert flags == {'key': 'value=with=equals'}

    @pytest.mark.unit
    def test_short_flag_consumes_value(self):
        flags, remaining = parse_flags(['-o', 'out.gz', 'in.txt'])
        assert flags == {'o': 'out.gz'}
        assert remaining == ['in.txt']

    @pytest.mark.unit
    def test_short_flag_at_end_is_boolean(self):
        flags, remaining = parse_flags(['in.txt', '-f'])
        assert flags == {'f': True}
        assert remaining == ['in.txt']

    @pytest.mark.unit
    def test_short_flag_does_not_consume_flag(self):
        flags, _ = parse_flags(['-f', '--verbose'])
        assert flags == {'f': True, 'verbose': True}

    @pytest.mark.unit
    def test_short_flag_does_not_consume_negative_number(self):
        """Known limitation: a hyphen-prefixed value is never consumed"""
        flags, remaining = parse_flags(['-n', '-12'])
        assert flags == {'n': True}
        assert remaining == ['-12']

    @pytest.mark.unit
    def test_remaining_keeps_order(self):
        flags, remaining = parse_flags(['a', '--x', 'b', '-', 'c'])
        assert flags == {'x': True}
        assert remaining == ['a', 'b', '-', 'c']


class TestDisplayHelpers:
    """Test escape_string and normalize_whitespace"""

    @pytest.mark.unit
    def test_escape_string(self):
        assert escape_string('a"b\'c\\d\ne\tf\rg') == 'a\\"b\\\'c\\\\d\\ne\\tf\\rg'

    @pytest.mark.unit
    def test_normalize_whitespace(self):
        assert normalize_whitespace('  a   b\t\nc  ') == 'a b c'
