"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Connection string parser for conn_str.

Handles both quoting dialects of the semicolon-separated key=value grammar:
- ADO.NET (SqlClient, Entity Framework): 'value' or "value", a doubled quote
  escapes itself, '==' inside a key is a literal '='
- ODBC: {value}, '}}' inside a braced value is a literal '}'

Parser behavior:
- Keys are right-trimmed and lower-cased, unquoted values are trimmed
- The first occurrence of a key wins
- Scanning stops at the first error, which carries the offending offset
"""

from enum import Enum, auto
from typing import Dict, Iterator, List, Mapping, Optional, Tuple
import unicodedata

from conn_str.exceptions import ConnectionStringSyntaxError, KeyNotSupportedError
from conn_str.logging import get_logger
from conn_str.helpers import sanitize_user_input


class State(Enum):
    """Scanner states, one pair is scanned per run from NOTHING_YET."""
    NOTHING_YET = auto()
    KEY = auto()
    KEY_EQUAL = auto()
    KEY_END = auto()
    UNQUOTED_VALUE = auto()
    DOUBLE_QUOTE_VALUE = auto()
    DOUBLE_QUOTE_VALUE_QUOTE = auto()
    SINGLE_QUOTE_VALUE = auto()
    SINGLE_QUOTE_VALUE_QUOTE = auto()
    BRACE_QUOTE_VALUE = auto()
    BRACE_QUOTE_VALUE_QUOTE = auto()
    QUOTED_VALUE_END = auto()
    NULL_TERMINATION = auto()


class Action(Enum):
    """What the driver loop does with the current character after a transition."""
    CONSUME = auto()      # move on to the next character
    REDISPATCH = auto()   # feed the same character to the new state
    COMPLETE = auto()     # the pair is complete, stop scanning


# quoted-value state -> (closing character, companion state)
_OPEN_QUOTES = {
    State.DOUBLE_QUOTE_VALUE: ('"', State.DOUBLE_QUOTE_VALUE_QUOTE),
    State.SINGLE_QUOTE_VALUE: ("'", State.SINGLE_QUOTE_VALUE_QUOTE),
    State.BRACE_QUOTE_VALUE: ('}', State.BRACE_QUOTE_VALUE_QUOTE),
}

# companion state -> (escape character, quoted-value state)
_CLOSING_QUOTES = {
    quote_state: (quote, open_state)
    for open_state, (quote, quote_state) in _OPEN_QUOTES.items()
}

_UNTERMINATED = (
    State.KEY,
    State.DOUBLE_QUOTE_VALUE,
    State.SINGLE_QUOTE_VALUE,
    State.BRACE_QUOTE_VALUE,
)


def is_control(ch: str) -> bool:
    """True for characters of the Unicode Cc category."""
    return unicodedata.category(ch) == 'Cc'


def is_whitespace(ch: str) -> bool:
    """True for Unicode White_Space characters."""
    # str.isspace() also accepts the information separators U+001C..U+001F
    return ch.isspace() and not '\x1c' <= ch <= '\x1f'


def _normalize_key(raw: str) -> str:
    return raw.rstrip().lower()


class _KeyValueScanner:
    """
    State machine scanning a single key/value pair.

    ``step`` is the transition function: it applies one character to the
    current state and returns an Action. ``feed`` drives it until the
    character is consumed, and ``finish`` settles the pair once scanning stops.
    """

    def __init__(self, use_odbc_rules: bool = False):
        self.use_odbc_rules = use_odbc_rules
        self.state = State.NOTHING_YET
        self.buf: List[str] = []
        self.key = ''
        self.value = ''

    def step(self, index: int, ch: str) -> Action:
        return self._TRANSITIONS[self.state](self, index, ch)

    def feed(self, index: int, ch: str) -> bool:
        """Apply one character. Returns True once the pair is complete."""
        while True:
            action = self.step(index, ch)
            if action is not Action.REDISPATCH:
                return action is Action.COMPLETE

    def finish(self, index: int) -> Tuple[str, str]:
        """
        Settle the pair after the last consumed character.

        Args:
            index: Offset of the last consumed character

        Returns:
            The (key, value) pair; an empty key means no pair was left

        Raises:
            ConnectionStringSyntaxError: If a key or quoted value is unterminated,
                the key is empty, or an ADO.NET unquoted value ends in a quote
        """
        if self.state in _UNTERMINATED:
            raise ConnectionStringSyntaxError(index)

        if self.state is State.KEY_EQUAL:
            self._close_key(index)
        elif self.state is State.UNQUOTED_VALUE:
            self.value = ''.join(self.buf).strip()
            if not self.use_odbc_rules and self.value.endswith(("'", '"')):
                raise ConnectionStringSyntaxError(index)
        elif self.state in _CLOSING_QUOTES or self.state is State.QUOTED_VALUE_END:
            self.value = ''.join(self.buf)

        return self.key, self.value

    def _close_key(self, index: int) -> None:
        self.key = _normalize_key(''.join(self.buf))
        if not self.key:
            raise ConnectionStringSyntaxError(index)
        self.buf.clear()

    # Transitions

    def _on_nothing_yet(self, index: int, ch: str) -> Action:
        if ch == ';' or is_whitespace(ch):
            return Action.CONSUME
        if ch == '\0':
            self.state = State.NULL_TERMINATION
            return Action.CONSUME
        if is_control(ch):
            raise ConnectionStringSyntaxError(index)
        if ch == '=':
            self.state = State.KEY_EQUAL
            return Action.REDISPATCH
        self.state = State.KEY
        self.buf.append(ch)
        return Action.CONSUME

    def _on_key(self, index: int, ch: str) -> Action:
        if ch == '=':
            self.state = State.KEY_EQUAL
            return Action.CONSUME
        if not is_whitespace(ch) and is_control(ch):
            raise ConnectionStringSyntaxError(index)
        self.buf.append(ch)
        return Action.CONSUME

    def _on_key_equal(self, index: int, ch: str) -> Action:
        if not self.use_odbc_rules and ch == '=':
            # '==' is an escaped '=' inside the key
            self.state = State.KEY
            self.buf.append(ch)
            return Action.CONSUME
        self._close_key(index)
        self.state = State.KEY_END
        return Action.REDISPATCH

    def _on_key_end(self, index: int, ch: str) -> Action:
        if is_whitespace(ch):
            return Action.CONSUME
        if self.use_odbc_rules:
            if ch == '{':
                self.state = State.BRACE_QUOTE_VALUE
                return Action.CONSUME
        elif ch == "'":
            self.state = State.SINGLE_QUOTE_VALUE
            return Action.CONSUME
        elif ch == '"':
            self.state = State.DOUBLE_QUOTE_VALUE
            return Action.CONSUME

        if ch == ';' or ch == '\0':
            return Action.COMPLETE
        if is_control(ch):
            raise ConnectionStringSyntaxError(index)

        self.state = State.UNQUOTED_VALUE
        self.buf.append(ch)
        return Action.CONSUME

    def _on_unquoted_value(self, index: int, ch: str) -> Action:
        if not is_whitespace(ch) and (is_control(ch) or ch == ';'):
            return Action.COMPLETE
        self.buf.append(ch)
        return Action.CONSUME

    def _on_quoted_value(self, index: int, ch: str) -> Action:
        quote, quote_state = _OPEN_QUOTES[self.state]
        if ch == quote:
            self.state = quote_state
        elif ch == '\0':
            raise ConnectionStringSyntaxError(index)
        else:
            self.buf.append(ch)
        return Action.CONSUME

    def _on_quoted_value_quote(self, index: int, ch: str) -> Action:
        quote, open_state = _CLOSING_QUOTES[self.state]
        if ch == quote:
            self.state = open_state
            self.buf.append(ch)
            return Action.CONSUME
        self.value = ''.join(self.buf)
        self.state = State.QUOTED_VALUE_END
        return Action.REDISPATCH

    def _on_quoted_value_end(self, index: int, ch: str) -> Action:
        if is_whitespace(ch):
            return Action.CONSUME
        if ch == ';':
            return Action.COMPLETE
        if ch == '\0':
            self.state = State.NULL_TERMINATION
            return Action.CONSUME
        raise ConnectionStringSyntaxError(index)

    def _on_null_termination(self, index: int, ch: str) -> Action:
        if ch == '\0' or is_whitespace(ch):
            return Action.CONSUME
        raise ConnectionStringSyntaxError(index)

    _TRANSITIONS = {
        State.NOTHING_YET: _on_nothing_yet,
        State.KEY: _on_key,
        State.KEY_EQUAL: _on_key_equal,
        State.KEY_END: _on_key_end,
        State.UNQUOTED_VALUE: _on_unquoted_value,
        State.DOUBLE_QUOTE_VALUE: _on_quoted_value,
        State.DOUBLE_QUOTE_VALUE_QUOTE: _on_quoted_value_quote,
        State.SINGLE_QUOTE_VALUE: _on_quoted_value,
        State.SINGLE_QUOTE_VALUE_QUOTE: _on_quoted_value_quote,
        State.BRACE_QUOTE_VALUE: _on_quoted_value,
        State.BRACE_QUOTE_VALUE_QUOTE: _on_quoted_value_quote,
        State.QUOTED_VALUE_END: _on_quoted_value_end,
        State.NULL_TERMINATION: _on_null_termination,
    }


def parse_key_value(
    chars: Iterator[Tuple[int, str]],
    use_odbc_rules: bool = False,
) -> Optional[Tuple[str, str]]:
    """
    Scan the next key/value pair from an iterator of (offset, character).

    The iterator is advanced in place, so repeated calls walk through the
    whole connection string. Pass an iterator such as ``enumerate(text)``,
    not a list.

    Args:
        chars: Iterator of (offset, character) tuples
        use_odbc_rules: Scan with ODBC quoting rules instead of ADO.NET rules

    Returns:
        None if the iterator was already exhausted, otherwise the (key, value)
        pair. An empty key means only separators or padding were left.

    Raises:
        ConnectionStringSyntaxError: On malformed input

    Examples:
        >>> chars = enumerate("a==b=1;c='x'")
        >>> parse_key_value(chars)
        ('a=b', '1')
        >>> parse_key_value(chars)
        ('c', 'x')
    """
    scanner = _KeyValueScanner(use_odbc_rules)
    last_index = None

    for index, ch in chars:
        last_index = index
        if scanner.feed(index, ch):
            break

    if last_index is None:
        return None

    return scanner.finish(last_index)


def parse(
    conn_str: str,
    use_odbc_rules: bool = False,
    synonyms: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Parse a connection string into a dictionary of lower-cased keys to values.

    Args:
        conn_str: Connection string text
        use_odbc_rules: Parse with ODBC quoting rules instead of ADO.NET rules
        synonyms: Optional table of accepted key spellings to canonical keys.
                  When given, any key missing from it is rejected.

    Returns:
        Dictionary mapping keys to decoded values, first occurrence wins

    Raises:
        ConnectionStringSyntaxError: On malformed input
        KeyNotSupportedError: If a key is rejected

    Examples:
        >>> parse("Server=.;Database=Db1;database=Other")
        {'server': '.', 'database': 'Db1'}
        >>> parse("Driver={SQL Server};PWD={p}}w}", use_odbc_rules=True)
        {'driver': 'SQL Server', 'pwd': 'p}w'}
    """
    chars = enumerate(conn_str)
    params: Dict[str, str] = {}

    while True:
        pair = parse_key_value(chars, use_odbc_rules)
        if pair is None:
            break

        key, value = pair
        if not key:
            break

        if synonyms is not None:
            canonical = synonyms.get(key)
            if canonical is None:
                raise KeyNotSupportedError(key)
            key = canonical

        if not key or is_whitespace(key[0]) or key[0] == ';' or '\0' in key:
            raise KeyNotSupportedError(key)

        params.setdefault(key, value)

    return params


class _ConnectionStringParser:
    """
    Internal parser object used by the typed connection string views.

    Binds a dialect and an optional allow-list, and logs each parse.
    """

    def __init__(
        self,
        use_odbc_rules: bool = False,
        allowlist=None,
        synonyms: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            use_odbc_rules: Parse with ODBC quoting rules
            allowlist: Optional _ConnectionStringAllowList class or instance.
                      If None, every well-formed key is accepted as is.
            synonyms: Optional explicit synonym table, takes precedence over allowlist
        """
        self.use_odbc_rules = use_odbc_rules
        self._allowlist = allowlist
        self._synonyms = synonyms

    @property
    def synonyms(self) -> Optional[Mapping[str, str]]:
        """The synonym table keys are resolved through, None when keys are kept as is."""
        if self._synonyms is not None:
            return self._synonyms
        if self._allowlist:
            return self._allowlist.synonyms(self.use_odbc_rules)
        return None

    def _parse(self, connection_str: str) -> Dict[str, str]:
        """
        Parse a connection string, resolving keys through the allow-list.

        Args:
            connection_str: Connection string text

        Returns:
            Dictionary mapping keys to values

        Raises:
            ConnectionStringSyntaxError: On malformed input
            KeyNotSupportedError: If a key is rejected
        """
        logger = get_logger()
        dialect = 'odbc' if self.use_odbc_rules else 'ado.net'
        synonyms = self.synonyms

        logger.debug(
            "Parsing connection string: dialect=%s, length=%d, synonyms=%s",
            dialect, len(connection_str), synonyms is not None,
        )

        try:
            params = parse(connection_str, self.use_odbc_rules, synonyms)
        except ConnectionStringSyntaxError as e:
            logger.debug("Connection string syntax error at offset %d", e.offset)
            raise
        except KeyNotSupportedError as e:
            logger.debug("Connection string key rejected: %s", sanitize_user_input(e.key))
            raise

        logger.debug("Parsed %d connection string parameter(s)", len(params))
        return params
