"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Connection string builder for conn_str.

Encodes key/value pairs back into connection string text with the quoting
the parser expects, in either the ADO.NET or the ODBC dialect.
"""

import re
from typing import Mapping, Optional

from conn_str.connection_string_parser import is_control, is_whitespace
from conn_str.logging import get_logger

_ODBC_QUOTED_VALUE = re.compile(r'\{(?:[^}]|\}\})*\}')


def quote_value_match(value: str) -> bool:
    """
    True if an ADO.NET value can be written without quotes.

    Safe values contain none of " ' = ; and no whitespace or control characters.
    """
    return not any(
        ch in '"\'=;' or is_whitespace(ch) or is_control(ch)
        for ch in value
    )


def quote_odbc_value_match(value: str) -> bool:
    """True if an ODBC value is already a valid braced value such as {a}}b}."""
    return _ODBC_QUOTED_VALUE.fullmatch(value) is not None


def _encode_value(value: str, use_odbc_rules: bool) -> str:
    if use_odbc_rules:
        needs_braces = (
            value
            and (value.startswith('{') or ';' in value or value.lower() == 'driver')
            and not quote_odbc_value_match(value)
        )
        if needs_braces:
            escaped = value.replace('}', '}}')
            return f'{{{escaped}}}'
        return value

    if quote_value_match(value):
        return value

    # A double quote but no single quote: single quotes need no escaping
    if '"' in value and "'" not in value:
        return f"'{value}'"

    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def append_key_value(out: str, key: str, value: str, use_odbc_rules: bool = False) -> str:
    """
    Encode a key and value and append them to a connection string.

    Args:
        out: Connection string built so far (may be empty)
        key: Parameter name
        value: Parameter value
        use_odbc_rules: Encode with ODBC quoting rules instead of ADO.NET rules

    Returns:
        ``out`` followed by the encoded ``key=value`` fragment, separated by
        ';' when needed

    Examples:
        >>> s = append_key_value("", "database", "MasterDb")
        >>> s = append_key_value(s, "server", ".\\\\SQL2017")
        >>> s = append_key_value(s, "user id", "me")
        >>> append_key_value(s, "password", "pass=1")
        'database=MasterDb;server=.\\\\SQL2017;user id=me;password="pass=1"'
    """
    parts = [out]
    if out and not out.endswith(';'):
        parts.append(';')

    parts.append(key if use_odbc_rules else key.replace('=', '=='))
    parts.append('=')
    parts.append(_encode_value(value, use_odbc_rules))
    return ''.join(parts)


class ConnectionStringBuilder:
    """
    Growable connection string buffer.

    Each append_key_value call extends the buffer in place, so a connection
    string can be accumulated pair by pair and read back with build().
    """

    def __init__(self, use_odbc_rules: bool = False, initial: Optional[str] = None):
        """
        Initialize the builder.

        Args:
            use_odbc_rules: Encode with ODBC quoting rules
            initial: Optional connection string text to start from, kept verbatim
        """
        self.use_odbc_rules = use_odbc_rules
        self._text = initial or ''

    def append_key_value(self, key: str, value: str) -> 'ConnectionStringBuilder':
        """
        Encode and append a parameter.

        Args:
            key: Parameter name
            value: Parameter value

        Returns:
            Self for method chaining
        """
        self._text = append_key_value(self._text, key, str(value), self.use_odbc_rules)
        return self

    def extend(self, params: Mapping[str, str]) -> 'ConnectionStringBuilder':
        """Append every pair of a mapping, in iteration order."""
        for key, value in params.items():
            self.append_key_value(key, value)
        get_logger().debug("Appended %d connection string parameter(s)", len(params))
        return self

    def build(self) -> str:
        """Return the connection string built so far."""
        return self._text

    def __str__(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        dialect = 'odbc' if self.use_odbc_rules else 'ado.net'
        return f"<ConnectionStringBuilder dialect={dialect} length={len(self._text)}>"
