"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Parsed connection strings and their typed views.

ConnectionString is a read-only mapping of lower-cased keys to values.
EFConnectionString, MsSqlConnectionString and OdbcConnectionString add
accessors for well known keys and their synonyms.
"""

from collections.abc import Mapping
from typing import Dict, Iterator, Optional

from conn_str.connection_string_allowlist import _ConnectionStringAllowList
from conn_str.connection_string_builder import ConnectionStringBuilder
from conn_str.connection_string_parser import _ConnectionStringParser
from conn_str.exceptions import NotAValidBoolError
from conn_str.helpers import MASK, SECRET_KEYS, get_settings


def parse_bool(value: str) -> bool:
    """
    Convert a connection string value to a boolean.

    Args:
        value: 'true'/'yes' or 'false'/'no', case-insensitive

    Raises:
        NotAValidBoolError: For any other value
    """
    lowered = value.lower()
    if lowered in ('true', 'yes'):
        return True
    if lowered in ('false', 'no'):
        return False
    raise NotAValidBoolError(value)


class ConnectionString(Mapping):
    """
    Read-only mapping of a parsed connection string.

    Keys are lower-cased; when a key occurs more than once the first value
    is kept. Built once, never mutated.
    """

    # Dialect of the view, None means the global setting
    use_odbc_rules: Optional[bool] = None

    def __init__(self, params: Optional[Mapping] = None, use_odbc_rules: Optional[bool] = None):
        self._params: Dict[str, str] = dict(params) if params else {}
        if use_odbc_rules is None:
            use_odbc_rules = type(self).use_odbc_rules
        if use_odbc_rules is None:
            use_odbc_rules = get_settings().use_odbc_rules
        self.use_odbc_rules = use_odbc_rules

    @classmethod
    def parse(
        cls,
        conn_str: str,
        use_odbc_rules: Optional[bool] = None,
        synonyms: Optional[Mapping] = None,
        *,
        strict: bool = False,
    ) -> 'ConnectionString':
        """
        Parse connection string text.

        Args:
            conn_str: Connection string text
            use_odbc_rules: Dialect override, defaults to the class dialect
            synonyms: Explicit synonym table, takes precedence over strict
            strict: Resolve keys through the dialect's allow-list, rejecting
                    unknown keys and replacing synonyms by canonical names

        Raises:
            ConnectionStringSyntaxError: On malformed input
            KeyNotSupportedError: If a key is rejected
        """
        if use_odbc_rules is None:
            use_odbc_rules = cls.use_odbc_rules
        if use_odbc_rules is None:
            use_odbc_rules = get_settings().use_odbc_rules

        parser = _ConnectionStringParser(
            use_odbc_rules,
            allowlist=_ConnectionStringAllowList if strict else None,
            synonyms=synonyms,
        )
        return cls(parser._parse(conn_str), use_odbc_rules)

    def to_string(self) -> str:
        """
        Encode the parameters back into connection string text.

        Under ODBC rules a value that already reads as a braced value, such
        as '{x}', is written verbatim and parses back without its braces.
        """
        return ConnectionStringBuilder(self.use_odbc_rules).extend(self._params).build()

    def _first(self, *keys: str) -> Optional[str]:
        for key in keys:
            if key in self._params:
                return self._params[key]
        return None

    def __getitem__(self, key: str) -> str:
        return self._params[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        shown = {
            key: MASK if key in SECRET_KEYS else value
            for key, value in self._params.items()
        }
        return f"{type(self).__name__}({shown!r})"


class EFConnectionString(ConnectionString):
    """
    Entity Framework connection string (ADO.NET rules).

    Example:
        >>> ef = EFConnectionString.parse(
        ...     'provider=System.Data.SqlClient;'
        ...     'provider connection string="server=.\\\\Sql2017;database=Db1"')
        >>> ef.provider
        'System.Data.SqlClient'
        >>> ef.provider_connection.initial_catalog
        'Db1'
    """

    use_odbc_rules = False

    @property
    def metadata(self) -> Optional[str]:
        return self._first('metadata')

    @property
    def name(self) -> Optional[str]:
        return self._first('name')

    @property
    def provider(self) -> Optional[str]:
        return self._first('provider')

    @property
    def provider_connection_string(self) -> Optional[str]:
        return self._first('provider connection string')

    @property
    def provider_connection(self) -> Optional['MsSqlConnectionString']:
        """The nested provider connection string, parsed."""
        text = self.provider_connection_string
        if text is None:
            return None
        return MsSqlConnectionString.parse(text)


class MsSqlConnectionString(ConnectionString):
    """
    SqlClient connection string (ADO.NET rules).

    Each accessor checks the canonical key first, then its synonyms.
    Boolean accessors return False when the key is absent.
    """

    use_odbc_rules = False

    @property
    def application_name(self) -> Optional[str]:
        return self._first('application name', 'app')

    @property
    def data_source(self) -> Optional[str]:
        return self._first('data source', 'addr', 'address', 'network address', 'server')

    @property
    def initial_catalog(self) -> Optional[str]:
        return self._first('initial catalog', 'database')

    @property
    def integrated_security(self) -> bool:
        """
        Windows authentication flag.

        Accepts 'sspi' as true in addition to the usual vocabulary.

        Raises:
            NotAValidBoolError: If the value is not a recognized boolean
        """
        value = self._first('integrated security', 'trusted_connection')
        if value is None:
            return False
        if value.lower() == 'sspi':
            return True
        return parse_bool(value)

    @property
    def multiple_active_result_sets(self) -> bool:
        value = self._first('multipleactiveresultsets')
        return parse_bool(value) if value is not None else False

    @property
    def password(self) -> Optional[str]:
        return self._first('password', 'pwd')

    @property
    def trust_server_certificate(self) -> bool:
        value = self._first('trustservercertificate')
        return parse_bool(value) if value is not None else False

    @property
    def user_id(self) -> Optional[str]:
        return self._first('user id', 'uid', 'user')


class OdbcConnectionString(ConnectionString):
    """ODBC connection string (brace quoting rules)."""

    use_odbc_rules = True

    @property
    def driver(self) -> Optional[str]:
        return self._first('driver')

    @property
    def dsn(self) -> Optional[str]:
        return self._first('dsn')

    @property
    def server(self) -> Optional[str]:
        return self._first('server', 'addr', 'address')

    @property
    def database(self) -> Optional[str]:
        return self._first('database')

    @property
    def uid(self) -> Optional[str]:
        return self._first('uid')

    @property
    def pwd(self) -> Optional[str]:
        return self._first('pwd')

    @property
    def trusted_connection(self) -> bool:
        value = self._first('trusted_connection')
        return parse_bool(value) if value is not None else False

    @property
    def encrypt(self) -> Optional[str]:
        # yes/no/mandatory/optional/strict, returned as written
        return self._first('encrypt')

    @property
    def trust_server_certificate(self) -> bool:
        value = self._first('trustservercertificate')
        return parse_bool(value) if value is not None else False
