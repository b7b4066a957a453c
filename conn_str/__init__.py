"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.
This module initializes the conn_str package.

Parse and encode ADO.NET (SqlClient, Entity Framework) and ODBC connection strings.
"""

# Package version
__version__ = "0.2.0"

# Exceptions
from .exceptions import (
    Error,
    ConnectionStringSyntaxError,
    KeyNotSupportedError,
    NotAValidBoolError,
)

# Settings
from .helpers import Settings, get_settings, sanitize_connection_string

# Parsing and encoding
from .connection_string_parser import parse, parse_key_value
from .connection_string_builder import (
    append_key_value,
    quote_value_match,
    quote_odbc_value_match,
    ConnectionStringBuilder,
)
from .connection_string_allowlist import _ConnectionStringAllowList

# Typed views
from .connection_string import (
    ConnectionString,
    EFConnectionString,
    MsSqlConnectionString,
    OdbcConnectionString,
    parse_bool,
)

# Logging
from .logging import logger, setup_logging

__all__ = [
    "Error",
    "ConnectionStringSyntaxError",
    "KeyNotSupportedError",
    "NotAValidBoolError",
    "Settings",
    "get_settings",
    "sanitize_connection_string",
    "parse",
    "parse_key_value",
    "append_key_value",
    "quote_value_match",
    "quote_odbc_value_match",
    "ConnectionStringBuilder",
    "ConnectionString",
    "EFConnectionString",
    "MsSqlConnectionString",
    "OdbcConnectionString",
    "parse_bool",
    "logger",
    "setup_logging",
]
