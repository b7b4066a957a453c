"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.
This module provides helper functions and global settings for the conn_str package.
"""

import re
import threading
from typing import Optional

# Keys whose values are masked before a connection string is displayed or logged
SECRET_KEYS = frozenset(('password', 'pwd'))

MASK = '***'


def sanitize_user_input(user_input: str, max_length: int = 50) -> str:
    """
    Sanitize user input for safe logging by removing control characters,
    limiting length, and ensuring safe characters only.

    Args:
        user_input (str): The user input to sanitize.
        max_length (int): Maximum length of the sanitized output.

    Returns:
        str: The sanitized string safe for logging.
    """
    if not isinstance(user_input, str):
        return "<non-string>"

    # Allow alphanumeric, dash, underscore, dot and space (keys such as "user id")
    sanitized = re.sub(r"[^\w\-\. ]", "", user_input)

    # Limit length to prevent log flooding
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    return sanitized if sanitized else "<invalid>"


def sanitize_connection_string(conn_str: str, use_odbc_rules: Optional[bool] = None) -> str:
    """
    Mask secret values in a connection string.

    The string is parsed and re-encoded with every password value replaced by
    ***. Text that does not parse is masked with a pattern match instead.

    Args:
        conn_str (str): The connection string to sanitize.
        use_odbc_rules: Dialect to parse with, the global setting when None.

    Returns:
        str: The sanitized connection string.
    """
    # Imported here to avoid a circular import with the parser's logging
    from conn_str.connection_string_parser import parse
    from conn_str.connection_string_builder import append_key_value
    from conn_str.exceptions import Error

    if use_odbc_rules is None:
        use_odbc_rules = get_settings().use_odbc_rules

    try:
        params = parse(conn_str, use_odbc_rules)
    except Error:
        return re.sub(
            r"((?:Pwd|Password)\s*=\s*)[^;]*", r"\g<1>" + MASK, conn_str, flags=re.IGNORECASE
        )

    out = ''
    for key, value in params.items():
        out = append_key_value(out, key, MASK if key in SECRET_KEYS else value, use_odbc_rules)
    return out


class Settings:
    """
    Settings class for conn_str package configuration.

    use_odbc_rules is the dialect used where a caller does not choose one,
    mask_secrets controls whether password values are hidden when displayed.
    """
    def __init__(self) -> None:
        self.use_odbc_rules: bool = False
        self.mask_secrets: bool = True


# Global settings instance
_settings: Settings = Settings()
_settings_lock: threading.Lock = threading.Lock()


def get_settings() -> Settings:
    """Return the global settings object"""
    with _settings_lock:
        return _settings
