"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Exceptions raised by conn_str.
"""


class Error(Exception):
    """
    Base class for all conn_str errors.
    Catch this to handle any failure raised while parsing a connection string
    or reading a typed value out of one.
    """
    def __init__(self, message="A connection string error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class ConnectionStringSyntaxError(Error):
    """
    The scanner reached a character it cannot accept.

    Raised for unterminated quotes, illegal control characters, a stray
    trailing quote, text after a NUL terminator, or an empty key.
    ``offset`` is the index of the character that triggered the failure.
    """
    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"parsing of connection string failed at `{offset}`")


class KeyNotSupportedError(Error):
    """
    A key was rejected after a successful scan: it is missing from the
    synonym table in use, empty, starts with whitespace or ';', or holds NUL.
    """
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"connection string key `{key}` not supported")


class NotAValidBoolError(Error):
    """A value read through a boolean accessor is outside the true/false vocabulary."""
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"`{value}` is not a valid boolean value")
