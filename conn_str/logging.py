"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Debug logging for the conn_str parser, builder and CLI.

Nothing is emitted until setup_logging() is called. Password values are
masked in every message before it reaches a handler.
"""

import datetime
import logging
from logging.handlers import RotatingFileHandler
import os
import re
import sys
import threading
from typing import Optional

from conn_str.helpers import MASK, SECRET_KEYS

# Output destinations accepted by setup_logging()
STDOUT = 'stdout'
FILE = 'file'
BOTH = 'both'

_OUTPUTS = (FILE, STDOUT, BOTH)

_SECRET_PATTERN = re.compile(
    r'\b(' + '|'.join(sorted(SECRET_KEYS)) + r')\s*=\s*[^;,\s]+', re.IGNORECASE
)


class ConnStrLogger:
    """
    Process-wide wrapper around the 'conn_str' logger.

    The underlying logger starts at CRITICAL and does not propagate, so a
    disabled debug() call costs one level check. Handlers are only created
    when logging is enabled: a rotating trace file (16MB, 5 backups) under
    ./conn_str_logs, stdout, or both.
    """

    _instance: Optional['ConnStrLogger'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConnStrLogger':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(ConnStrLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, '_initialized'):
            return
        self._initialized = True

        self._logger = logging.getLogger('conn_str')
        self._logger.setLevel(logging.CRITICAL)
        self._logger.propagate = False

        self._output_mode = FILE
        self._file_handler = None
        self._stdout_handler = None
        self._log_file = None
        self._custom_log_path = None
        self._handlers_initialized = False

    def _default_log_file(self) -> str:
        log_dir = os.path.join(os.getcwd(), "conn_str_logs")
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        return os.path.join(log_dir, f"conn_str_trace_{timestamp}_{os.getpid()}.log")

    def _setup_handlers(self):
        """Replace our handlers with the ones the current output mode asks for."""
        for handler in (self._file_handler, self._stdout_handler):
            if handler is not None:
                handler.close()
                self._logger.removeHandler(handler)
        self._file_handler = None
        self._stdout_handler = None
        self._log_file = None

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        )

        if self._output_mode in (FILE, BOTH):
            if self._custom_log_path:
                log_dir = os.path.dirname(self._custom_log_path)
                if log_dir:
                    os.makedirs(log_dir, exist_ok=True)
                self._log_file = self._custom_log_path
            else:
                self._log_file = self._default_log_file()

            self._file_handler = RotatingFileHandler(
                self._log_file, maxBytes=16 * 1024 * 1024, backupCount=5
            )
            self._file_handler.setFormatter(formatter)
            self._logger.addHandler(self._file_handler)

        if self._output_mode in (STDOUT, BOTH):
            self._stdout_handler = logging.StreamHandler(sys.stdout)
            self._stdout_handler.setFormatter(formatter)
            self._logger.addHandler(self._stdout_handler)

    @staticmethod
    def _sanitize_message(msg: str) -> str:
        """Replace the value of every Password=/Pwd= assignment in msg by ***."""
        return _SECRET_PATTERN.sub(r'\1=' + MASK, msg)

    def debug(self, msg: str, *args):
        """Log a %-style message at DEBUG level, with secrets masked."""
        if not self._logger.isEnabledFor(logging.DEBUG):
            return
        if args:
            msg = msg % args
        # stacklevel=2 attributes the record to our caller
        self._logger.debug(self._sanitize_message(msg), stacklevel=2)

    def _enable(self, output: Optional[str] = None, log_file_path: Optional[str] = None):
        if output is not None:
            if output not in _OUTPUTS:
                raise ValueError(
                    f"Invalid output mode: {output}. Must be one of: {', '.join(_OUTPUTS)}"
                )
            self._output_mode = output

        if log_file_path is not None:
            self._custom_log_path = log_file_path

        if not self._handlers_initialized or output is not None or log_file_path is not None:
            self._setup_handlers()
            self._handlers_initialized = True

        self._logger.setLevel(logging.DEBUG)


logger = ConnStrLogger()


def get_logger() -> ConnStrLogger:
    """Return the package logger singleton."""
    return logger


def setup_logging(output: str = FILE, log_file_path: Optional[str] = None) -> ConnStrLogger:
    """
    Enable DEBUG logging for troubleshooting.

    Args:
        output: 'file' (default), 'stdout' or 'both'
        log_file_path: Trace file path, defaults to a timestamped file
                       under ./conn_str_logs/

    Raises:
        ValueError: If output is not one of the modes above

    Examples:
        import conn_str

        conn_str.setup_logging()
        conn_str.setup_logging(output='stdout')
        conn_str.setup_logging(output='both', log_file_path='/tmp/conn_str.log')
    """
    logger._enable(output, log_file_path)
    return logger
