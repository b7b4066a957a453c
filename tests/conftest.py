"""
This file contains fixtures for the tests in the conn_str package.
Fixtures:
- temp_log_dir: Temporary directory for log files.
- cleanup_logger: Reset the package logger before and after a test.
- reset_settings: Restore the global settings after a test.
"""

import logging
import os
import shutil
import tempfile

import pytest

from conn_str.helpers import get_settings
from conn_str.logging import logger, FILE


def _reset_logger():
    logger._logger.setLevel(logging.CRITICAL)
    for handler in (logger._file_handler, logger._stdout_handler):
        if handler is not None:
            handler.close()
            logger._logger.removeHandler(handler)
    logger._file_handler = None
    logger._stdout_handler = None
    logger._handlers_initialized = False
    logger._custom_log_path = None
    logger._output_mode = FILE
    logger._log_file = None

    log_dir = os.path.join(os.getcwd(), "conn_str_logs")
    if os.path.exists(log_dir):
        shutil.rmtree(log_dir, ignore_errors=True)


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for log files"""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def cleanup_logger():
    """Reset logger state before and after each test"""
    _reset_logger()
    yield
    _reset_logger()


@pytest.fixture
def reset_settings():
    """Restore global settings after each test"""
    settings = get_settings()
    saved = (settings.use_odbc_rules, settings.mask_secrets)
    yield settings
    settings.use_odbc_rules, settings.mask_secrets = saved
