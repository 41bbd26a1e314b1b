"""Unit tests for logging setup."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
from teslacam.utils import logger as log_module


class TestResolveLogDir:
    def test_default_is_repo_logs(self):
        assert log_module.resolve_log_dir(None).endswith("logs")

    def test_empty_disables_file_logging(self):
        assert log_module.resolve_log_dir("") is None

    def test_explicit_dir(self, tmp_path):
        assert log_module.resolve_log_dir(str(tmp_path)) == str(tmp_path)


def test_get_logger_configures_once():
    a = log_module.get_logger("teslacam.test.a")
    handlers = list(logging.getLogger().handlers)
    b = log_module.get_logger("teslacam.test.b")

    assert a.name == "teslacam.test.a"
    assert b.name == "teslacam.test.b"
    assert logging.getLogger().handlers == handlers


def test_client_libraries_quieted():
    log_module.get_logger("teslacam.test")
    for name in log_module.QUIET_LOGGERS:
        assert logging.getLogger(name).level >= logging.WARNING
