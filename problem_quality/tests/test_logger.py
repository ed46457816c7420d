"""Logging setup tests"""

import logging
import os
import tempfile

import pytest

from problem_quality.utils.logger import LOG_LEVEL_ENV, PACKAGE_LOGGER, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    saved_level = package_logger.level
    saved_handlers = list(package_logger.handlers)
    saved_propagate = package_logger.propagate
    yield
    package_logger.setLevel(saved_level)
    package_logger.handlers = saved_handlers
    package_logger.propagate = saved_propagate


class TestGetLogger:

    def test_package_module_name_kept(self):
        assert get_logger("problem_quality.engine").name == "problem_quality.engine"

    def test_package_root(self):
        assert get_logger(PACKAGE_LOGGER).name == PACKAGE_LOGGER

    def test_outside_name_nested(self):
        assert get_logger("__main__").name == "problem_quality.__main__"

    def test_lookalike_prefix_nested(self):
        assert get_logger("problem_quality_tools").name == "problem_quality.problem_quality_tools"


class TestSetupLogging:

    def test_bundled_config(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        setup_logging()
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False
        assert len(package_logger.handlers) == 1

    def test_level_argument(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        setup_logging(level="warning")
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        assert package_logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in package_logger.handlers)

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
        setup_logging()
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.ERROR

    def test_argument_beats_env(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
        setup_logging(level=logging.INFO)
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO

    def test_missing_file_still_applies_level(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        setup_logging("/nonexistent/logging.yaml", level="ERROR")
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.ERROR

    def test_empty_file_falls_back(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "logging.yaml")
            open(path, "w").close()
            setup_logging(path, level="INFO")
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO
