"""Tests for the logging setup"""

import logging

import pytest

from catbreeds.core.logger import get_logger, log_sync_failure, setup_logging, shutdown_logging


@pytest.fixture
def log_dir(temp_dir):
    setup_logging(temp_dir / "logs", console_level="WARNING")
    yield temp_dir / "logs"
    shutdown_logging()


class TestLogging:
    """Test log files and the sync failure report"""

    def test_creates_log_files(self, log_dir):
        names = sorted(p.name.split("_2")[0] for p in log_dir.iterdir())

        assert names == ["log_errors", "log_full", "sync_failures"]

    def test_sync_failure_report(self, log_dir):
        logger = get_logger("catbreeds.test")

        log_sync_failure(logger, "list(limit=10, page=3)", "Connection refused", True, 10)
        log_sync_failure(logger, "initialize", "HTTP 500", None)
        shutdown_logging()

        report = next(log_dir.glob("sync_failures_*.log")).read_text(encoding="utf-8")
        assert "list(limit=10, page=3)\nerror: Connection refused\nserved from cache: yes (10 breeds)" in report
        assert "served from cache: no fallback" in report

    def test_errors_only_in_error_log(self, log_dir):
        logger = get_logger("catbreeds.test")

        logger.info("just info")
        logger.error("real problem")
        shutdown_logging()

        errors = next(log_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        full = next(log_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        assert "real problem" in errors
        assert "just info" not in errors
        assert "just info" in full

    def test_shutdown_removes_handlers(self, log_dir):
        shutdown_logging()

        assert logging.getLogger().handlers == []
