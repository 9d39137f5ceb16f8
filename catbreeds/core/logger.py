"""
Logging configuration for catbreeds.

This module sets up the logging system with multiple outputs:
    - Console: Real-time messages with tqdm-compatible formatting
    - log_full_<ts>.log: Complete log of all events (DEBUG and above)
    - log_errors_<ts>.log: Only ERROR and CRITICAL level messages
    - sync_failures_<ts>.log: Remote calls that failed, and whether the
      cache fallback served the request

Log File Locations:
    All log files are created in the directory given to setup_logging(),
    normally `logging.directory` from config.yaml. Each run gets its own
    timestamped files.

Usage:
    from catbreeds.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Fetching breeds page 2")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Uses tqdm.write(), which prints above any active bar instead of
    tearing it apart with a raw stderr write.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class SyncFailureHandler(logging.Handler):
    """
    Handler that captures failed remote operations for the sync report file.

    Writes one block per failure to sync_failures_<ts>.log:

        list(limit=10, page=3)
        error: Connection refused
        served from cache: yes (10 breeds)

    The handler looks for specific extra fields in log records:
        - 'sync_failure_operation': Operation description
        - 'sync_failure_error': Remote error message
        - 'sync_failure_fallback': True/False/None (None = no fallback attempted)
        - 'sync_failure_served': Number of rows served from cache (optional)

    Only records containing these fields are written to the report.
    Use log_sync_failure() to emit correctly shaped records.
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "sync_failure_operation"):
            return

        if self.report_file is None:
            return

        try:
            operation = getattr(record, "sync_failure_operation", "unknown")
            error = getattr(record, "sync_failure_error", "")
            fallback = getattr(record, "sync_failure_fallback", None)
            served = getattr(record, "sync_failure_served", None)

            if fallback is None:
                fallback_text = "no fallback"
            elif fallback:
                fallback_text = "yes" if served is None else f"yes ({served} breeds)"
            else:
                fallback_text = "no (cache unavailable)"

            self.acquire()
            try:
                self.report_file.write(f"{operation}\n")
                self.report_file.write(f"error: {error}\n")
                self.report_file.write(f"served from cache: {fallback_text}\n\n")
                self.report_file.flush()
            finally:
                self.release()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, console_level: str = "INFO") -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        log_dir: Directory where log files will be created.
                 Created if it doesn't exist.
        console_level: Level name for console output (file logs are
                       always DEBUG).

    Behavior:
        1. Create log_dir if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG
        4. Console handler (TqdmLoggingHandler) at console_level
        5. Full log file handler at DEBUG
        6. Error log file handler filtered to ERROR+
        7. Sync failures report handler

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before starting any worker threads.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Close and drop handlers from a previous setup
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(
        log_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    sync_handler = SyncFailureHandler(log_dir / f"sync_failures_{timestamp}.log")
    sync_handler.open()
    root_logger.addHandler(sync_handler)

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers and will not produce output.
    """
    return logging.getLogger(name)


def log_sync_failure(
    logger: logging.Logger,
    operation: str,
    error_message: str,
    fallback_ok: bool | None,
    served: int | None = None
) -> None:
    """
    Log a remote operation failure with the fields SyncFailureHandler reads.

    Args:
        logger: The logger to use for the message.
        operation: Description such as "list(limit=10, page=3)".
        error_message: The remote error message.
        fallback_ok: True if the cache served the request, False if the cache
                     also failed, None if no fallback applies.
        served: Number of breeds served from cache, if any.

    Behavior:
        WARNING when the cache covered for the remote failure, ERROR otherwise.
    """
    level = logging.WARNING if fallback_ok else logging.ERROR
    if fallback_ok:
        message = f"{operation} failed remotely, served from cache: {error_message}"
    else:
        message = f"{operation} failed: {error_message}"

    logger.log(
        level,
        message,
        extra={
            "sync_failure_operation": operation,
            "sync_failure_error": error_message,
            "sync_failure_fallback": fallback_ok,
            "sync_failure_served": served,
        }
    )


def shutdown_logging() -> None:
    """
    Properly shut down the logging system.

    Flushes and closes all handlers and removes them from the root logger.
    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
