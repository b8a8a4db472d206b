"""Logging configuration for Story Forge.

Handlers are attached to the root logger; every story_forge module logs
through ``logging.getLogger(__name__)``. Records carry a correlation id
(set with log_context) so the lines of one character upgrade can be grepped
together.
"""

import logging
import sys
import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from story_forge.settings import Settings

DEFAULT_LOG_FILE = Path(__file__).parent.parent.parent / "logs" / "story_forge.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class ContextFilter(logging.Filter):
    """Stamp records with the active correlation id ("-" outside log_context)."""

    def __init__(self) -> None:
        super().__init__()
        self.correlation_id: str | None = None

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = self.correlation_id or "-"
        return True


_context_filter = ContextFilter()

# File the current handlers write to; None means console only
_active_log_path: Path | None = None
_configured = False


class FlushingRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that flushes after every record."""

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.flush()


def resolve_log_path(log_file: str | None) -> Path | None:
    """Map a log_file setting to a path: "default" -> DEFAULT_LOG_FILE, ""/None -> None."""
    if log_file == "default":
        return DEFAULT_LOG_FILE
    if log_file:
        return Path(log_file)
    return None


def _level_number(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(level: str = "INFO", log_file: str | None = "default") -> None:
    """Replace the root logger's handlers with console and optional file output.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR); unknown names use INFO.
        log_file: "default" for logs/story_forge.log, a path, or None/"" for
            console only.
    """
    global _active_log_path, _configured

    log_level = _level_number(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Filter goes on handlers so records from child loggers are stamped too
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_path = resolve_log_path(log_file)
    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            FlushingRotatingFileHandler(
                log_path,
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(_context_filter)
        root_logger.addHandler(handler)

    _active_log_path = log_path
    _configured = True
    if log_path:
        root_logger.info(
            "Logging to file: %s (max %dMB, %d backups)",
            log_path,
            MAX_LOG_BYTES // (1024 * 1024),
            LOG_BACKUP_COUNT,
        )


def set_log_level(level: str) -> None:
    """Change the level of the root logger and all of its handlers at runtime."""
    log_level = _level_number(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers:
        handler.setLevel(log_level)
    root_logger.debug("Log level set to %s", logging.getLevelName(log_level))


def configure_logging(settings: "Settings") -> None:
    """Apply Settings.log_level and Settings.log_file.

    The first call installs the handlers. Later calls keep them when the
    log file is unchanged and only adjust the level, so a reloaded Settings
    does not reopen the log file.
    """
    log_path = resolve_log_path(settings.log_file)
    if _configured and log_path == _active_log_path:
        set_log_level(settings.log_level)
        return
    setup_logging(level=settings.log_level, log_file=settings.log_file)


@contextmanager
def log_context(correlation_id: str | None = None) -> Generator[str]:
    """Tag every record logged inside the block with a correlation id.

    Args:
        correlation_id: Id to use; a random 8-character id if None.

    Yields:
        The correlation id in effect.
    """
    if correlation_id is None:
        correlation_id = uuid.uuid4().hex[:8]

    old_id = _context_filter.correlation_id
    _context_filter.correlation_id = correlation_id
    try:
        yield correlation_id
    finally:
        _context_filter.correlation_id = old_id


@contextmanager
def log_performance(logger: logging.Logger, operation: str) -> Generator[None]:
    """Log the start and duration of an operation; failures are logged and re-raised."""
    start_time = time.perf_counter()
    logger.debug("%s: Starting", operation)
    try:
        yield
    except Exception as e:
        logger.error(
            "%s: Failed after %.2fs - %s", operation, time.perf_counter() - start_time, e
        )
        raise
    logger.debug("%s: Completed in %.2fs", operation, time.perf_counter() - start_time)
