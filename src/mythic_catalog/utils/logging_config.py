"""
Logging configuration for mythic-catalog.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..settings import AppSettings

CONSOLE_FORMAT = "%(asctime)s : %(levelname)-8s : %(message)s"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.COLORS.get(record.levelname)
        if color is None:
            return text
        # First occurrence only, the message may repeat the level name
        return text.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)


class CSVFormatter(logging.Formatter):
    """Semicolon separated log lines, one record per row.

    Columns: timestamp; level (padded, unquoted); ms since start; logger
    name; line number; message with any traceback appended.
    """

    @staticmethod
    def _quote(value: object) -> str:
        return '"' + str(value).replace('"', '""') + '"'

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return ";".join(
            [
                self._quote(self.formatTime(record, self.datefmt)),
                record.levelname.ljust(8),
                self._quote(f"{int(record.relativeCreated)} ms"),
                self._quote(record.name),
                self._quote(record.lineno),
                self._quote(message),
            ]
        )


def _level(name: str, default: int) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def _console_handler(settings: "AppSettings") -> logging.Handler:
    formatter_class = ColoredFormatter if settings.console_use_colors else logging.Formatter
    handler = logging.StreamHandler()
    handler.setLevel(_level(settings.console_log_level, logging.INFO))
    handler.setFormatter(formatter_class(fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(settings: "AppSettings") -> logging.Handler:
    """Rotating CSV log file; raises OSError when the file cannot be opened."""
    log_path = Path(settings.log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(_level(settings.file_log_level, logging.DEBUG))
    handler.setFormatter(CSVFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(settings: "AppSettings") -> None:
    """
    Install console and rotating file handlers on the root logger.

    Handlers left by an earlier call are closed first, so calling this
    again after changing settings reconfigures output in place.

    Args:
        settings: AppSettings instance for all logging configuration
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    logging.getLogger("mythic_catalog").setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if settings.console_logging:
        root_logger.addHandler(_console_handler(settings))

    file_target = None
    if settings.file_logging:
        try:
            root_logger.addHandler(_file_handler(settings))
            file_target = settings.log_file_absolute_path
        except OSError as e:
            root_logger.warning(f"File logging disabled, cannot open {settings.log_file_path}: {e}")

    # PyYAML and asyncio are chatty at DEBUG
    for name in ("yaml", "asyncio"):
        logging.getLogger(name).setLevel(logging.INFO)

    logger = logging.getLogger(__name__)
    logger.info("Logging initialized")
    if settings.console_logging:
        logger.debug(
            f"Console: {settings.console_log_level}, colors={settings.console_use_colors}"
        )
    if file_target is not None:
        logger.debug(f"Log file: {file_target} ({settings.file_log_level})")
