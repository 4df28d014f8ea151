"""Tests for logging configuration."""

import logging
import logging.handlers
from pathlib import Path
from typing import Iterator

import pytest

from mythic_catalog.settings import AppSettings
from mythic_catalog.utils.logging_config import ColoredFormatter, CSVFormatter, setup_logging


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Remove and close the handlers installed by setup_logging."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler or isinstance(
            handler, logging.handlers.RotatingFileHandler
        ):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _record(message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("mythic_catalog.test", level, __file__, 7, message, None, None)


class TestFormatters:
    """Test console and file formatters."""

    def test_colored_level(self) -> None:
        formatter = ColoredFormatter(fmt="%(levelname)s : %(message)s")
        assert formatter.format(_record("hi", logging.WARNING)) == "\033[33mWARNING\033[0m : hi"

    def test_csv_quotes_are_doubled(self) -> None:
        line = CSVFormatter(datefmt="%Y").format(_record('say "hi"'))
        assert line.endswith('"mythic_catalog.test";"7";"say ""hi"""')
        assert ";INFO    ;" in line


class TestSetupLogging:
    """Test handler installation from settings."""

    def test_console_and_file(self, tmp_path: Path, restore_root_logger: None) -> None:
        settings = AppSettings(settings_file=tmp_path / "settings.ini")
        settings.console_use_colors = False
        settings.console_log_level = "WARNING"
        settings.file_logging = True
        settings.log_file_path = str(tmp_path / "logs" / "catalog.csv")

        setup_logging(settings)

        root = logging.getLogger()
        stream_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
        file_handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(stream_handlers) == 1
        assert stream_handlers[0].level == logging.WARNING
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5

        logging.getLogger("mythic_catalog.test").info("scan finished")
        file_handlers[0].flush()
        content = (tmp_path / "logs" / "catalog.csv").read_text(encoding="utf-8")
        assert '"scan finished"' in content

    def test_console_disabled(self, tmp_path: Path, restore_root_logger: None) -> None:
        settings = AppSettings(settings_file=tmp_path / "settings.ini")
        settings.console_logging = False

        setup_logging(settings)

        assert logging.getLogger().handlers == []
        assert logging.getLogger("mythic_catalog").level == logging.DEBUG
