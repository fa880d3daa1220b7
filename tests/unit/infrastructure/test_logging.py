"""Tests for loguru configuration and stdlib interception."""

import logging
import sys

import pytest
from loguru import logger

from src.savemate.api.utils.app_startup import InterceptHandler, configure_logging
from src.savemate.runtime.config.config_data import AppConfig, ConfigData, LoggingConfig


@pytest.fixture
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)
    logging.basicConfig(handlers=[], force=True)


class TestConfigureLogging:
    def test_writes_log_file(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "app.log"
        config = ConfigData(
            app=AppConfig(environment="test"),
            logging=LoggingConfig(level="INFO", file=str(log_file)),
        )

        configure_logging(config)
        logger.info("hello from the test")
        logger.complete()
        logger.remove()

        contents = log_file.read_text()
        assert "hello from the test" in contents
        assert "[-]" in contents

    def test_stdlib_records_reach_loguru(self, restore_logging):
        configure_logging(ConfigData(app=AppConfig(environment="test")))
        messages: list[str] = []
        logger.add(lambda m: messages.append(m.record["message"]), level="INFO")

        logging.getLogger("some.library").warning("library says hi")

        assert "library says hi" in messages

    def test_access_log_is_dropped(self, restore_logging):
        logger.remove()
        messages: list[str] = []
        logger.add(lambda m: messages.append(m.record["message"]))
        record = logging.LogRecord(
            "uvicorn.access", logging.INFO, __file__, 1, "GET / 200", None, None
        )

        InterceptHandler().emit(record)

        assert messages == []
