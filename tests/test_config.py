"""Tests for ron.config and ron._internal.log."""

import dataclasses
import logging
from datetime import date
from pathlib import Path

import pytest

from ron._internal.log import configure_logging, log_file_path
from ron.config import EngineConfig


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.timeout == 30.0
        assert config.template_extension == ".html"
        assert config.enable_cache is False
        assert config.log_dir == "logs"

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            EngineConfig().port = 1  # type: ignore[misc]

    def test_replace(self) -> None:
        config = dataclasses.replace(EngineConfig(), debug=True)
        assert config.debug is True


class TestConfigureLogging:
    def test_log_file_name(self, tmp_path: Path) -> None:
        assert log_file_path(tmp_path, date(2024, 5, 17)) == tmp_path / "log2024-05-17.log"

    def test_writes_dated_file(self, tmp_path: Path) -> None:
        logger = configure_logging("info", tmp_path / "logs")
        try:
            logging.getLogger("ron.engine").info("engine started")
            for handler in logger.handlers:
                handler.flush()
            text = log_file_path(tmp_path / "logs").read_text(encoding="utf-8")
            assert "engine started" in text
            assert "ron.engine" in text
            assert logger.level == logging.INFO
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        logger = configure_logging("debug", tmp_path)
        try:
            count = len(logger.handlers)
            configure_logging("debug", tmp_path)
            assert len(logger.handlers) == count
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def test_stdout_only(self) -> None:
        logger = configure_logging("warning", None)
        try:
            assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
