"""Test utils module functionality."""

import logging
from unittest.mock import Mock

import pytest

from asyncbars.utils import error_handler
from asyncbars.utils.error_handler import (
    ErrorHandler,
    critical_operation,
    handle_errors,
    safe_with_default,
)
from asyncbars.utils.logger import get_logger, setup_logging


class TestLogger:
    """Test logging functionality."""

    def test_setup_logging(self):
        """Test logging setup doesn't raise errors."""
        setup_logging()
        assert logging.getLogger().handlers

    def test_setup_logging_writes_plain_message_to_file(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test log file output uses raw message format."""
        log_file = tmp_path / "logs" / "asyncbars.log"
        monkeypatch.setenv("ASYNCBARS_LOG_FILE", str(log_file))

        from asyncbars.config import get_settings

        get_settings(refresh=True)
        setup_logging()

        test_message = "logging format check"
        logging.getLogger("format-check").info(test_message)

        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.exists()
        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines, "ログファイルが空です"
        assert lines[-1].endswith(test_message)

    def test_get_logger_returns_logger(self):
        """Test get_logger returns a logger instance."""
        logger = get_logger("test")
        assert logger is not None
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "warning")


class TestErrorHandler:
    """共通エラーハンドリングのテスト"""

    @pytest.fixture(autouse=True)
    def _mock_logger(self, monkeypatch: pytest.MonkeyPatch) -> None:
        self.logger = Mock()
        monkeypatch.setattr(error_handler, "logger", self.logger)

    def test_log_and_return_default(self) -> None:
        result = ErrorHandler.log_and_return_default(
            "do thing", ValueError("bad"), "fallback", item=1
        )

        assert result == "fallback"
        self.logger.error.assert_called_once_with(
            "Failed to do thing", error="bad", error_type="ValueError", item=1
        )

    @pytest.mark.asyncio
    async def test_handle_errors_returns_default(self) -> None:
        @handle_errors("divide", default_return=-1)
        async def divide(a, b):
            return a / b

        assert await divide(4, 2) == 2
        assert await divide(1, 0) == -1
        self.logger.error.assert_called_once_with(
            "Failed to divide",
            error="division by zero",
            error_type="ZeroDivisionError",
        )

    def test_handle_errors_rejects_plain_function(self) -> None:
        def divide(a, b):
            return a / b

        with pytest.raises(TypeError):
            handle_errors("divide")(divide)

    @pytest.mark.asyncio
    async def test_safe_with_default_async(self) -> None:
        @safe_with_default("fetch", [])
        async def fetch():
            raise OSError("disk")

        assert await fetch() == []

    @pytest.mark.asyncio
    async def test_critical_operation_reraises(self) -> None:
        @critical_operation("load")
        async def load():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await load()
        self.logger.error.assert_called_once()
