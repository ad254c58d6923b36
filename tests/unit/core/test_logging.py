"""Unit tests for src.core.logging module."""

import json
import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import pytest
from loguru import logger
from pytest_mock import MockerFixture

from src.core.config import LogConfig, Settings
from src.core.error_context import REDACTED
from src.core.logging import (
    InterceptHandler,
    _format_extra_field,
    _format_priority_field,
    _state,
    make_console_formatter,
    serialize_for_json,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None]:
    """Allow each test to configure logging from scratch."""
    _state.configured = False
    yield
    _state.configured = False
    logger.remove()


def make_record(**extra: Any) -> dict[str, Any]:  # noqa: ANN401 - loguru record values
    """Build a minimal Loguru-like record."""
    level = type("Level", (), {"name": "INFO"})()
    return {
        "time": datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC),
        "level": level,
        "message": "Producer created",
        "name": "src.domain.producers.service",
        "function": "create",
        "line": 42,
        "extra": extra,
        "exception": None,
    }


@pytest.mark.unit
class TestConsoleFormatting:
    """Console formatter helpers."""

    def test_correlation_id_truncated(self) -> None:
        """Verify long correlation IDs are shortened for display."""
        assert _format_priority_field("correlation_id", "abcdefgh-1234") == "abcdefgh"

    def test_duration_suffix(self) -> None:
        """Verify durations are shown in milliseconds."""
        assert _format_priority_field("duration_ms", 12.5) == "12.5ms"

    @pytest.mark.parametrize(
        ("status", "color"), [(201, "green"), (404, "red"), (500, "red")]
    )
    def test_status_code_colored(self, status: int, color: str) -> None:
        """Verify status codes are colored by class."""
        assert _format_priority_field("status_code", status) == (
            f"<{color}>{status}</{color}>"
        )

    def test_extra_field_redacted(self) -> None:
        """Verify configured sensitive keys are redacted."""
        assert _format_extra_field("tax_id", "529", ["tax_id"]) == f"tax_id={REDACTED}"

    def test_extra_field_truncated_and_escaped(self) -> None:
        """Verify long values are truncated and braces escaped."""
        assert _format_extra_field("crops", "{x}", []) == "crops={{x}}"
        assert _format_extra_field("note", "a" * 500, []).endswith("...")

    def test_formatter_places_priority_fields_first(self) -> None:
        """Verify context appears in priority order before other fields."""
        formatter = make_console_formatter(["tax_id"])

        line = formatter(
            make_record(state="MG", correlation_id="12345678-aaaa", producer_id=7)
        )

        assert line.index("12345678") < line.index("7</yellow>")
        assert line.index("7</yellow>") < line.index("state=MG")
        assert "{message}" in line
        assert line.endswith("\n")


@pytest.mark.unit
class TestJsonSerialization:
    """JSON output."""

    def test_serialize_for_json(self) -> None:
        """Verify records become one JSON object with sanitized extras."""
        output = serialize_for_json(
            make_record(producer_id=7, tax_id="529.982.247-25", _private="x")
        )

        entry = json.loads(output)
        assert output.endswith("\n")
        assert entry["message"] == "Producer created"
        assert entry["level"] == "INFO"
        assert entry["producer_id"] == 7
        assert entry["tax_id"] == REDACTED
        assert "_private" not in entry


@pytest.mark.unit
class TestSetupLogging:
    """Logging configuration."""

    def test_console_sink(self, mocker: MockerFixture) -> None:
        """Verify the console formatter adds a colorized stdout sink."""
        mock_add = mocker.patch("src.core.logging.logger.add")
        settings = Settings(log_config=LogConfig(log_formatter_type="console"))

        setup_logging(settings)

        kwargs = mock_add.call_args.kwargs
        assert kwargs["colorize"] is True
        assert kwargs["level"] == "INFO"
        assert _state.configured is True

    def test_json_sink(self, mocker: MockerFixture) -> None:
        """Verify the JSON formatter writes through the JSON sink."""
        mock_add = mocker.patch("src.core.logging.logger.add")
        settings = Settings(log_config=LogConfig(log_formatter_type="json"))

        setup_logging(settings)

        assert mock_add.call_args.args[0].__name__ == "_json_sink"

    def test_configures_only_once(self, mocker: MockerFixture) -> None:
        """Verify repeated calls are no-ops."""
        mock_add = mocker.patch("src.core.logging.logger.add")
        settings = Settings(log_config=LogConfig(log_formatter_type="json"))

        setup_logging(settings)
        setup_logging(settings)

        mock_add.assert_called_once()

    def test_uvicorn_loggers_intercepted(self, mocker: MockerFixture) -> None:
        """Verify uvicorn loggers are routed through the intercept handler."""
        mocker.patch("src.core.logging.logger.add")

        setup_logging(Settings(log_config=LogConfig(log_formatter_type="json")))

        uvicorn_logger = logging.getLogger("uvicorn.access")
        assert isinstance(uvicorn_logger.handlers[0], InterceptHandler)
        assert uvicorn_logger.propagate is False


@pytest.mark.unit
class TestInterceptHandler:
    """Standard library forwarding."""

    def test_forwards_to_loguru(self) -> None:
        """Verify stdlib records reach Loguru with their level and message."""
        messages: list[str] = []
        logger.remove()
        logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")

        std_logger = logging.getLogger("test.intercept")
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(logging.DEBUG)

        std_logger.warning("database %s", "ready")

        assert messages == ["database ready"]
