"""Unit tests for the exception handlers."""

from typing import Any

import orjson
import pytest
from fastapi.exceptions import RequestValidationError
from pytest_mock import MockerFixture, MockType
from starlette.exceptions import HTTPException

from src.api.middleware.error_handler import (
    brain_agro_error_handler,
    format_validation_error,
    generic_exception_handler,
    http_exception_handler,
    validation_error_handler,
)
from src.core.config import Settings
from src.core.exceptions import BrainAgroError, ErrorCode, NotFoundError, ValidationError


@pytest.fixture
def mock_request(mocker: MockerFixture) -> MockType:
    """Request carrying development settings on the app state."""
    request = mocker.Mock()
    request.method = "POST"
    request.url.path = "/producer"
    request.app.state.settings = Settings(environment="development")
    return request


def body_of(response: Any) -> dict[str, Any]:  # noqa: ANN401 - starlette response
    """Decode a JSON response body."""
    return orjson.loads(response.body)


@pytest.mark.unit
class TestFormatValidationError:
    """Client messages for schema failures."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            ({"type": "missing", "loc": ("body", "taxId")}, '"taxId" is required'),
            (
                {"type": "extra_forbidden", "loc": ("body", "invalidProperty")},
                '"invalidProperty" is not allowed',
            ),
            (
                {
                    "type": "greater_than_equal",
                    "loc": ("body", "totalArea"),
                    "msg": "Input should be greater than or equal to 0",
                },
                '"totalArea": Input should be greater than or equal to 0',
            ),
            (
                {"type": "string_type", "loc": ("body", "crops", 1), "msg": "bad"},
                '"crops.1": bad',
            ),
            ({"type": "missing", "loc": ("body",)}, '"body" is required'),
            (
                {"type": "int_parsing", "loc": ("query", "page"), "msg": "bad int"},
                '"page": bad int',
            ),
            (
                {
                    "type": "json_invalid",
                    "loc": ("body", 12),
                    "msg": "JSON decode error",
                },
                "Invalid JSON body",
            ),
        ],
    )
    def test_messages(self, error: dict[str, Any], expected: str) -> None:
        """Verify each error type renders its message."""
        assert format_validation_error(error) == expected


@pytest.mark.unit
class TestBrainAgroErrorHandler:
    """Domain exceptions."""

    @pytest.mark.parametrize(
        ("exc", "status_code"),
        [
            (ValidationError("Invalid CPF or CNPJ"), 400),
            (ValidationError("Invalid total area"), 400),
            (NotFoundError("Producer not found"), 404),
            (BrainAgroError(ErrorCode.INTERNAL_ERROR, "Broken"), 500),
        ],
    )
    async def test_status_and_envelope(
        self, mock_request: MockType, exc: BrainAgroError, status_code: int
    ) -> None:
        """Verify status mapping and the bare message in the envelope."""
        response = await brain_agro_error_handler(mock_request, exc)

        assert response.status_code == status_code
        assert body_of(response) == {"error": exc.message}

    async def test_rejects_other_exceptions(self, mock_request: MockType) -> None:
        """Verify the handler refuses exceptions it was not registered for."""
        with pytest.raises(TypeError, match="Expected BrainAgroError"):
            await brain_agro_error_handler(mock_request, ValueError("x"))


@pytest.mark.unit
class TestValidationErrorHandler:
    """Schema failures."""

    async def test_reports_first_error(self, mock_request: MockType) -> None:
        """Verify only the first error is reported with status 400."""
        exc = RequestValidationError(
            [
                {"type": "missing", "loc": ("body", "name"), "msg": "Field required"},
                {"type": "missing", "loc": ("body", "city"), "msg": "Field required"},
            ]
        )

        response = await validation_error_handler(mock_request, exc)

        assert response.status_code == 400
        assert body_of(response) == {"error": '"name" is required'}


@pytest.mark.unit
class TestHttpExceptionHandler:
    """Starlette HTTP exceptions."""

    async def test_keeps_status_and_headers(self, mock_request: MockType) -> None:
        """Verify status, detail and headers are preserved."""
        exc = HTTPException(405, "Method Not Allowed", headers={"Allow": "GET"})

        response = await http_exception_handler(mock_request, exc)

        assert response.status_code == 405
        assert response.headers["allow"] == "GET"
        assert body_of(response) == {"error": "Method Not Allowed"}


@pytest.mark.unit
class TestGenericExceptionHandler:
    """Unhandled exceptions."""

    async def test_development_shows_message(self, mock_request: MockType) -> None:
        """Verify the exception text is returned outside production."""
        response = await generic_exception_handler(
            mock_request, RuntimeError("database exploded")
        )

        assert response.status_code == 500
        assert body_of(response) == {"error": "database exploded"}

    async def test_development_empty_message(self, mock_request: MockType) -> None:
        """Verify the type name is used when the exception has no text."""
        response = await generic_exception_handler(mock_request, KeyError())

        assert body_of(response) == {"error": "Internal Server Error: KeyError"}

    async def test_production_hides_details(self, mock_request: MockType) -> None:
        """Verify production responses never leak exception text."""
        mock_request.app.state.settings = Settings(environment="production")

        response = await generic_exception_handler(
            mock_request, RuntimeError("password=hunter2")
        )

        assert response.status_code == 500
        assert body_of(response) == {"error": "Internal server error"}
