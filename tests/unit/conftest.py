"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from typing import Any, cast

import pytest
from pytest_mock import MockerFixture, MockType

from src.core.config import LogConfig, ProducerConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import (
    _settings_sensitive_fields,
    configure_sensitive_fields,
)
from src.infrastructure.database.models import Producer


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment values.

    Returns:
        Settings: Settings object with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")

    return Settings()


@pytest.fixture
def mock_uvicorn(mocker: MockerFixture) -> MockType:
    """Mock uvicorn.run to prevent server startup."""
    return mocker.patch("uvicorn.run")


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Isolate environment variables for testing."""
    monkeypatch.delenv("PORT", raising=False)
    return monkeypatch


@pytest.fixture
def mock_main_dependencies(
    mocker: MockerFixture,
    mock_settings: Settings,
) -> dict[str, MockType]:
    """Mock common main.py dependencies.

    Returns:
        dict[str, MockType]: Dictionary of mocked dependencies.
    """
    mocks = {
        "get_settings": mocker.patch("main.get_settings"),
        "setup_logging": mocker.patch("main.setup_logging"),
        "logger": mocker.patch("main.logger"),
        "uvicorn_run": mocker.patch("uvicorn.run"),
    }
    mocks["get_settings"].return_value = mock_settings
    return mocks


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings caches before and after each test."""
    get_settings.cache_clear()
    _settings_sensitive_fields.cache_clear()
    configure_sensitive_fields(None)
    yield
    get_settings.cache_clear()
    _settings_sensitive_fields.cache_clear()
    configure_sensitive_fields(None)


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Remove app-specific environment variables for the duration of a test.

    Cloud detection variables are left alone; tests set them explicitly.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "CORS_",
        "LOG_CONFIG__",
        "DATABASE_CONFIG__",
        "PRODUCER_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def mock_cloud_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Helpers that simulate container platforms (Cloud Run, AWS)."""

    def set_gcp() -> None:
        monkeypatch.setenv("K_SERVICE", "test-service")

    def set_aws() -> None:
        monkeypatch.setenv("AWS_EXECUTION_ENV", "AWS_ECS_FARGATE")

    def clear_all() -> None:
        for key in ["K_SERVICE", "AWS_EXECUTION_ENV"]:
            monkeypatch.delenv(key, raising=False)

    return {"set_gcp": set_gcp, "set_aws": set_aws, "clear_all": clear_all}


@pytest.fixture
def mock_get_settings(mocker: MockerFixture) -> MockType:
    """Patch error_context's settings lookup with custom sensitive fields."""
    mock_settings = mocker.Mock(spec=Settings)
    mock_log_config = mocker.Mock(spec=LogConfig)
    mock_log_config.sensitive_fields = ["custom_secret", "farm_code"]
    mock_settings.log_config = mock_log_config

    mock_get_settings_fn = mocker.patch("src.core.error_context.get_settings")
    mock_get_settings_fn.return_value = mock_settings

    _settings_sensitive_fields.cache_clear()

    return cast("MockType", mock_get_settings_fn)


@pytest.fixture
def producer_config() -> ProducerConfig:
    """Default producer configuration."""
    return ProducerConfig()


@pytest.fixture
def producer_data() -> dict[str, Any]:
    """Valid producer attributes in their Python (snake_case) form."""
    return {
        "name": "João da Silva",
        "tax_id": "529.982.247-25",
        "farm_name": "Fazenda Boa Vista",
        "city": "Uberaba",
        "state": "MG",
        "total_area": 100.0,
        "agricultural_area": 60.0,
        "vegetation_area": 30.0,
        "crops": ["Soja", "Milho"],
    }


@pytest.fixture
def make_producer(producer_data: dict[str, Any]) -> Any:  # noqa: ANN401 - factory
    """Factory for in-memory Producer instances with an id assigned."""

    def _make(producer_id: int = 1, **overrides: Any) -> Producer:
        return Producer(id=producer_id, **{**producer_data, **overrides})

    return _make
