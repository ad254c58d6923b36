"""Shared fixtures for integration tests.

Every test gets a fresh application backed by its own SQLite database file,
so tests never share rows.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from loguru import logger

from src.api.main import create_app
from src.core.config import DatabaseConfig, LogConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import configure_sensitive_fields
from src.core.logging import _state
from src.infrastructure.database.base import Base
from src.infrastructure.database.session import Database


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear cached and app-installed settings before and after each test."""
    get_settings.cache_clear()
    configure_sensitive_fields(None)
    yield
    get_settings.cache_clear()
    configure_sensitive_fields(None)


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None]:
    """Keep app creation from adding stdout sinks during tests."""
    logger.remove()
    _state.configured = True
    yield
    logger.remove()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """URL of a throwaway SQLite database for this test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def settings_factory(database_url: str) -> Any:  # noqa: ANN401 - factory
    """Build test settings pointing at the throwaway database."""

    def _create(**overrides: Any) -> Settings:
        fields: dict[str, Any] = {
            "environment": "development",
            "debug": False,
            "database_config": DatabaseConfig(database_url=database_url),
            "log_config": LogConfig(log_formatter_type="console"),
        }
        return Settings(**{**fields, **overrides})

    return _create


@pytest.fixture
def test_settings(settings_factory: Any) -> Settings:  # noqa: ANN401 - factory fixture
    """Default test settings."""
    return settings_factory()


async def create_schema(database: Database) -> None:
    """Create every table on the database."""
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def app(test_settings: Settings) -> AsyncGenerator[FastAPI]:
    """Application with its schema created and its engine disposed afterwards."""
    application = create_app(test_settings)
    database: Database = application.state.database
    await create_schema(database)

    yield application

    await database.dispose()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client talking to the application in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def database(app: FastAPI) -> Database:
    """The application's database handle."""
    handle: Database = app.state.database
    return handle


@pytest.fixture
def producer_payload() -> dict[str, Any]:
    """A valid create body."""
    return {
        "name": "João da Silva",
        "taxId": "529.982.247-25",
        "farmName": "Fazenda Boa Vista",
        "city": "Uberaba",
        "state": "MG",
        "totalArea": 100,
        "agriculturalArea": 60,
        "vegetationArea": 30,
        "crops": ["Soja", "Milho"],
    }
