"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Request

from src.core.config import Settings
from src.domain.producers.service import ProducerService
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.database.producer_repository import ProducerRepository


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    settings: Settings = request.app.state.settings
    return settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_producer_service(
    session: DatabaseSession, settings: AppSettings
) -> ProducerService:
    """Build a producer service bound to the request's session."""
    return ProducerService(ProducerRepository(session), settings.producer_config)


ProducerServiceDep = Annotated[ProducerService, Depends(get_producer_service)]
