"""Database infrastructure with async SQLAlchemy and the repository pattern.

Core components:
- **base**: Declarative base and common model fields
- **models**: The ``producers`` table
- **session**: The ``Database`` handle (engine, sessions, health check)
- **repository**: Generic repository with CRUD operations
- **producer_repository**: Producer CRUD plus dashboard aggregate queries
- **dependencies**: FastAPI dependency injection helpers
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import (
    DatabaseHandle,
    DatabaseSession,
    get_database,
    get_db,
)
from src.infrastructure.database.models import Producer
from src.infrastructure.database.producer_repository import (
    AreaTotals,
    ProducerRepository,
)
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import Database, create_database_engine

__all__ = [
    "AreaTotals",
    "Base",
    "BaseModel",
    "BaseRepository",
    "Database",
    "DatabaseHandle",
    "DatabaseSession",
    "Producer",
    "ProducerRepository",
    "create_database_engine",
    "get_database",
    "get_db",
]
