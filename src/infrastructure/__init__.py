"""Infrastructure layer: persistence of producer records.

Key responsibilities:
- **Database access**: Async SQLAlchemy 2.0 over PostgreSQL (asyncpg) or
  SQLite (aiosqlite)
- **Repository pattern**: Generic CRUD plus producer aggregate queries
- **Connection management**: Pooling, health checks and lifecycle
"""
