"""Brain Agro - rural producer registry and dashboards.

An async FastAPI service that stores producer farm records (CPF/CNPJ, farm
location, land-area breakdown, crops) and serves aggregate dashboards over
them.

Architecture Overview:
- **API Layer**: FastAPI routers, schemas and middleware
- **Core Layer**: Configuration, logging, exceptions and request context
- **Domain Layer**: CPF/CNPJ and area validation, producer write path,
  dashboard aggregation
- **Infrastructure Layer**: Async SQLAlchemy models, session handling and
  repositories
"""
