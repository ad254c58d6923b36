"""HTTP API layer with FastAPI for the Brain Agro service.

Key components:
- **main**: Application factory and lifecycle management
- **routers**: The ``/producer`` CRUD and dashboard endpoints
- **middleware**: Request context, request logging and exception handlers
- **schemas**: Pydantic request/response models and the error envelope
- **utils**: orjson-backed JSON responses

The API layer translates between HTTP and the producer domain; business
rules live in :mod:`src.domain`.
"""
