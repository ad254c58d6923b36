"""Cross-cutting building blocks shared by every layer.

- **config**: Settings loaded from the environment and .env files
- **context**: Correlation and request IDs stored in contextvars
- **error_context**: Redaction of tax identifiers and secrets before logging
- **exceptions**: Domain exception hierarchy mapped to HTTP statuses
- **logging**: Loguru setup with console and JSON formatters
"""
