"""FastAPI middleware and exception handlers.

- **RequestContextMiddleware**: Correlation and request IDs for every request
- **RequestLoggingMiddleware**: Request start/completion logs with timing
- **error_handler**: Maps exceptions to the ``{"error": message}`` envelope

Middleware run in reverse order of registration, so the request context is
set up before the logging middleware sees the request.
"""
