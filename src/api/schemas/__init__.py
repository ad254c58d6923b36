"""Pydantic schema models for API request/response validation.

This package contains:
- **producers**: Producer create/update bodies and the read model
- **errors**: The ``{"error": message}`` envelope used for every failure
"""
