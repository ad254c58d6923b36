"""Domain layer.

Business rules live here, independent of HTTP. Modules raise the exceptions
from :mod:`src.core.exceptions` and talk to storage through repositories.
"""
