"""Pydantic models for configuration and results."""

from .config import DatabaseConfig
from .result import PortableResult, UpdateResult

__all__ = [
    "DatabaseConfig",
    "PortableResult",
    "UpdateResult",
]
