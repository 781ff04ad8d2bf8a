"""
db_statement - Statement execution core for DB-API databases

Prepares SQL templates with positional or named placeholders, binds parameter
sets into them and converts query results into portable, JSON-friendly values.
"""

__version__ = "1.0.0"

from .core import (
    DatabaseConnection,
    StatementExecutor,
    as_portable_result,
    execute,
    query_hook,
    update_hook,
)
from .exceptions import MissingParameterError, NormalizationError, StatementAdapterError
from .models import DatabaseConfig, PortableResult, UpdateResult
from .utils import ValueNormalizer, normalize_value

__all__ = [
    "DatabaseConfig",
    "DatabaseConnection",
    "StatementExecutor",
    "execute",
    "query_hook",
    "update_hook",
    "as_portable_result",
    "PortableResult",
    "UpdateResult",
    "ValueNormalizer",
    "normalize_value",
    "StatementAdapterError",
    "NormalizationError",
    "MissingParameterError",
]
