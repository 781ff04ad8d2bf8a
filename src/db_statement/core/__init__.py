"""Core statement execution components."""

from .binder import bind_parameters
from .connection import DatabaseConnection, DbapiConnection, DbapiCursor, DbapiStatement
from .executor import StatementExecutor, execute, query_hook, update_hook
from .materializer import as_portable_result
from .named_parameters import has_named_parameters, translate

__all__ = [
    "DatabaseConnection",
    "DbapiConnection",
    "DbapiStatement",
    "DbapiCursor",
    "StatementExecutor",
    "execute",
    "query_hook",
    "update_hook",
    "as_portable_result",
    "bind_parameters",
    "has_named_parameters",
    "translate",
]
