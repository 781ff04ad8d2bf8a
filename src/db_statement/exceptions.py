"""Exceptions raised by the statement execution core.

Driver errors (DB-API ``Error`` subclasses, SQLAlchemy errors) are never
wrapped; they reach the caller unchanged.
"""


class StatementAdapterError(Exception):
    """Base class for errors raised by db_statement itself."""


class NormalizationError(StatementAdapterError, RuntimeError):
    """Reading or freeing a large object or SQL array failed."""


class MissingParameterError(StatementAdapterError):
    """A statement was executed with an unbound placeholder slot."""

    def __init__(self, slot: int):
        self.slot = slot
        super().__init__(f"No value bound for parameter slot {slot}")
