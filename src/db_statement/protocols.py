"""Interfaces of the collaborators the statement core consumes.

The core never talks to a driver directly. It prepares statements through a
``StatementFacility``, binds and executes through a ``StatementHandle`` and
reads rows through a ``ResultCursor``. ``db_statement.core.connection`` ships one
implementation of these over DB-API connections; anything shaped the same way
works.
"""

from typing import Any, Optional, Protocol, Sequence, Union, runtime_checkable


@runtime_checkable
class ResultCursor(Protocol):
    """Forward-only, single-pass view over the rows of an executed query."""

    def column_count(self) -> int: ...

    def column_name(self, index: int) -> str:
        """Label of the column at ``index`` (0-based)."""
        ...

    def advance(self) -> bool:
        """Move to the next row. Returns False once the cursor is exhausted."""
        ...

    def value_at(self, index: int) -> Any:
        """Raw driver value of column ``index`` (0-based) in the current row."""
        ...


@runtime_checkable
class StatementHandle(Protocol):
    """A prepared statement with 1-based placeholder slots."""

    def bind_value(self, slot: int, value: Any) -> None: ...

    def execute(self) -> Union[int, ResultCursor]:
        """Run the statement, returning an update count or a result cursor."""
        ...

    def release(self) -> None: ...


@runtime_checkable
class StatementFacility(Protocol):
    """Source of prepared statements, usually backed by one connection."""

    @property
    def placeholder(self) -> str:
        """Positional placeholder the underlying driver expects."""
        ...

    def prepare(self, sql: str) -> StatementHandle: ...


@runtime_checkable
class CharacterLargeObject(Protocol):
    """Driver handle on a character large object (CLOB)."""

    def length(self) -> int: ...

    def get_sub_string(self, position: int, length: int) -> str:
        """Read ``length`` characters starting at 1-based ``position``."""
        ...

    def free(self) -> None: ...


@runtime_checkable
class BinaryLargeObject(Protocol):
    """Driver handle on a binary large object (BLOB)."""

    def length(self) -> int: ...

    def get_bytes(self, position: int, length: int) -> bytes:
        """Read ``length`` bytes starting at 1-based ``position``."""
        ...

    def free(self) -> None: ...


@runtime_checkable
class SqlArray(Protocol):
    """Driver handle on an SQL ARRAY value."""

    def get_array(self) -> Optional[Sequence[Any]]:
        """Element values, or None if the driver cannot materialise them."""
        ...

    def free(self) -> None: ...
