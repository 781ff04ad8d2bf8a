"""Database connection management with SQLAlchemy.

``DatabaseConnection`` owns a synchronous engine and its pool. Each
``get_connection()`` block checks out one raw DB-API connection and exposes it
as a ``DbapiConnection``, the statement facility the executor prepares on.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Union

from sqlalchemy import Engine, create_engine

from db_statement.core.executor import StatementExecutor
from db_statement.exceptions import MissingParameterError
from db_statement.models.config import DatabaseConfig
from db_statement.utils.normalization import ValueNormalizer

logger = logging.getLogger(__name__)

# DB-API paramstyle -> positional placeholder written into rewritten SQL
PLACEHOLDERS = {
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
}

# Statements whose lastrowid is a generated key
INSERT_STATEMENT = re.compile(r"^\s*(INSERT|REPLACE)\b", re.IGNORECASE)


class DbapiCursor:
    """Result cursor over a DB-API cursor."""

    def __init__(self, cursor: Any):
        self._cursor = cursor
        self._description = cursor.description or ()
        self._row: Optional[Any] = None

    def column_count(self) -> int:
        return len(self._description)

    def column_name(self, index: int) -> str:
        return self._description[index][0]

    def advance(self) -> bool:
        self._row = self._cursor.fetchone()
        return self._row is not None

    def value_at(self, index: int) -> Any:
        if self._row is None:
            raise RuntimeError("Cursor is not positioned on a row")
        return self._row[index]


class DbapiStatement:
    """Prepared statement on a DB-API connection.

    DB-API has no separate prepare step, so values are collected per slot and
    handed to ``cursor.execute`` in slot order. Drivers that interpolate with
    ``%`` always receive a parameter list, so ``%%`` in the SQL is unescaped
    even when nothing was bound.
    """

    def __init__(self, dbapi_connection: Any, sql: str, interpolates: bool = False):
        self.sql = sql
        self.interpolates = interpolates
        self._dbapi_connection = dbapi_connection
        self._cursor: Optional[Any] = None
        self._slots: dict[int, Any] = {}
        self._inserted = False
        self._released = False

    def _require_open(self) -> None:
        if self._released:
            raise RuntimeError("Statement has been released")

    def bind_value(self, slot: int, value: Any) -> None:
        """Bind ``value`` to 1-based placeholder ``slot``."""
        self._require_open()
        if slot < 1:
            raise ValueError(f"Parameter slots are 1-based, got {slot}")
        self._slots[slot] = value

    def _ordered_parameters(self) -> Optional[list[Any]]:
        if not self._slots:
            return None

        parameters = []
        for slot in range(1, max(self._slots) + 1):
            if slot not in self._slots:
                raise MissingParameterError(slot)
            parameters.append(self._slots[slot])
        return parameters

    def execute(self) -> Union[int, DbapiCursor]:
        """
        Execute with the bound values.

        Returns:
            DbapiCursor if the statement produced rows, otherwise the
            driver's row count

        Raises:
            MissingParameterError: If a slot below the highest bound one is
                unbound
        """
        self._require_open()
        parameters = self._ordered_parameters()
        if parameters is None and self.interpolates:
            parameters = []

        if self._cursor is not None:
            self._cursor.close()
        self._cursor = self._dbapi_connection.cursor()

        if parameters is None:
            self._cursor.execute(self.sql)
        else:
            self._cursor.execute(self.sql, parameters)

        if self._cursor.description is not None:
            self._inserted = False
            return DbapiCursor(self._cursor)
        rowcount = self._cursor.rowcount
        self._inserted = rowcount > 0 and INSERT_STATEMENT.match(self.sql) is not None
        return rowcount

    def generated_keys(self) -> list[Any]:
        """
        Row id of the row inserted by the last execute.

        Drivers such as sqlite3 keep ``lastrowid`` from an earlier INSERT on
        the connection, so it is only reported after an INSERT or REPLACE that
        changed rows.
        """
        if not self._inserted:
            return []
        lastrowid = getattr(self._cursor, "lastrowid", None)
        return [lastrowid] if lastrowid else []

    def release(self) -> None:
        """Close the underlying cursor. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None


class DbapiConnection:
    """Statement facility over one DB-API connection."""

    def __init__(self, dbapi_connection: Any, paramstyle: str = "qmark"):
        """
        Initialize statement facility.

        Args:
            dbapi_connection: DB-API connection (raw or pool-proxied)
            paramstyle: The driver's DB-API ``paramstyle``

        Raises:
            ValueError: If the driver does not take positional placeholders
        """
        placeholder = PLACEHOLDERS.get(paramstyle)
        if placeholder is None:
            raise ValueError(
                f"Unsupported paramstyle: {paramstyle}. "
                f"Supported: {', '.join(PLACEHOLDERS)}"
            )
        self.dbapi_connection = dbapi_connection
        self.paramstyle = paramstyle
        self._placeholder = placeholder

    @property
    def placeholder(self) -> str:
        """Positional placeholder for this driver."""
        return self._placeholder

    def prepare(self, sql: str) -> DbapiStatement:
        return DbapiStatement(
            self.dbapi_connection, sql, interpolates=self._placeholder == "%s"
        )


class DatabaseConnection:
    """Manages SQLAlchemy engine and connection pool."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database connection.

        Args:
            config: Database configuration with connection URL and pool settings
        """
        self.config = config
        self.engine: Optional[Engine] = None
        self._dialect = config.dialect
        self._driver = config.driver

    def initialize(self) -> None:
        """Create the engine."""
        if self.engine is not None:
            return  # Already initialized

        engine_args: dict[str, Any] = {
            "pool_pre_ping": True,  # Verify connections before using
            "echo": self.config.echo_sql,
        }
        # SQLite engines use single-connection pools without sizing options
        if self._dialect != "sqlite":
            engine_args.update(
                pool_size=self.config.pool_size,
                max_overflow=self.config.max_overflow,
                pool_timeout=self.config.pool_timeout,
            )

        self.engine = create_engine(self.config.url, **engine_args)
        logger.info(f"Created {self._dialect} engine (driver: {self._driver or 'default'})")

    def dispose(self) -> None:
        """Dispose of the connection pool and cleanup resources."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info(f"Disposed {self._dialect} engine")

    @property
    def paramstyle(self) -> str:
        """DB-API paramstyle of the engine's driver."""
        if self.engine is None:
            raise RuntimeError(
                "DatabaseConnection not initialized. Call initialize() first."
            )
        return getattr(self.engine.dialect.dbapi, "paramstyle", "qmark")

    @contextmanager
    def get_connection(self) -> Iterator[DbapiConnection]:
        """
        Check out a connection from the pool.

        The transaction is committed when the block exits normally and rolled
        back when it raises; the connection then returns to the pool.

        Yields:
            DbapiConnection for preparing statements

        Raises:
            RuntimeError: If engine not initialized
        """
        if self.engine is None:
            raise RuntimeError(
                "DatabaseConnection not initialized. Call initialize() first."
            )

        raw_connection = self.engine.raw_connection()
        try:
            yield DbapiConnection(raw_connection, self.paramstyle)
            raw_connection.commit()
            logger.debug("Committed transaction")
        except BaseException:
            raw_connection.rollback()
            logger.debug("Rolled back transaction")
            raise
        finally:
            raw_connection.close()

    @property
    def normalizer(self) -> ValueNormalizer:
        """Value normalizer honouring the configured large-object limit."""
        return ValueNormalizer(max_lob_length=self.config.max_lob_length)

    @property
    def dialect(self) -> str:
        """Get database dialect name."""
        return self._dialect

    @property
    def driver(self) -> str:
        """Get database driver name."""
        return self._driver

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self.engine is not None

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_connection() as conn:
                StatementExecutor(conn).query("SELECT 1")
            return True
        except Exception:
            return False

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.dispose()
