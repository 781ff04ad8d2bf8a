"""Statement execution: prepare, bind, execute and materialize."""

import logging
import time
from typing import Any, Callable, Optional, Sequence, TypeVar

from db_statement.core.binder import bind_parameters
from db_statement.core.materializer import as_portable_result
from db_statement.core.named_parameters import has_named_parameters, translate
from db_statement.models.result import PortableResult, UpdateResult
from db_statement.protocols import StatementFacility, StatementHandle
from db_statement.utils.normalization import normalize_value

logger = logging.getLogger(__name__)

T = TypeVar("T")

Normalizer = Callable[[Any], Any]
StatementHook = Callable[[StatementHandle], T]


def execute(
    connection: StatementFacility,
    sql: str,
    parameters: Optional[Sequence[Any]],
    hook: Callable[[StatementHandle], T],
) -> T:
    """
    Run one statement invocation.

    Templates containing named placeholders are rewritten to the driver's
    positional placeholder before they are prepared, and ``parameters`` is
    then read as keyed records. Otherwise the template is prepared verbatim
    and ``parameters`` is positional. ``hook`` receives the bound statement,
    executes it and builds the invocation's result.

    The prepared statement is released on every exit path. Errors from the
    driver, the binder or the hook propagate unchanged.

    Args:
        connection: Statement facility to prepare on
        sql: SQL template
        parameters: Positional values or keyed records (may be None)
        hook: Executes the statement and returns the result

    Returns:
        Whatever ``hook`` returns
    """
    named_parameters = None
    prepared_sql = sql
    if has_named_parameters(sql):
        prepared_sql, named_parameters = translate(sql, connection.placeholder)
        logger.debug(
            f"Rewrote named parameters {list(named_parameters)}: {prepared_sql}"
        )

    statement = connection.prepare(prepared_sql)
    try:
        bound = bind_parameters(statement, parameters, named_parameters)
        logger.debug(f"Bound {bound} parameter slot(s)")

        start_time = time.time()
        result = hook(statement)
        execution_time = (time.time() - start_time) * 1000  # Convert to ms
        logger.debug(f"Statement executed in {execution_time:.2f} ms")

        return result
    finally:
        statement.release()


def query_hook(normalizer: Optional[Normalizer] = None) -> StatementHook[PortableResult]:
    """
    Build a hook that executes a query and materializes its rows.

    Args:
        normalizer: Converter for raw values (default: ``normalize_value``)

    Returns:
        Hook producing a PortableResult

    Raises:
        TypeError: (from the hook) If the statement returned an update count
    """

    def run(statement: StatementHandle) -> PortableResult:
        outcome = statement.execute()
        if isinstance(outcome, int):
            raise TypeError("Statement did not produce a result set")
        return as_portable_result(outcome, normalizer)

    return run


def update_hook(normalizer: Optional[Normalizer] = None) -> StatementHook[UpdateResult]:
    """
    Build a hook that executes a data-changing statement.

    Generated keys are taken from the statement's ``generated_keys()`` when
    the facility provides it.

    Args:
        normalizer: Converter for generated key values

    Returns:
        Hook producing an UpdateResult

    Raises:
        TypeError: (from the hook) If the statement returned a result set
    """
    convert = normalizer or normalize_value

    def run(statement: StatementHandle) -> UpdateResult:
        outcome = statement.execute()
        if not isinstance(outcome, int):
            raise TypeError("Statement produced a result set; run it as a query")

        generated_keys = getattr(statement, "generated_keys", None)
        keys = [convert(key) for key in generated_keys()] if callable(generated_keys) else []
        return UpdateResult(updated=outcome, keys=keys)

    return run


class StatementExecutor:
    """Runs statements against one statement facility."""

    def __init__(
        self,
        connection: StatementFacility,
        normalizer: Optional[Normalizer] = None,
    ):
        """
        Initialize statement executor.

        Args:
            connection: Statement facility, e.g. a DbapiConnection
            normalizer: Converter for raw values (default: ``normalize_value``)
        """
        self.connection = connection
        self.normalizer = normalizer

    def execute(
        self,
        sql: str,
        parameters: Optional[Sequence[Any]],
        hook: Callable[[StatementHandle], T],
    ) -> T:
        """Run ``sql`` with a caller-supplied hook."""
        return execute(self.connection, sql, parameters, hook)

    def query(
        self, sql: str, parameters: Optional[Sequence[Any]] = None
    ) -> PortableResult:
        """
        Execute a query and return its rows.

        Args:
            sql: SQL template
            parameters: Positional values or keyed records

        Returns:
            Portable result
        """
        return execute(self.connection, sql, parameters, query_hook(self.normalizer))

    def update(
        self, sql: str, parameters: Optional[Sequence[Any]] = None
    ) -> UpdateResult:
        """
        Execute an INSERT, UPDATE or DELETE statement.

        Args:
            sql: SQL template
            parameters: Positional values or keyed records

        Returns:
            Update count and generated keys
        """
        return execute(self.connection, sql, parameters, update_hook(self.normalizer))
