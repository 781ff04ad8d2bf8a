"""Turn a driver result cursor into a PortableResult."""

from typing import Callable, Optional

from db_statement.models.result import PortableResult
from db_statement.protocols import ResultCursor
from db_statement.utils.normalization import normalize_value


def as_portable_result(
    cursor: ResultCursor,
    normalizer: Optional[Callable[[object], object]] = None,
) -> PortableResult:
    """
    Read a cursor to exhaustion into memory.

    Column labels are read once, before any row. The cursor is single pass;
    materializing it a second time is not supported.

    Args:
        cursor: Result cursor positioned before the first row
        normalizer: Converter for raw values (default: ``normalize_value``)

    Returns:
        Portable result with one row per cursor row
    """
    convert = normalizer or normalize_value

    count = cursor.column_count()
    columns = [cursor.column_name(index) for index in range(count)]

    rows = []
    while cursor.advance():
        rows.append([convert(cursor.value_at(index)) for index in range(count)])

    return PortableResult(columns=columns, rows=rows)
