"""Conversion of driver-native values into portable values.

Portable values are what callers see in a ``PortableResult``:

- None, bool, str, bytes
- int (arbitrary precision) and float
- list of portable values
- ISO-8601 timestamps with a UTC offset, as str

Rules are tried in order and the first match wins. Anything no rule claims is
converted with ``str()``.
"""

import datetime
import decimal
import numbers
from typing import Any, Callable, Optional

import orjson

from db_statement.protocols import BinaryLargeObject, CharacterLargeObject, SqlArray
from db_statement.exceptions import NormalizationError

# Largest length a 32-bit signed length field can express
MAX_LOB_LENGTH = 2**31 - 1

# Returned by a converter to hand the value on to the next rule
FALL_THROUGH = object()

Matcher = Callable[[Any], bool]
Converter = Callable[[Any], Any]

_EPOCH_DATE = datetime.date(1970, 1, 1)


def _is_passthrough(value: Any) -> bool:
    return isinstance(value, (bool, str, bytes))


def _is_buffer(value: Any) -> bool:
    return isinstance(value, (bytearray, memoryview))


def _is_decimal(value: Any) -> bool:
    return isinstance(value, decimal.Decimal)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number)


def _is_temporal(value: Any) -> bool:
    return isinstance(value, (datetime.date, datetime.time))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _convert_decimal(value: decimal.Decimal) -> Any:
    # Only a scale of exactly zero is an integer; 4.2E+1 stays lossy
    if value.as_tuple().exponent == 0:
        return int(value)
    if value.is_snan():
        return float("nan")
    return float(value)


def to_iso_utc(value: Any) -> str:
    """
    Render a date, time or datetime as an ISO-8601 instant in UTC.

    Naive values are taken to be UTC already. A date becomes midnight of that
    day and a time is placed on 1970-01-01. Precision is milliseconds.

    Args:
        value: datetime.datetime, datetime.date or datetime.time

    Returns:
        ISO-8601 string ending in ``Z``

    Raises:
        OverflowError: If an aware value cannot be expressed in UTC
    """
    if isinstance(value, datetime.datetime):
        moment = value
    elif isinstance(value, datetime.date):
        moment = datetime.datetime.combine(value, datetime.time())
    else:
        moment = datetime.datetime.combine(_EPOCH_DATE, value)

    if moment.tzinfo is None or moment.utcoffset() is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    else:
        moment = moment.astimezone(datetime.timezone.utc)
    moment = moment.replace(microsecond=moment.microsecond // 1000 * 1000)

    return orjson.loads(orjson.dumps(moment, option=orjson.OPT_UTC_Z))


def _convert_temporal(value: Any) -> Any:
    # Aware values at the edge of the datetime range cannot be moved to UTC
    try:
        return to_iso_utc(value)
    except OverflowError:
        return FALL_THROUGH


class ValueNormalizer:
    """Ordered set of rules turning raw driver values into portable values."""

    def __init__(self, max_lob_length: int = MAX_LOB_LENGTH):
        """
        Initialize normalizer with the built-in rules.

        Args:
            max_lob_length: Most characters or bytes read from one large
                object. Longer objects are truncated to this length.
        """
        if max_lob_length < 1:
            raise ValueError("max_lob_length must be at least 1")
        self.max_lob_length = max_lob_length
        self._rules: list[tuple[Matcher, Converter]] = [
            (lambda value: value is None, lambda value: None),
            (_is_passthrough, lambda value: value),
            (_is_buffer, bytes),
            (_is_decimal, _convert_decimal),
            (_is_number, lambda value: value),
            (_is_temporal, _convert_temporal),
            (self._is_character_lob, self._read_character_lob),
            (self._is_binary_lob, self._read_binary_lob),
            (self._is_sql_array, self._read_sql_array),
            (_is_sequence, self._normalize_sequence),
        ]

    def register(
        self, matcher: Matcher, converter: Converter, index: Optional[int] = None
    ) -> None:
        """
        Add a rule for another source value category.

        Args:
            matcher: Predicate selecting the values the rule handles
            converter: Function producing the portable value, or
                ``FALL_THROUGH`` to let later rules try
            index: Position in the rule list (default: after built-in rules,
                before the ``str()`` fallback)
        """
        rule = (matcher, converter)
        if index is None:
            self._rules.append(rule)
        else:
            self._rules.insert(index, rule)

    def normalize(self, value: Any) -> Any:
        """
        Convert one raw driver value.

        Args:
            value: Value read from a result cursor

        Returns:
            Portable value

        Raises:
            NormalizationError: If a large object or array cannot be read or
                freed
        """
        for matcher, converter in self._rules:
            if not matcher(value):
                continue
            result = converter(value)
            if result is not FALL_THROUGH:
                return result
        return str(value)

    def __call__(self, value: Any) -> Any:
        return self.normalize(value)

    @staticmethod
    def _is_character_lob(value: Any) -> bool:
        return isinstance(value, CharacterLargeObject)

    @staticmethod
    def _is_binary_lob(value: Any) -> bool:
        return isinstance(value, BinaryLargeObject)

    @staticmethod
    def _is_sql_array(value: Any) -> bool:
        return isinstance(value, SqlArray)

    def _read_character_lob(self, value: CharacterLargeObject) -> str:
        try:
            try:
                length = min(value.length(), self.max_lob_length)
                return value.get_sub_string(1, length)
            finally:
                value.free()
        except Exception as e:
            raise NormalizationError(
                f"Failed to read character large object: {e}"
            ) from e

    def _read_binary_lob(self, value: BinaryLargeObject) -> bytes:
        try:
            try:
                length = min(value.length(), self.max_lob_length)
                return bytes(value.get_bytes(1, length))
            finally:
                value.free()
        except Exception as e:
            raise NormalizationError(f"Failed to read binary large object: {e}") from e

    def _read_sql_array(self, value: SqlArray) -> Any:
        try:
            try:
                elements = value.get_array()
                if elements is None:
                    return FALL_THROUGH
                return [self.normalize(element) for element in elements]
            finally:
                value.free()
        except NormalizationError:
            raise
        except Exception as e:
            raise NormalizationError(f"Failed to read SQL array: {e}") from e

    def _normalize_sequence(self, value: Any) -> list[Any]:
        return [self.normalize(element) for element in value]


_default_normalizer = ValueNormalizer()


def normalize_value(value: Any) -> Any:
    """Convert one raw driver value with the default rules."""
    return _default_normalizer.normalize(value)
