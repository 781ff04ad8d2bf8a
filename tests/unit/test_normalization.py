"""Unit tests for driver value normalization."""

import datetime
import math
import uuid
from decimal import Decimal

import pytest

from db_statement.core.materializer import as_portable_result
from db_statement.exceptions import NormalizationError
from db_statement.utils.normalization import (
    FALL_THROUGH,
    ValueNormalizer,
    normalize_value,
    to_iso_utc,
)
from tests.fakes import DriverError, FakeArray, FakeBlob, FakeClob, ListCursor


class TestPassthrough:
    """Values that are already portable."""

    @pytest.mark.parametrize(
        "value",
        [None, True, False, "", "text", b"\x00\x01", 0, -5, 2**80, 1.5],
    )
    def test_idempotent(self, value):
        """Portable values come back unchanged."""
        assert normalize_value(value) == value
        assert normalize_value(normalize_value(value)) == value

    def test_bool_stays_bool(self):
        """Booleans are not treated as numbers."""
        assert normalize_value(True) is True

    def test_buffers_become_bytes(self):
        """bytearray and memoryview turn into bytes."""
        assert normalize_value(bytearray(b"ab")) == b"ab"
        assert normalize_value(memoryview(b"cd")) == b"cd"
        assert type(normalize_value(memoryview(b"cd"))) is bytes


class TestDecimal:
    """Arbitrary-precision decimals."""

    def test_zero_scale_is_int(self):
        """A decimal without fraction digits becomes an int."""
        result = normalize_value(Decimal("42"))

        assert result == 42
        assert type(result) is int

    def test_large_zero_scale_keeps_precision(self):
        """Integer conversion is lossless."""
        value = Decimal("123456789012345678901234567890")

        assert normalize_value(value) == 123456789012345678901234567890

    def test_fraction_is_float(self):
        """A decimal with fraction digits becomes a float."""
        result = normalize_value(Decimal("42.5"))

        assert result == 42.5
        assert type(result) is float

    def test_trailing_zero_scale_is_float(self):
        """Scale, not value, decides: 42.0 has a scale of one."""
        assert type(normalize_value(Decimal("42.0"))) is float

    def test_nan(self):
        """NaN decimals become float NaN."""
        assert math.isnan(normalize_value(Decimal("NaN")))
        assert math.isnan(normalize_value(Decimal("sNaN")))


class TestTemporal:
    """Dates, times and timestamps."""

    def test_epoch(self):
        """The epoch renders with a zero offset."""
        value = datetime.datetime(1970, 1, 1, 0, 0, 0)

        assert normalize_value(value) == "1970-01-01T00:00:00Z"

    def test_aware_converted_to_utc(self):
        """Aware timestamps are moved to UTC."""
        tz = datetime.timezone(datetime.timedelta(hours=2))
        value = datetime.datetime(2024, 1, 15, 12, 30, 0, tzinfo=tz)

        assert normalize_value(value) == "2024-01-15T10:30:00Z"

    def test_date(self):
        """A date is midnight UTC."""
        assert normalize_value(datetime.date(2024, 1, 15)) == "2024-01-15T00:00:00Z"

    def test_time(self):
        """A time lands on the epoch day."""
        assert normalize_value(datetime.time(10, 30)) == "1970-01-01T10:30:00Z"

    def test_millisecond_precision(self):
        """Sub-millisecond digits are dropped."""
        value = datetime.datetime(2024, 1, 15, 10, 30, 0, 123456)

        result = to_iso_utc(value)

        assert result.startswith("2024-01-15T10:30:00.123")
        assert "456" not in result
        assert result.endswith("Z")

    def test_out_of_range_offset_falls_back_to_string(self):
        """An aware value that overflows when moved to UTC is stringified."""
        tz = datetime.timezone(datetime.timedelta(hours=-5))
        value = datetime.datetime(9999, 12, 31, 23, 0, tzinfo=tz)

        assert normalize_value(value) == str(value)


class TestLargeObjects:
    """CLOB and BLOB handles."""

    def test_clob_read_and_freed(self):
        """A CLOB is read in full and freed."""
        clob = FakeClob("hello world")

        assert normalize_value(clob) == "hello world"
        assert clob.requested == (1, 11)
        assert clob.freed is True

    def test_clob_truncated_to_limit(self):
        """Reads stop at the configured length."""
        clob = FakeClob("abcdef")

        assert ValueNormalizer(max_lob_length=3).normalize(clob) == "abc"

    def test_clob_read_failure_still_frees(self):
        """Failures are wrapped and the handle is still freed."""
        cause = DriverError("read failed")
        clob = FakeClob("x", read_error=cause)

        with pytest.raises(NormalizationError) as exc_info:
            normalize_value(clob)

        assert exc_info.value.__cause__ is cause
        assert isinstance(exc_info.value, RuntimeError)
        assert clob.freed is True

    def test_blob_read_and_freed(self):
        """A BLOB is read in full as bytes and freed."""
        blob = FakeBlob(b"\x00\xff\x10")

        assert normalize_value(blob) == b"\x00\xff\x10"
        assert blob.freed is True

    def test_blob_free_failure(self):
        """A failure to free is a normalization error."""
        blob = FakeBlob(b"data", free_error=DriverError("free failed"))

        with pytest.raises(NormalizationError, match="binary large object"):
            normalize_value(blob)

    def test_blob_truncated_to_limit(self):
        """Binary reads stop at the configured length."""
        blob = FakeBlob(b"\x01\x02\x03\x04\x05")

        assert ValueNormalizer(max_lob_length=2).normalize(blob) == b"\x01\x02"
        assert blob.freed is True

    def test_earlier_lob_freed_when_later_column_fails(self):
        """Each large object in a row is freed as it is read."""
        clob = FakeClob("first")
        blob = FakeBlob(b"second", free_error=DriverError("free failed"))
        cursor = ListCursor(["notes", "avatar"], [(clob, blob)])

        with pytest.raises(NormalizationError, match="binary large object"):
            as_portable_result(cursor)

        assert clob.freed is True
        assert blob.freed is True


class TestArrays:
    """SQL arrays and native sequences."""

    def test_native_list(self):
        """Each element of a list is normalized independently."""
        assert normalize_value([1, "a", None]) == [1, "a", None]

    def test_nested_conversion(self):
        """Elements go through every rule, tuples become lists."""
        value = (Decimal("2"), datetime.date(1970, 1, 2), [Decimal("0.5")])

        assert normalize_value(value) == [2, "1970-01-02T00:00:00Z", [0.5]]

    def test_sql_array_read_and_freed(self):
        """An SQL array handle is read, normalized and freed."""
        array = FakeArray([1, "a", None, Decimal("3")])

        assert normalize_value(array) == [1, "a", None, 3]
        assert array.freed is True

    def test_unavailable_array_falls_back_to_string(self):
        """If the driver cannot materialize the array, str() is used."""
        array = FakeArray(None)

        assert normalize_value(array) == "FakeArray(unavailable)"
        assert array.freed is True

    def test_array_read_failure(self):
        """Read failures are wrapped and the handle is freed."""
        array = FakeArray([1], read_error=DriverError("boom"))

        with pytest.raises(NormalizationError, match="SQL array"):
            normalize_value(array)
        assert array.freed is True

    def test_nested_failure_not_rewrapped(self):
        """An element's normalization error passes through as is."""
        inner = FakeClob("x", read_error=DriverError("inner"))
        array = FakeArray([inner])

        with pytest.raises(NormalizationError, match="character large object"):
            normalize_value(array)
        assert inner.freed is True
        assert array.freed is True


class TestFallbackAndRegistration:
    """String fallback and custom rules."""

    def test_unknown_type_stringified(self):
        """Unrecognized values use their string form."""
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")

        assert normalize_value(value) == "12345678-1234-5678-1234-567812345678"

    def test_timedelta_stringified(self):
        """Intervals have no portable form and fall back to str()."""
        assert normalize_value(datetime.timedelta(days=1)) == "1 day, 0:00:00"

    def test_register_custom_rule(self, normalizer):
        """Registered rules run before the fallback."""
        normalizer.register(
            lambda value: isinstance(value, uuid.UUID), lambda value: value.hex
        )
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")

        assert normalizer.normalize(value) == "12345678123456781234567812345678"

    def test_register_with_index_takes_precedence(self, normalizer):
        """A rule inserted first wins over the built-in ones."""
        normalizer.register(lambda value: isinstance(value, int), str, index=0)

        assert normalizer(5) == "5"

    def test_fall_through(self, normalizer):
        """A converter can decline and let later rules decide."""
        normalizer.register(lambda value: True, lambda value: FALL_THROUGH, index=0)

        assert normalizer(Decimal("42")) == 42

    def test_invalid_limit(self):
        """The large-object limit must be positive."""
        with pytest.raises(ValueError):
            ValueNormalizer(max_lob_length=0)
