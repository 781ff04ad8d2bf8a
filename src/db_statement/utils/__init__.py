"""Utility modules for value conversion and serialization."""

from db_statement.utils.normalization import (
    FALL_THROUGH,
    ValueNormalizer,
    normalize_value,
    to_iso_utc,
)
from db_statement.utils.serialization import dumps, result_to_json_safe

__all__ = [
    "FALL_THROUGH",
    "ValueNormalizer",
    "normalize_value",
    "to_iso_utc",
    "dumps",
    "result_to_json_safe",
]
