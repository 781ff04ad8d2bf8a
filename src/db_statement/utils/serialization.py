"""JSON serialization of portable results using orjson.

Portable values map onto JSON directly except for two cases handled here:
- bytes → base64 string
- int beyond the 64-bit range orjson supports → decimal string
"""

import base64
from typing import Any

import orjson
from pydantic import BaseModel

_INT64_MIN = -(2**63)
_UINT64_MAX = 2**64 - 1


def _default_handler(obj: Any) -> Any:
    """
    Custom default handler for types orjson doesn't handle natively.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation

    Raises:
        TypeError: If object cannot be serialized
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(obj)).decode("ascii")

    # Fallback for other types
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _widen_integers(value: Any) -> Any:
    # orjson rejects integers it cannot represent instead of calling default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and not _INT64_MIN <= value <= _UINT64_MAX:
        return str(value)
    if isinstance(value, list):
        return [_widen_integers(item) for item in value]
    if isinstance(value, dict):
        return {key: _widen_integers(item) for key, item in value.items()}
    return value


def dumps(obj: Any) -> str:
    """
    Serialize object to JSON string using orjson.

    Pydantic models (PortableResult, UpdateResult) are dumped to dicts first.

    Args:
        obj: Object to serialize

    Returns:
        JSON string
    """
    if isinstance(obj, BaseModel):
        obj = obj.model_dump()
    return orjson.dumps(_widen_integers(obj), default=_default_handler).decode("utf-8")


def result_to_json_safe(result: BaseModel) -> dict[str, Any]:
    """
    Convert a result model to plain JSON-compatible Python objects.

    Args:
        result: PortableResult or UpdateResult

    Returns:
        Dictionary matching what ``dumps`` would emit
    """
    return orjson.loads(dumps(result))
