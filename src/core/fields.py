"""Wire field codecs shared by the typed records.

Each record field carries its JSON key and a decode function in its
dataclass metadata. ``decode_record`` and ``encode_record`` walk those
fields, so the records themselves stay plain data.
"""

import dataclasses
from typing import Any, Callable, Optional

from src.core.exceptions import DecodeError
from src.core.timestamp import format_timestamp, parse_timestamp


def as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected string, got {type(value).__name__}")
    return value


def as_int(value: Any) -> int:
    # bool is an int subclass in Python but never an integer on the wire
    if isinstance(value, bool):
        raise DecodeError("expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise DecodeError(f"expected integer, got {value!r}")


def as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"expected number, got {type(value).__name__}")
    return float(value)


def as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"expected boolean, got {type(value).__name__}")
    return value


def as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise DecodeError(f"expected array, got {type(value).__name__}")
    return [as_str(item) for item in value]


def wire(
    name: str,
    decode: Callable[[Any], Any],
    default: Any = None,
    encode: Optional[Callable[[Any], Any]] = None,
):
    """Declare a dataclass field that maps to JSON key ``name``.

    A missing key or JSON null leaves the field at ``default``.
    """
    metadata = {"wire": name, "decode": decode, "encode": encode}
    if isinstance(default, list):
        return dataclasses.field(default_factory=list, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


def timestamp(name: str):
    return wire(name, parse_timestamp, None, encode=format_timestamp)


def decode_record(cls, data: Any):
    """Build a ``cls`` instance from a JSON object.

    Raises:
        DecodeError: data is not an object or a field has the wrong type
    """
    if not isinstance(data, dict):
        raise DecodeError(
            f"{cls.__name__} payload must be an object, got {type(data).__name__}"
        )

    kwargs = {}
    for f in dataclasses.fields(cls):
        key = f.metadata.get("wire")
        if key is None:
            continue
        value = data.get(key)
        if value is None:
            continue
        try:
            kwargs[f.name] = f.metadata["decode"](value)
        except DecodeError as e:
            raise DecodeError(f"{cls.__name__}.{key}: {e.message}") from e
    return cls(**kwargs)


def encode_record(record) -> dict:
    """Encode a record back to its JSON object form, keyed by wire names."""
    result = {}
    for f in dataclasses.fields(record):
        key = f.metadata.get("wire")
        if key is None:
            continue
        value = getattr(record, f.name)
        encode = f.metadata.get("encode")
        if encode is not None:
            value = encode(value)
        elif isinstance(value, list):
            value = list(value)
        result[key] = value
    return result
