"""JSON encoding and decoding of protojson messages.

The codec is driven entirely by the class-level descriptor of a message, so a
single pair of functions handles every generated type:

    text = to_json(player)
    player = from_json(Player, text)
"""

import base64
import binascii
import inspect
import json
import keyword
import logging
import math
from collections.abc import Mapping
from typing import Any, TypeVar

from .descriptor import (
    FLOAT_TYPES,
    FieldDescriptor,
    FieldKind,
    JsonFormatError,
    MessageDescriptor,
    get_descriptor,
)

logger = logging.getLogger(__name__)

TMessage = TypeVar("TMessage")

_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


class InvalidArgument(JsonFormatError, ValueError):
    """Raised when the caller passes a structurally wrong argument."""


class ParseError(JsonFormatError, ValueError):
    """Raised when input is not valid JSON or does not fit the message shape."""


def to_json(message: Any, indent: int | None = None) -> str:
    """Serialize a message to JSON text.

    Args:
        message: The message instance to serialize.
        indent: None or 0 for compact output, a positive width to pretty-print.

    Returns:
        The JSON text. Keys follow descriptor field order and every field is
        present, including those still at their default value.
    """
    if message is None:
        raise InvalidArgument("message cannot be null")
    if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int) or indent < 0):
        raise InvalidArgument(f"indent must be a non-negative integer, got {indent!r}")

    data = to_dict(message)
    if indent:
        return json.dumps(data, indent=indent, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def to_dict(message: Any) -> dict[str, Any]:
    """Convert a message to a JSON-compatible dict."""
    if message is None:
        raise InvalidArgument("message cannot be null")
    return _encode_message(message, get_descriptor(type(message)))


def from_json(message_cls: type[TMessage], data: str | bytes | bytearray | Mapping[str, Any]) -> TMessage:
    """Build a message of ``message_cls`` from JSON text or an already parsed object.

    Fields missing from the input keep their default value and keys unknown to
    the descriptor are ignored.

    Raises:
        InvalidArgument: if message_cls is not a class.
        SchemaError: if message_cls has no descriptor.
        ParseError: if the text is not valid JSON or a value has the wrong shape.
    """
    _check_message_class(message_cls)
    get_descriptor(message_cls)

    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Failed to parse JSON: {exc}") from exc

    return _decode_message(message_cls, data, "")


def from_dict(message_cls: type[TMessage], data: Mapping[str, Any]) -> TMessage:
    """Build a message of ``message_cls`` from a JSON-compatible mapping."""
    _check_message_class(message_cls)
    get_descriptor(message_cls)
    return _decode_message(message_cls, data, "")


def _check_message_class(message_cls: Any) -> None:
    if not inspect.isclass(message_cls):
        raise InvalidArgument(
            f"message_cls must be a function or class building a message, "
            f"got {type(message_cls).__name__}"
        )


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


# Encoding


def _encode_message(message: Any, descriptor: MessageDescriptor) -> dict[str, Any]:
    return {f.name: _encode_field(f, getattr(message, f.attr)) for f in descriptor.fields}


def _encode_field(f: FieldDescriptor, value: Any) -> Any:
    if f.repeated:
        if value is None:
            return []
        return [_encode_value(f, item) for item in value]
    return _encode_value(f, value)


def _encode_value(f: FieldDescriptor, value: Any) -> Any:
    if f.kind is FieldKind.MESSAGE:
        if value is None:
            value = f.message_type()
        return _encode_message(value, get_descriptor(type(value)))

    if f.kind is FieldKind.ENUM:
        return int(value)

    if f.scalar_type == "bytes":
        return base64.b64encode(value).decode("ascii")

    if f.scalar_type in FLOAT_TYPES and isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"

    return value


# Decoding


def _decode_message(message_cls: type[TMessage], data: Any, path: str) -> TMessage:
    if not isinstance(data, Mapping):
        where = path or message_cls.__name__
        raise ParseError(f"{where}: expected a JSON object, got {_json_type(data)}")

    descriptor = get_descriptor(message_cls)
    message = message_cls()

    for f in descriptor.fields:
        if f.name in data:
            value = data[f.name]
        elif f.attr in data:
            value = data[f.attr]
        else:
            continue

        # null means the same as an absent key
        if value is None:
            continue

        setattr(message, f.attr, _decode_field(f, value, _join(path, f.name)))

    if logger.isEnabledFor(logging.DEBUG):
        unknown = [
            key
            for key in data
            if descriptor.field_by_name(key) is None and descriptor.field_by_attr(key) is None
        ]
        if unknown:
            logger.debug("Ignoring unknown keys %s for %s", unknown, descriptor.full_name)

    return message


def _decode_field(f: FieldDescriptor, value: Any, path: str) -> Any:
    if f.repeated:
        if not isinstance(value, list):
            raise ParseError(f"{path}: expected a JSON array, got {_json_type(value)}")
        return [_decode_value(f, item, f"{path}[{i}]") for i, item in enumerate(value)]
    return _decode_value(f, value, path)


def _decode_value(f: FieldDescriptor, value: Any, path: str) -> Any:
    if f.kind is FieldKind.MESSAGE:
        return _decode_message(f.message_type, value, path)

    if f.kind is FieldKind.ENUM:
        return _decode_enum(f, value, path)

    if f.scalar_type == "bytes":
        if not isinstance(value, str):
            raise ParseError(f"{path}: expected a base64 string, got {_json_type(value)}")
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise ParseError(f"{path}: invalid base64 data") from exc

    if f.scalar_type in FLOAT_TYPES and isinstance(value, str) and value in _NON_FINITE:
        return _NON_FINITE[value]

    return value


def _decode_enum(f: FieldDescriptor, value: Any, path: str) -> Any:
    enum_type = f.enum_type

    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return enum_type(value)
        except ValueError:
            # Unknown numbers are kept so newer peers round-trip
            return value

    if isinstance(value, str):
        member = enum_type.__members__.get(value)
        if member is None and keyword.iskeyword(value):
            # Generated enums rename keyword members with a trailing underscore
            member = enum_type.__members__.get(value + "_")
        if member is None:
            raise ParseError(f"{path}: unknown {enum_type.__name__} value {value!r}")
        return member

    raise ParseError(f"{path}: expected an enum number or name, got {_json_type(value)}")
