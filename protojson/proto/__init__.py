"""Runtime support for protojson messages."""

from .descriptor import FieldDescriptor, FieldKind, JsonFormatError, MessageDescriptor, SchemaError
from .descriptor import get_descriptor
from .json_format import InvalidArgument, ParseError, from_dict, from_json, to_dict, to_json
from .message import Message, ProtoEnum

__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "InvalidArgument",
    "JsonFormatError",
    "Message",
    "MessageDescriptor",
    "ParseError",
    "ProtoEnum",
    "SchemaError",
    "from_dict",
    "from_json",
    "get_descriptor",
    "to_dict",
    "to_json",
]
