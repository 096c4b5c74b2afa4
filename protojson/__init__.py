"""protojson - Descriptor-driven JSON codec for schema-generated messages."""

from importlib.metadata import PackageNotFoundError, version

from .proto import InvalidArgument, ParseError, SchemaError, from_dict, from_json, to_dict, to_json

try:
    __version__ = version("protojson")
except PackageNotFoundError:
    __version__ = "(local)"

__all__ = [
    "InvalidArgument",
    "ParseError",
    "SchemaError",
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
]
