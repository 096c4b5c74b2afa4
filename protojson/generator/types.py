"""Type definitions for schema parsing and code generation."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin


@dataclass
class SchemaEnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    number: int


@dataclass
class SchemaEnum(DataClassJsonMixin):
    """Represents an enum type definition."""

    name: str
    values: list[SchemaEnumValue]


@dataclass
class SchemaField(DataClassJsonMixin):
    """Represents a field of a message.

    type_name is either a scalar type (see SCALAR_TYPES) or the name of a
    message or enum declared in the same file.
    """

    name: str
    type_name: str
    number: int
    repeated: bool


@dataclass
class SchemaMessage(DataClassJsonMixin):
    """Represents a message type definition."""

    name: str
    fields: list[SchemaField]


@dataclass
class SchemaFile(DataClassJsonMixin):
    """Represents a complete schema file."""

    syntax: str | None
    package: str | None
    enums: list[SchemaEnum]
    messages: list[SchemaMessage]

    def full_name(self, name: str) -> str:
        """Qualify a type name with the package."""
        return f"{self.package}.{name}" if self.package else name


SCALAR_TYPES = frozenset(
    [
        "double",
        "float",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "bool",
        "string",
        "bytes",
    ]
)


def is_scalar(type_name: str) -> bool:
    """Check if a type name is a scalar type."""
    return type_name in SCALAR_TYPES
