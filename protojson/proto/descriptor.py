"""Runtime field descriptors for protojson message types.

These dataclasses describe the shape of a message class at runtime. Generated
classes attach a MessageDescriptor as the class attribute ``__descriptor__``;
the JSON codec walks it to encode and decode instances.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class JsonFormatError(RuntimeError):
    """Base class for errors raised by the JSON codec."""


class SchemaError(JsonFormatError, TypeError):
    """Raised when a class does not satisfy the descriptor contract."""


class FieldKind(Enum):
    """Kind of value a field holds."""

    SCALAR = auto()
    MESSAGE = auto()
    ENUM = auto()


# Zero value for each scalar type
SCALAR_DEFAULTS: dict[str, Any] = {
    "double": 0.0,
    "float": 0.0,
    "int32": 0,
    "int64": 0,
    "uint32": 0,
    "uint64": 0,
    "sint32": 0,
    "sint64": 0,
    "fixed32": 0,
    "fixed64": 0,
    "sfixed32": 0,
    "sfixed64": 0,
    "bool": False,
    "string": "",
    "bytes": b"",
}

FLOAT_TYPES = frozenset(["double", "float"])


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Describes a single field of a message.

    ``name`` is the JSON property name, ``attr`` the Python attribute the value
    lives in. For message fields ``message_type`` is the nested message class,
    for enum fields ``enum_type`` is the enum class.
    """

    name: str
    kind: FieldKind
    repeated: bool = False
    message_type: type | None = None
    enum_type: type[Enum] | None = None
    scalar_type: str | None = None
    attr: str = ""
    default: Any = None

    def __post_init__(self) -> None:
        if not self.attr:
            object.__setattr__(self, "attr", self.name)

        if (self.kind is FieldKind.MESSAGE) != (self.message_type is not None):
            raise SchemaError(f"Field {self.name}: message_type is required for message fields only")
        if (self.kind is FieldKind.ENUM) != (self.enum_type is not None):
            raise SchemaError(f"Field {self.name}: enum_type is required for enum fields only")
        if self.kind is FieldKind.SCALAR and self.scalar_type not in SCALAR_DEFAULTS:
            raise SchemaError(f"Field {self.name}: unknown scalar type {self.scalar_type!r}")
        if self.default is not None and (self.repeated or self.kind is not FieldKind.SCALAR):
            raise SchemaError(f"Field {self.name}: only singular scalars take an explicit default")

    def default_value(self) -> Any:
        """Return the value an unset field holds.

        Repeated fields get a fresh empty list on every call, singular messages
        are unset (None).
        """
        if self.repeated:
            return []
        if self.kind is FieldKind.MESSAGE:
            return None
        if self.kind is FieldKind.ENUM:
            return enum_zero(self.enum_type)
        if self.default is not None:
            return self.default
        return SCALAR_DEFAULTS[self.scalar_type]


def enum_zero(enum_type: Any) -> Any:
    """Return the zero variant of an enum: the member valued 0, else the first."""
    members = list(enum_type)
    if not members:
        raise SchemaError(f"Enum {enum_type.__name__} has no members")
    for member in members:
        if member.value == 0:
            return member
    return members[0]


@dataclass(frozen=True, slots=True)
class MessageDescriptor:
    """Describes a message type as an ordered tuple of fields."""

    full_name: str
    fields: tuple[FieldDescriptor, ...]
    _by_name: dict[str, FieldDescriptor] = field(init=False, repr=False, compare=False)
    _by_attr: dict[str, FieldDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_name: dict[str, FieldDescriptor] = {}
        by_attr: dict[str, FieldDescriptor] = {}
        for f in self.fields:
            if f.name in by_name:
                raise SchemaError(f"{self.full_name}: duplicate field name {f.name}")
            if f.attr in by_attr:
                raise SchemaError(f"{self.full_name}: duplicate field attribute {f.attr}")
            by_name[f.name] = f
            by_attr[f.attr] = f

        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "_by_name", by_name)
        object.__setattr__(self, "_by_attr", by_attr)

    def field_by_name(self, name: str) -> FieldDescriptor | None:
        """Look up a field by its JSON name."""
        return self._by_name.get(name)

    def field_by_attr(self, attr: str) -> FieldDescriptor | None:
        """Look up a field by its Python attribute name."""
        return self._by_attr.get(attr)


def get_descriptor(message_cls: Any) -> MessageDescriptor:
    """Return the class-level descriptor of a message class.

    Raises:
        SchemaError: if the class does not expose a MessageDescriptor.
    """
    descriptor = getattr(message_cls, "__descriptor__", None)
    if not isinstance(descriptor, MessageDescriptor):
        name = getattr(message_cls, "__name__", repr(message_cls))
        raise SchemaError(f"{name} is not a message type: missing __descriptor")
    return descriptor
