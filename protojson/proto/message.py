"""Base classes for generated message and enum types."""

from enum import IntEnum
from typing import Any, ClassVar

from .descriptor import FieldKind, MessageDescriptor, get_descriptor


class Message:
    """Base class for generated message types.

    Subclasses attach a MessageDescriptor as ``__descriptor__``, either in the
    class body or right after it (which lets a message refer to itself).
    Instances start with every field at its default value.

    Example:
        class Vector2(Message):
            x: float
            y: float

            def with_x(self, value: float) -> Self:
                self.x = value
                return self

        Vector2.__descriptor__ = MessageDescriptor(
            full_name="math.Vector2",
            fields=(
                FieldDescriptor("x", FieldKind.SCALAR, scalar_type="float"),
                FieldDescriptor("y", FieldKind.SCALAR, scalar_type="float"),
            ),
        )
    """

    __descriptor__: ClassVar[MessageDescriptor]

    def __init__(self, **kwargs: Any) -> None:
        descriptor = get_descriptor(type(self))
        for f in descriptor.fields:
            setattr(self, f.attr, f.default_value())

        for key, value in kwargs.items():
            if descriptor.field_by_attr(key) is None:
                raise TypeError(f"{type(self).__name__} got an unexpected field {key!r}")
            setattr(self, key, value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented

        for f in get_descriptor(type(self)).fields:
            mine = getattr(self, f.attr)
            theirs = getattr(other, f.attr)
            # An unset nested message equals one holding only defaults
            if f.kind is FieldKind.MESSAGE and not f.repeated:
                if mine is None:
                    mine = f.message_type()
                if theirs is None:
                    theirs = f.message_type()
            if mine != theirs:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{f.attr}={getattr(self, f.attr)!r}" for f in get_descriptor(type(self)).fields
        )
        return f"{type(self).__name__}({fields})"


class ProtoEnum(IntEnum):
    """Base class for generated enums.

    Members serialize to JSON as their integer value. The zero variant (the
    member valued 0) is the default of an enum field.

    Example:
        class ResourceId(ProtoEnum):
            NONE = 0
            PLAYER = 1
    """
