"""Schema parser using Lark."""

import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.exceptions import VisitError
from lark.visitors import Transformer

from .naming import snake_to_camel_case, snake_to_pascal_case
from .types import SchemaEnum, SchemaEnumValue, SchemaField, SchemaFile, SchemaMessage, is_scalar

_g_parser: Lark | None = None

# Names the generated module imports from the runtime
RESERVED_TYPE_NAMES = frozenset(
    ["FieldDescriptor", "FieldKind", "Message", "MessageDescriptor", "ProtoEnum", "Self"]
)


class ValidationError(RuntimeError):
    """Raised when schema validation fails."""


@dataclass
class _Syntax:
    value: str


@dataclass
class _Package:
    value: str


@dataclass
class _TypeRef:
    value: str


@dataclass
class _Repeated:
    pass


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise ValidationError(f"Found more than one {class_type.__name__.strip('_').lower()} statement")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


class TreeTransformer(Transformer):
    """Transform parse tree into schema types."""

    def start(self, args: list[Any]) -> SchemaFile:
        package = _find_one(args, _Package)
        messages = _filter(args, SchemaMessage)

        for message in messages:
            for f in message.fields:
                f.type_name = _local_type_name(f.type_name, package)

        return SchemaFile(
            syntax=_find_one(args, _Syntax),
            package=package,
            enums=_filter(args, SchemaEnum),
            messages=messages,
        )

    def syntax(self, args: list[Any]) -> _Syntax:
        return _Syntax(value=str(args[0])[1:-1])

    def package(self, args: list[Any]) -> _Package:
        return _Package(value=args[0])

    def full_ident(self, args: list[Any]) -> str:
        return ".".join(str(a) for a in args)

    def type_ref(self, args: list[Any]) -> _TypeRef:
        return _TypeRef(value=args[0])

    def repeated(self, args: list[Any]) -> _Repeated:
        return _Repeated()

    def enum(self, args: list[Any]) -> SchemaEnum:
        return SchemaEnum(name=str(args[0]), values=_filter(args, SchemaEnumValue))

    def enum_value(self, args: list[Any]) -> SchemaEnumValue:
        return SchemaEnumValue(name=str(args[0]), number=int(args[1]))

    def message(self, args: list[Any]) -> SchemaMessage:
        return SchemaMessage(name=str(args[0]), fields=_filter(args, SchemaField))

    def field(self, args: list[Any]) -> SchemaField:
        repeated = isinstance(args[0], _Repeated)
        if repeated:
            args = args[1:]
        type_ref, name, number = args
        return SchemaField(name=str(name), type_name=type_ref.value, number=int(number), repeated=repeated)


def _local_type_name(type_name: str, package: str | None) -> str:
    """Strip the file's own package from a qualified type reference."""
    if is_scalar(type_name):
        return type_name
    type_name = type_name.lstrip(".")
    if package and type_name.startswith(package + "."):
        return type_name[len(package) + 1 :]
    return type_name


def validate(schema: SchemaFile) -> None:
    """Validate a parsed schema."""
    if schema.syntax is not None and schema.syntax != "proto3":
        raise ValidationError(f"Unsupported syntax {schema.syntax!r}, only proto3 is supported")

    type_names: set[str] = set()
    class_names: dict[str, str] = {}
    for name in [e.name for e in schema.enums] + [m.name for m in schema.messages]:
        if name in type_names:
            raise ValidationError(f"Duplicate type name {name}")
        class_name = snake_to_pascal_case(name)
        if class_name in RESERVED_TYPE_NAMES:
            raise ValidationError(f"Type name {name} is reserved by the runtime")
        if class_name in class_names:
            raise ValidationError(f"Types {class_names[class_name]} and {name} share class name {class_name}")
        type_names.add(name)
        class_names[class_name] = name

    for enum in schema.enums:
        if not enum.values:
            raise ValidationError(f"Enum {enum.name} has no values")
        if enum.values[0].number != 0:
            raise ValidationError(f"First value of enum {enum.name} must be zero")

        value_names: set[str] = set()
        value_numbers: set[int] = set()
        for value in enum.values:
            if value.name in value_names:
                raise ValidationError(f"Enum {enum.name} declares {value.name} twice")
            if value.number in value_numbers:
                raise ValidationError(f"Enum {enum.name} reuses number {value.number}")
            value_names.add(value.name)
            value_numbers.add(value.number)

    for message in schema.messages:
        field_names: set[str] = set()
        field_numbers: set[int] = set()
        json_names: dict[str, str] = {}
        for f in message.fields:
            if f.name in field_names:
                raise ValidationError(f"Message {message.name} declares field {f.name} twice")
            if f.number < 1:
                raise ValidationError(f"Field number of {message.name}.{f.name} must be positive")
            if f.number in field_numbers:
                raise ValidationError(f"Message {message.name} reuses field number {f.number}")
            if not is_scalar(f.type_name) and f.type_name not in type_names:
                raise ValidationError(f"Unknown type {f.type_name} for field {message.name}.{f.name}")

            json_name = snake_to_camel_case(f.name)
            if json_name in json_names:
                raise ValidationError(
                    f"Fields {message.name}.{json_names[json_name]} and {message.name}.{f.name} "
                    f"share JSON name {json_name}"
                )

            field_names.add(f.name)
            field_numbers.add(f.number)
            json_names[json_name] = f.name

    messages = {m.name: m for m in schema.messages}
    for message in schema.messages:
        cycle = _singular_cycle(messages, message.name)
        if cycle:
            raise ValidationError(f"Message {message.name} refers to itself through {'.'.join(cycle)}")


def _singular_cycle(messages: dict[str, SchemaMessage], start: str) -> list[str] | None:
    """Find a chain of non-repeated message fields leading from start back to start.

    Such a message has no finite default instance, so it cannot be encoded.
    Repeated fields break the chain since they default to an empty list.
    """
    seen: set[str] = set()
    stack: list[tuple[str, list[str]]] = [(start, [])]
    while stack:
        name, path = stack.pop()
        for f in messages[name].fields:
            if f.repeated or f.type_name not in messages:
                continue
            if f.type_name == start:
                return path + [f.name]
            if f.type_name not in seen:
                seen.add(f.type_name)
                stack.append((f.type_name, path + [f.name]))
    return None


def parse(text: str) -> SchemaFile:
    """Parse and validate a schema file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/protodef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    try:
        schema = TreeTransformer().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ValidationError):
            raise exc.orig_exc from None
        raise

    validate(schema)

    return schema
