"""Python code generator for protojson schemas."""

import keyword
from dataclasses import dataclass
from importlib import resources

from jinja2 import Environment, PackageLoader

from .naming import snake_to_camel_case, snake_to_pascal_case, strip_enum_value_prefix
from .types import SchemaEnum, SchemaField, SchemaFile, SchemaMessage, is_scalar

RUNTIME_FILES = [
    "__init__.py",
    "descriptor.py",
    "message.py",
    "json_format.py",
]

env = Environment(
    loader=PackageLoader("protojson.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map scalar types to Python type annotations
SCALAR_TYPE_MAP = {
    "double": "float",
    "float": "float",
    "int32": "int",
    "int64": "int",
    "uint32": "int",
    "uint64": "int",
    "sint32": "int",
    "sint64": "int",
    "fixed32": "int",
    "fixed64": "int",
    "sfixed32": "int",
    "sfixed64": "int",
    "bool": "bool",
    "string": "str",
    "bytes": "bytes",
}


@dataclass
class _EnumMember:
    name: str
    number: int


@dataclass
class _Enum:
    name: str
    members: list[_EnumMember]
    aliases: list[_EnumMember]


@dataclass
class _Field:
    attr: str
    setter: str
    annotation: str
    descriptor: str


@dataclass
class _Message:
    name: str
    full_name: str
    fields: list[_Field]


def _safe_identifier(name: str) -> str:
    """Append an underscore to names that are Python keywords."""
    if keyword.iskeyword(name):
        return name + "_"
    return name


def _member_names(enum: SchemaEnum) -> list[str]:
    """Pick Python member names, stripping the enum prefix where possible.

    Prefixes are only stripped if every stripped name is a usable, unique
    identifier that does not clash with another declared name; otherwise the
    declared names are kept, with keywords renamed like field attributes.
    """
    declared = [v.name for v in enum.values]
    stripped = [strip_enum_value_prefix(enum.name, name) for name in declared]
    usable = all(
        name.isidentifier()
        and not keyword.iskeyword(name)
        and not name.startswith("_")
        and (name == own or name not in declared)
        for name, own in zip(stripped, declared, strict=True)
    )
    if usable and len(set(stripped)) == len(stripped):
        return stripped
    return [_safe_identifier(name) for name in declared]


def _enum(enum: SchemaEnum) -> _Enum:
    names = _member_names(enum)
    members = [_EnumMember(name=name, number=v.number) for name, v in zip(names, enum.values, strict=True)]

    # Declared names stay reachable as aliases so JSON using them decodes
    aliases = [
        _EnumMember(name=v.name, number=v.number)
        for name, v in zip(names, enum.values, strict=True)
        if name != v.name and not keyword.iskeyword(v.name)
    ]
    return _Enum(name=snake_to_pascal_case(enum.name), members=members, aliases=aliases)


def _annotation(f: SchemaField) -> str:
    """Map a schema field to a Python type annotation."""
    if is_scalar(f.type_name):
        type_name = SCALAR_TYPE_MAP[f.type_name]
    else:
        type_name = snake_to_pascal_case(f.type_name)

    if f.repeated:
        return f"list[{type_name}]"
    return type_name


def _descriptor(f: SchemaField, attr: str, enum_names: set[str]) -> str:
    """Generate the FieldDescriptor expression for a field."""
    args = [f'"{snake_to_camel_case(f.name)}"']

    if is_scalar(f.type_name):
        args.append("FieldKind.SCALAR")
    elif f.type_name in enum_names:
        args.append("FieldKind.ENUM")
    else:
        args.append("FieldKind.MESSAGE")

    if f.repeated:
        args.append("repeated=True")

    if is_scalar(f.type_name):
        args.append(f'scalar_type="{f.type_name}"')
    elif f.type_name in enum_names:
        args.append(f"enum_type={snake_to_pascal_case(f.type_name)}")
    else:
        args.append(f"message_type={snake_to_pascal_case(f.type_name)}")

    if attr != snake_to_camel_case(f.name):
        args.append(f'attr="{attr}"')

    return f"FieldDescriptor({', '.join(args)})"


def _message(schema: SchemaFile, message: SchemaMessage, enum_names: set[str]) -> _Message:
    fields: list[_Field] = []
    for f in message.fields:
        attr = _safe_identifier(f.name)
        annotation = _annotation(f)
        if not f.repeated and not is_scalar(f.type_name) and f.type_name not in enum_names:
            annotation += " | None"
        fields.append(
            _Field(
                attr=attr,
                setter=f"with_{f.name}",
                annotation=annotation,
                descriptor=_descriptor(f, attr, enum_names),
            )
        )
    return _Message(
        name=snake_to_pascal_case(message.name),
        full_name=schema.full_name(message.name),
        fields=fields,
    )


def render(
    schema: SchemaFile,
    runtime_import: str = "protojson.proto",
    source: str | None = None,
) -> str:
    """Render a parsed schema to Python source code."""
    enum_names = {e.name for e in schema.enums}

    enums = [_enum(e) for e in schema.enums]
    messages = [_message(schema, m, enum_names) for m in schema.messages]

    return template.render(
        enums=enums,
        messages=messages,
        runtime_import=runtime_import,
        source=source,
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("protojson.proto").joinpath(filename).read_text()
        result[filename] = content
    return result
