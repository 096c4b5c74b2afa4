"""Name conversions between schema and generated code."""


def snake_to_camel_case(snake_case: str) -> str:
    """Convert snake_case to camelCase. The first word is kept as written."""
    result = ""
    for i, part in enumerate(snake_case.split("_")):
        if not part:
            continue
        if i == 0:
            result += part
        else:
            result += part[0].upper() + part[1:]
    return result


def snake_to_pascal_case(snake_case: str) -> str:
    """Convert snake_case to PascalCase."""
    return "".join(part[0].upper() + part[1:] for part in snake_case.split("_") if part)


def _to_upper_underscore(camel: str) -> str:
    result = ""
    for c in camel:
        if c.isupper() and result:
            result += "_"
        result += c.upper()
    return result


def strip_enum_value_prefix(enum_name: str, value_name: str) -> str:
    """Strip the enum name prefix from an enum value name.

    Both the plain (``ResourceId_``) and the upper underscore form
    (``RESOURCE_ID_``) are recognized, ignoring case:

        strip_enum_value_prefix("ResourceId", "RESOURCE_ID_UI_LOGIN") == "UI_LOGIN"
    """
    if not enum_name or not value_name:
        return value_name

    for prefix in (enum_name + "_", _to_upper_underscore(enum_name) + "_"):
        if value_name.lower().startswith(prefix.lower()):
            return value_name[len(prefix) :]

    return value_name
