"""protojson schema compiler."""

from .naming import snake_to_camel_case as snake_to_camel_case
from .naming import snake_to_pascal_case as snake_to_pascal_case
from .naming import strip_enum_value_prefix as strip_enum_value_prefix
from .parser import *
from .types import *
