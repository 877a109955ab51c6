"""
Python-specific naming utilities and sanitization.

Handles Python reserved words and the names generated modules import.
"""

import keyword

from ...core.naming import NameSanitizer

# Python reserved keywords
PYTHON_RESERVED_WORDS = set(keyword.kwlist)

# Attributes pydantic reserves on every model
PYDANTIC_RESERVED_NAMES = {"model_config"}

# Names imported by generated modules; declarations must not shadow them
PYTHON_GENERATED_NAMES = {
    "Annotated",
    "AnyUrl",
    "BaseModel",
    "ConfigDict",
    "Dict",
    "Enum",
    "Field",
    "Generic",
    "List",
    "Literal",
    "Optional",
    "RootModel",
    "TypeVar",
    "Union",
    "datetime",
}


def create_python_sanitizer() -> NameSanitizer:
    """
    Create a name sanitizer configured for Python.

    Identifiers starting with a digit get an ``n_`` prefix, since pydantic
    does not accept fields with a leading underscore.
    """
    return NameSanitizer(
        PYTHON_RESERVED_WORDS | PYDANTIC_RESERVED_NAMES | PYTHON_GENERATED_NAMES,
        digit_prefix="n_",
    )
