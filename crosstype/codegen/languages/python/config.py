"""
Python-specific configuration and type mappings.

Provides the primitive and named type mappings used when generating
Pydantic v2 models.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from ...core.ir import PrimitiveKind


class UnitEnumStyle(Enum):
    """How enums made only of unit variants are rendered."""

    ENUM = "enum"  # class Name(str, Enum)
    LITERAL = "literal"  # Name = Literal["A", "B"]


# Python type mappings
PYTHON_PRIMITIVE_MAP = {
    PrimitiveKind.STRING: "str",
    PrimitiveKind.CHAR: "str",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.I8: "int",
    PrimitiveKind.I16: "int",
    PrimitiveKind.I32: "int",
    PrimitiveKind.I64: "int",
    PrimitiveKind.U8: "int",
    PrimitiveKind.U16: "int",
    PrimitiveKind.U32: "int",
    PrimitiveKind.U64: "int",
    PrimitiveKind.U53: "int",
    PrimitiveKind.I54: "int",
    PrimitiveKind.ISIZE: "int",
    PrimitiveKind.USIZE: "int",
    PrimitiveKind.F32: "float",
    PrimitiveKind.F64: "float",
    PrimitiveKind.UNIT: "None",
}

# Named source types with a library equivalent: name -> (module, type)
PYTHON_SPECIAL_TYPES = {
    "DateTime": ("datetime", "datetime"),
    "Url": ("pydantic.networks", "AnyUrl"),
}

# Module each typing helper is imported from
PYTHON_IMPORT_MAP = {
    "Annotated": "typing",
    "Dict": "typing",
    "Generic": "typing",
    "List": "typing",
    "Literal": "typing",
    "Optional": "typing",
    "TypeVar": "typing",
    "Union": "typing",
    "Enum": "enum",
    "BaseModel": "pydantic",
    "RootModel": "pydantic",
    "ConfigDict": "pydantic",
    "Field": "pydantic",
}

NamedMapping = Tuple[Optional[str], str]


def parse_type_mapping(target: str) -> NamedMapping:
    """
    Split a configured mapping into (module, name).

    ``"decimal.Decimal"`` imports ``Decimal`` from ``decimal``; a bare name
    such as ``"float"`` needs no import.
    """
    if "." in target:
        module, _, name = target.rpartition(".")
        return module, name
    return None, target


class PythonConfig:
    """Python-specific configuration."""

    def __init__(self, type_mappings: Optional[Dict[str, str]] = None, **kwargs):
        """Initialize Python configuration."""
        style = kwargs.get("unit_enum_style", UnitEnumStyle.ENUM)
        if isinstance(style, UnitEnumStyle):
            self.unit_enum_style = style
        else:
            try:
                self.unit_enum_style = UnitEnumStyle(style)
            except ValueError:
                self.unit_enum_style = UnitEnumStyle.ENUM

        self.primitive_map = dict(PYTHON_PRIMITIVE_MAP)

        # Built-in special types first so configured mappings win
        self.named_map: Dict[str, NamedMapping] = dict(PYTHON_SPECIAL_TYPES)
        for source_name, target in (type_mappings or {}).items():
            self.named_map[source_name] = parse_type_mapping(target)

    def primitive_type(self, kind: PrimitiveKind) -> str:
        return self.primitive_map[kind]

    def named_type(self, name: str) -> Optional[NamedMapping]:
        """Library type a named source type maps to, if any."""
        return self.named_map.get(name)
