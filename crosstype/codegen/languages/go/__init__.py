"""
Go code generator module.

Generates Go types with JSON tags, tagged unions decoded through a
generated ``UnmarshalJSON``.
"""

from .generator import GoGenerator, create_go_generator, create_strict_go_generator
from .naming import create_go_sanitizer, validate_go_package_name
from .types import GoType, GoTypeConfig, GoTypeMapper, PointerStrategy

__all__ = [
    "GoGenerator",
    "GoType",
    "GoTypeConfig",
    "GoTypeMapper",
    "PointerStrategy",
    "create_go_sanitizer",
    "validate_go_package_name",
    "create_go_generator",
    "create_strict_go_generator",
]
