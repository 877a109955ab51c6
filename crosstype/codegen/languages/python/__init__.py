"""
Python code generator module.

Generates Pydantic v2 models whose JSON form matches the other targets.
"""

from .config import PythonConfig, UnitEnumStyle
from .generator import PythonGenerator, create_literal_enum_generator, create_python_generator
from .naming import create_python_sanitizer

__all__ = [
    "PythonGenerator",
    "PythonConfig",
    "UnitEnumStyle",
    "create_python_sanitizer",
    "create_python_generator",
    "create_literal_enum_generator",
]
