"""
Core pipeline shared by every target language.

The type graph, naming, enum classification, variant promotion, templates
and the generator base class live here.
"""

from .classify import EnumShape, EnumShapeKind, PayloadKind, VariantShape, classify, classify_graph
from .config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .errors import (
    DiscriminantCollision,
    GeneratorError,
    IllegalIdentifier,
    PromotionNameCollision,
    UnsupportedShape,
)
from .generator import CodeGenerator, EmittedDeclaration, GenerationResult, generate_code
from .ir import (
    AliasDecl,
    EnumDecl,
    Field,
    GraphFormatError,
    PrimitiveKind,
    StructDecl,
    TypeGraph,
    TypeKind,
    TypeRef,
    Variant,
    VariantKind,
    graph_from_dict,
)
from .naming import NameSanitizer, NamingCase, NamingResolver, convert_case
from .promote import Promotion, PromotionResult, promote

__all__ = [
    "AliasDecl",
    "CodeGenerator",
    "ConfigError",
    "ConfigManager",
    "DiscriminantCollision",
    "EmittedDeclaration",
    "EnumDecl",
    "EnumShape",
    "EnumShapeKind",
    "Field",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "GraphFormatError",
    "IllegalIdentifier",
    "NameSanitizer",
    "NamingCase",
    "NamingResolver",
    "PayloadKind",
    "PrimitiveKind",
    "Promotion",
    "PromotionNameCollision",
    "PromotionResult",
    "StructDecl",
    "TypeGraph",
    "TypeKind",
    "TypeRef",
    "UnsupportedShape",
    "Variant",
    "VariantKind",
    "VariantShape",
    "classify",
    "classify_graph",
    "convert_case",
    "generate_code",
    "graph_from_dict",
    "load_config",
    "promote",
]
