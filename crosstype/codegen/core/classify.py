"""
Enum classification.

Decides, for every enum of the graph, whether it is a plain enumeration of
string values or a tagged union, and describes the payload of each of its
serialized variants.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .errors import DiscriminantCollision
from .ir import EnumDecl, Field, TypeGraph, TypeKind, TypeRef, VariantKind
from .naming import NamingCase, convert_case
from ...logging_config import get_logger

logger = get_logger(__name__)


class EnumShapeKind(Enum):
    """How an enum is represented on the wire."""

    PURE_ENUMERATION = "pure_enumeration"
    TAGGED_UNION = "tagged_union"


class PayloadKind(Enum):
    """What a tagged-union variant carries under its content key."""

    NONE = "none"
    NAMED = "named"
    PRIMITIVE_OR_GENERIC = "primitive_or_generic"
    ANONYMOUS = "anonymous"


@dataclass
class VariantShape:
    """Serialized view of one non-skipped variant."""

    variant_name: str
    discriminant: str
    payload: PayloadKind
    type_ref: Optional[TypeRef] = None
    fields: List[Field] = field(default_factory=list)
    constructor_name: str = ""
    doc_comment: Optional[str] = None

    @property
    def takes_argument(self) -> bool:
        return self.payload != PayloadKind.NONE


@dataclass
class EnumShape:
    """Classification result for one enum."""

    enum_name: str
    kind: EnumShapeKind
    variants: List[VariantShape] = field(default_factory=list)

    @property
    def is_pure(self) -> bool:
        return self.kind == EnumShapeKind.PURE_ENUMERATION

    @property
    def has_unit_variant(self) -> bool:
        return any(v.payload == PayloadKind.NONE for v in self.variants)

    def variant(self, name: str) -> Optional[VariantShape]:
        for shape in self.variants:
            if shape.variant_name == name:
                return shape
        return None


def _payload_kind(type_ref: TypeRef, generic_params: List[str]) -> PayloadKind:
    if type_ref.is_unit():
        return PayloadKind.NONE
    if type_ref.kind == TypeKind.NAMED and type_ref.name not in generic_params:
        return PayloadKind.NAMED
    return PayloadKind.PRIMITIVE_OR_GENERIC


def constructor_name(enum_name: str, variant_name: str) -> str:
    """Suggested constructor name, ``new_{enum}_{variant}`` in snake case."""
    return convert_case(f"new_{enum_name}_{variant_name}", NamingCase.SNAKE_CASE)


def is_pure_enumeration(enum: EnumDecl) -> bool:
    """True when the enum serializes as a bare string: unit variants only, none skipped."""
    return not enum.shared_fields and all(
        v.kind == VariantKind.UNIT and not v.skip for v in enum.variants
    )


def classify(enum: EnumDecl) -> EnumShape:
    """
    Classify a single enum.

    Args:
        enum: Enum declaration to classify

    Returns:
        EnumShape describing the serialized variants

    Raises:
        DiscriminantCollision: If two serialized variants share a wire tag
    """
    is_pure = is_pure_enumeration(enum)

    owners: Dict[str, str] = {}
    variants = []
    for variant in enum.variants:
        if variant.skip:
            continue

        discriminant = variant.discriminant
        if discriminant in owners:
            raise DiscriminantCollision(
                enum.name, discriminant, (owners[discriminant], variant.name)
            )
        owners[discriminant] = variant.name

        if variant.kind == VariantKind.UNIT:
            payload = PayloadKind.NONE
        elif variant.kind == VariantKind.ANONYMOUS_STRUCT:
            payload = PayloadKind.ANONYMOUS
        else:
            payload = _payload_kind(variant.type_ref, enum.generic_params)

        variants.append(
            VariantShape(
                variant_name=variant.name,
                discriminant=discriminant,
                payload=payload,
                type_ref=variant.type_ref,
                fields=list(variant.fields),
                constructor_name=constructor_name(enum.name, variant.name),
                doc_comment=variant.doc_comment,
            )
        )

    kind = EnumShapeKind.PURE_ENUMERATION if is_pure else EnumShapeKind.TAGGED_UNION
    logger.debug(f"Classified {enum.name} as {kind.value} with {len(variants)} variant(s)")
    return EnumShape(enum.name, kind, variants)


def classify_graph(graph: TypeGraph) -> Dict[str, EnumShape]:
    """Classify every enum of the graph, keyed by enum name."""
    return {enum.name: classify(enum) for enum in graph.enums()}
