"""
Anonymous variant promotion.

Enum variants whose payload is an inline field list get a synthesized
struct of their own, named after the enum and the variant and placed
right before the enum so it is always declared before use.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import PromotionNameCollision
from .ir import StructDecl, TypeGraph, TypeRef, VariantKind
from .naming import NamingCase, convert_case
from ...logging_config import get_logger

logger = get_logger(__name__)

PROMOTED_DOC_COMMENT = (
    "Generated type representing the anonymous struct variant `{variant}` "
    "of the `{enum}` enum"
)


@dataclass(frozen=True)
class Promotion:
    """Record of one anonymous variant turned into a named struct."""

    enum_name: str
    variant_name: str
    struct_name: str


@dataclass
class PromotionResult:
    """Promoted copy of the graph and what was promoted in it."""

    graph: TypeGraph
    promotions: List[Promotion] = field(default_factory=list)

    def lookup(self, enum_name: str, variant_name: str) -> Optional[Promotion]:
        for promotion in self.promotions:
            if promotion.enum_name == enum_name and promotion.variant_name == variant_name:
                return promotion
        return None

    def struct_names(self) -> List[str]:
        return [p.struct_name for p in self.promotions]


def _used_generics(fields, generic_params: List[str]) -> List[str]:
    """Generic parameters referenced by the fields, in declaration order."""
    referenced = set()
    for f in fields:
        referenced.update(f.type_ref.referenced_names())
    return [param for param in generic_params if param in referenced]


def promote(graph: TypeGraph, type_case: NamingCase = NamingCase.PASCAL_CASE) -> PromotionResult:
    """
    Promote every anonymous struct variant of the graph.

    The input graph is left untouched; the result holds an extended copy in
    which each promoted variant is a typed variant referring to its new
    struct.

    Args:
        graph: Type graph to promote
        type_case: Case convention for synthesized struct names

    Returns:
        PromotionResult with the promoted graph and the promotion records

    Raises:
        PromotionNameCollision: If a synthesized name is already declared
    """
    promoted = graph.copy()
    promotions = []

    for enum in promoted.enums():
        for variant in enum.variants:
            # Skipped variants never reach the output, nor does their payload
            if variant.skip or variant.kind != VariantKind.ANONYMOUS_STRUCT:
                continue

            struct_name = convert_case(f"{enum.name}{variant.name}", type_case)
            if not struct_name or struct_name in promoted:
                raise PromotionNameCollision(enum.name, variant.name, struct_name)

            generics = _used_generics(variant.fields, enum.generic_params)
            promoted.insert_before(
                enum.name,
                StructDecl(
                    name=struct_name,
                    doc_comment=PROMOTED_DOC_COMMENT.format(
                        variant=variant.name, enum=enum.name
                    ),
                    generic_params=generics,
                    fields=variant.fields,
                ),
            )

            # The variant now simply refers to the synthesized struct
            variant.kind = VariantKind.TYPED
            variant.type_ref = TypeRef.named(
                struct_name, tuple(TypeRef.named(param) for param in generics)
            )
            variant.fields = []

            promotions.append(Promotion(enum.name, variant.name, struct_name))

    logger.debug(f"Promoted {len(promotions)} anonymous variant(s)")
    return PromotionResult(promoted, promotions)
