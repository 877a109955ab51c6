"""
Go-specific type system for code generation.

Provides clean, extensible type mapping with configuration-driven behavior.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from ...core.errors import UnsupportedShape
from ...core.ir import Field, PrimitiveKind, TypeKind, TypeRef


class PointerStrategy(Enum):
    """Strategies for using pointers in Go."""

    OPTIONAL_ONLY = "optional_only"  # Pointers only for optional, non-nilable fields
    ALWAYS = "always"  # Every optional field is a pointer
    NEVER = "never"  # Never use pointers


# Go type mappings
GO_PRIMITIVE_MAP = {
    PrimitiveKind.STRING: "string",
    # A char travels as a one-character string, a rune would encode as a number
    PrimitiveKind.CHAR: "string",
    PrimitiveKind.BOOL: "bool",
    PrimitiveKind.I8: "int8",
    PrimitiveKind.I16: "int16",
    PrimitiveKind.I32: "int32",
    PrimitiveKind.I64: "int64",
    PrimitiveKind.U8: "uint8",
    PrimitiveKind.U16: "uint16",
    PrimitiveKind.U32: "uint32",
    PrimitiveKind.U64: "uint64",
    PrimitiveKind.U53: "int64",
    PrimitiveKind.I54: "int64",
    PrimitiveKind.ISIZE: "int",
    PrimitiveKind.USIZE: "uint",
    PrimitiveKind.F32: "float32",
    PrimitiveKind.F64: "float64",
    # Unit goes through a nil pointer so it marshals as null
    PrimitiveKind.UNIT: "*struct{}",
}

# Named source types with a library equivalent
GO_SPECIAL_TYPES = {
    "DateTime": "time.Time",
    "Url": "string",
}


@dataclass(frozen=True)
class GoType:
    """
    Immutable representation of a Go type with all metadata.

    Carries everything needed to render a reference to the type: its
    spelling, whether it is already nilable and the imports it needs.
    """

    name: str  # The Go type name (e.g., "string", "*User")
    base_name: str = field(default="")  # Base name without pointer (e.g., "User")
    is_pointer: bool = field(default=False)  # Whether this is a pointer type
    imports_needed: FrozenSet[str] = field(default_factory=frozenset)  # Import paths
    is_nilable: bool = field(default=False)  # Can be nil

    def __post_init__(self):
        """Set base_name if not provided."""
        if not self.base_name:
            # Remove pointer prefix to get base name
            base = self.name[1:] if self.is_pointer else self.name
            object.__setattr__(self, "base_name", base)

    def as_pointer(self) -> "GoType":
        """Return a pointer version of this type."""
        if self.is_pointer:
            return self  # Already a pointer

        return GoType(
            name=f"*{self.name}",
            base_name=self.name,
            is_pointer=True,
            imports_needed=self.imports_needed,
            is_nilable=True,
        )


def parse_go_type_override(target: str) -> Tuple[Optional[str], str]:
    """
    Split a configured mapping into (import path, Go spelling).

    ``"time.Time"`` imports ``time``; ``"github.com/google/uuid.UUID"``
    imports ``github.com/google/uuid`` and is spelled ``uuid.UUID``.
    """
    if "." not in target.rsplit("/", 1)[-1]:
        return None, target
    path, _, name = target.rpartition(".")
    qualifier = path.rsplit("/", 1)[-1]
    return path, f"{qualifier}.{name}"


@dataclass
class GoTypeConfig:
    """Configuration for Go type mapping behavior."""

    # Pointer usage strategy
    pointer_strategy: PointerStrategy = PointerStrategy.OPTIONAL_ONLY

    # JSON tag preferences
    omit_empty_optional: bool = True

    # Named type overrides, source name -> Go type
    type_overrides: Dict[str, str] = field(default_factory=dict)


@dataclass
class GoTypeScope:
    """Where a type reference is being rendered."""

    declaration: str
    generic_params: List[str]
    type_names: Dict[str, str]
    member: Optional[str] = None


class GoTypeMapper:
    """
    Central engine for mapping type references to Go types.

    Handles primitive mapping, containers, named and generic references
    and the pointer decisions for optional fields.
    """

    def __init__(
        self,
        config: Optional[GoTypeConfig] = None,
        resolve_name: Optional[Callable[[str], str]] = None,
    ):
        """
        Initialize with type configuration.

        Args:
            config: Pointer and override settings
            resolve_name: Spelling of named types that are neither declared nor mapped
        """
        self.config = config or GoTypeConfig()
        self._resolve_name = resolve_name or (lambda name: name)
        self._primitive_types = self._build_primitive_type_map()
        self._named_overrides = {
            name: parse_go_type_override(target)
            for name, target in {**GO_SPECIAL_TYPES, **self.config.type_overrides}.items()
        }

    def _build_primitive_type_map(self) -> Dict[PrimitiveKind, GoType]:
        """Build mapping of primitive kinds to Go types."""
        return {
            kind: GoType(name=name, is_pointer=name.startswith("*"), is_nilable=name.startswith("*"))
            for kind, name in GO_PRIMITIVE_MAP.items()
        }

    def known_named_types(self) -> Set[str]:
        return set(self._named_overrides)

    def map_field_type(self, f: Field, scope: GoTypeScope) -> GoType:
        """
        Map a field to a Go type.

        Args:
            f: The field to map
            scope: Declaration the field belongs to

        Returns:
            GoType, a pointer when the field is optional and the pointer
            strategy asks for one
        """
        base_type = self.map_type(f.type_ref, scope)
        if not f.is_optional:
            return base_type  # Required fields don't need pointers
        return self._apply_pointer_strategy(base_type)

    def map_type(self, ref: TypeRef, scope: GoTypeScope) -> GoType:
        """Map a type reference without considering field optionality."""
        if ref.kind == TypeKind.PRIMITIVE:
            return self._primitive_types[ref.primitive]

        if ref.kind == TypeKind.LIST:
            element = self.map_type(ref.element, scope)
            return GoType(
                name=f"[]{element.name}",
                imports_needed=element.imports_needed,
                is_nilable=True,  # Slices can be nil
            )

        if ref.kind == TypeKind.MAP:
            if ref.key.kind == TypeKind.NAMED and ref.key.name in scope.generic_params:
                raise UnsupportedShape(
                    f"map keyed by the generic parameter '{ref.key.name}' is not supported",
                    scope.declaration,
                    scope.member,
                )
            key = self.map_type(ref.key, scope)
            value = self.map_type(ref.element, scope)
            return GoType(
                name=f"map[{key.name}]{value.name}",
                imports_needed=key.imports_needed | value.imports_needed,
                is_nilable=True,
            )

        if ref.kind == TypeKind.OPTIONAL:
            inner = self.map_type(ref.element, scope)
            return inner if inner.is_nilable else inner.as_pointer()

        return self._map_named_type(ref, scope)

    def _map_named_type(self, ref: TypeRef, scope: GoTypeScope) -> GoType:
        if ref.name in scope.generic_params:
            return GoType(name=ref.name)

        imports = frozenset()
        if ref.name in scope.type_names:
            name = scope.type_names[ref.name]
        elif ref.name in self._named_overrides:
            path, name = self._named_overrides[ref.name]
            if path:
                imports = frozenset({path})
        else:
            name = self._resolve_name(ref.name)

        if ref.args:
            args = [self.map_type(arg, scope) for arg in ref.args]
            for arg in args:
                imports = imports | arg.imports_needed
            name = f"{name}[{', '.join(arg.name for arg in args)}]"

        return GoType(name=name, imports_needed=imports)

    def _apply_pointer_strategy(self, base_type: GoType) -> GoType:
        """Apply pointer strategy to an optional field's type."""
        strategy = self.config.pointer_strategy

        if strategy == PointerStrategy.NEVER:
            return base_type
        if strategy == PointerStrategy.ALWAYS:
            return base_type.as_pointer()

        # Slices, maps and pointers already have nil
        if base_type.is_nilable:
            return base_type
        return base_type.as_pointer()

    def get_all_imports(self, types: List[GoType]) -> Set[str]:
        """Extract all unique imports needed for a list of types."""
        imports = set()
        for go_type in types:
            imports.update(go_type.imports_needed)
        return imports


def create_type_config(custom: Dict, type_overrides: Optional[Dict[str, str]] = None) -> GoTypeConfig:
    """Build a GoTypeConfig from the ``custom`` section of a generator config."""
    strategy = custom.get("pointer_strategy", PointerStrategy.OPTIONAL_ONLY.value)
    try:
        pointer_strategy = PointerStrategy(strategy)
    except ValueError:
        pointer_strategy = PointerStrategy.OPTIONAL_ONLY

    return GoTypeConfig(
        pointer_strategy=pointer_strategy,
        omit_empty_optional=custom.get("omit_empty", True),
        type_overrides=dict(type_overrides or {}),
    )
