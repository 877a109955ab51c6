"""
Intermediate representation of the type graph.

The external parser hands over an attribute-annotated graph of structs,
enums and aliases as a JSON document; ``graph_from_dict`` converts it into
the normalized dataclasses below that every generator works with.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


class GraphFormatError(ValueError):
    """Raised when the input document does not describe a valid type graph."""

    def __init__(self, message: str, path: str = "$"):
        self.path = path
        super().__init__(f"{path}: {message}")


class PrimitiveKind(Enum):
    """Primitive types understood by every backend."""

    STRING = "string"
    CHAR = "char"
    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U53 = "u53"
    I54 = "i54"
    ISIZE = "isize"
    USIZE = "usize"
    F32 = "f32"
    F64 = "f64"
    UNIT = "unit"


class TypeKind(Enum):
    """Shape of a type reference."""

    PRIMITIVE = "primitive"
    LIST = "list"
    MAP = "map"
    OPTIONAL = "optional"
    NAMED = "named"


@dataclass(frozen=True)
class TypeRef:
    """
    Recursive, immutable description of a referenced type.

    Use the ``of_primitive``/``list_of``/``map_of``/``optional_of``/``named``
    constructors rather than building instances by hand; ``optional_of``
    keeps optionality flat.
    """

    kind: TypeKind
    primitive: Optional[PrimitiveKind] = None
    name: str = ""
    args: Tuple["TypeRef", ...] = ()

    @classmethod
    def of_primitive(cls, kind: Union[PrimitiveKind, str]) -> "TypeRef":
        return cls(TypeKind.PRIMITIVE, primitive=PrimitiveKind(kind))

    @classmethod
    def list_of(cls, element: "TypeRef") -> "TypeRef":
        return cls(TypeKind.LIST, args=(element,))

    @classmethod
    def map_of(cls, key: "TypeRef", value: "TypeRef") -> "TypeRef":
        return cls(TypeKind.MAP, args=(key, value))

    @classmethod
    def optional_of(cls, inner: "TypeRef") -> "TypeRef":
        if inner.kind == TypeKind.OPTIONAL:
            return inner
        return cls(TypeKind.OPTIONAL, args=(inner,))

    @classmethod
    def named(cls, name: str, args: Tuple["TypeRef", ...] = ()) -> "TypeRef":
        return cls(TypeKind.NAMED, name=name, args=tuple(args))

    @property
    def element(self) -> "TypeRef":
        """Element of a list, inner type of an optional, value of a map."""
        return self.args[-1]

    @property
    def key(self) -> "TypeRef":
        return self.args[0]

    def is_unit(self) -> bool:
        return self.kind == TypeKind.PRIMITIVE and self.primitive == PrimitiveKind.UNIT

    def referenced_names(self) -> List[str]:
        """Named types referenced anywhere inside this reference, in order."""
        names = []
        if self.kind == TypeKind.NAMED:
            names.append(self.name)
        for arg in self.args:
            for name in arg.referenced_names():
                if name not in names:
                    names.append(name)
        return names

    def __str__(self) -> str:
        if self.kind == TypeKind.PRIMITIVE:
            return self.primitive.value
        if self.kind == TypeKind.LIST:
            return f"List<{self.element}>"
        if self.kind == TypeKind.MAP:
            return f"Map<{self.key}, {self.element}>"
        if self.kind == TypeKind.OPTIONAL:
            return f"Optional<{self.element}>"
        if self.args:
            return f"{self.name}<{', '.join(str(a) for a in self.args)}>"
        return self.name


@dataclass
class Field:
    """A field of a struct or of an anonymous variant payload."""

    name: str
    type_ref: TypeRef
    is_optional: bool = False
    rename: Optional[str] = None
    doc_comment: Optional[str] = None

    @property
    def wire_name(self) -> str:
        """Name used in the serialized form."""
        return self.rename if self.rename is not None else self.name


class DeclKind(Enum):
    """Kinds of top-level declarations."""

    STRUCT = "struct"
    ENUM = "enum"
    ALIAS = "alias"


class VariantKind(Enum):
    """Payload kinds of an enum variant."""

    UNIT = "unit"
    TYPED = "typed"
    ANONYMOUS_STRUCT = "struct"


@dataclass
class Variant:
    """A single enum variant."""

    name: str
    kind: VariantKind = VariantKind.UNIT
    type_ref: Optional[TypeRef] = None
    fields: List[Field] = field(default_factory=list)
    skip: bool = False
    rename: Optional[str] = None
    doc_comment: Optional[str] = None

    @property
    def discriminant(self) -> str:
        """Wire tag of this variant."""
        return self.rename if self.rename is not None else self.name


@dataclass
class TypeDecl:
    """Common attributes of every declaration."""

    name: str
    doc_comment: Optional[str] = None
    generic_params: List[str] = field(default_factory=list)
    rename: Optional[str] = None

    kind = None

    @property
    def emitted_name(self) -> str:
        return self.rename if self.rename is not None else self.name

    def referenced_names(self) -> List[str]:
        return []


@dataclass
class StructDecl(TypeDecl):
    fields: List[Field] = field(default_factory=list)

    kind = DeclKind.STRUCT

    def referenced_names(self) -> List[str]:
        return _collect_names(f.type_ref for f in self.fields)


@dataclass
class EnumDecl(TypeDecl):
    variants: List[Variant] = field(default_factory=list)
    shared_fields: List[Field] = field(default_factory=list)
    tag_key: str = "type"
    content_key: str = "content"

    kind = DeclKind.ENUM

    def referenced_names(self) -> List[str]:
        refs = [f.type_ref for f in self.shared_fields]
        for variant in self.variants:
            if variant.skip:
                continue
            if variant.type_ref is not None:
                refs.append(variant.type_ref)
            refs.extend(f.type_ref for f in variant.fields)
        return _collect_names(refs)


@dataclass
class AliasDecl(TypeDecl):
    type_ref: Optional[TypeRef] = None

    kind = DeclKind.ALIAS

    def referenced_names(self) -> List[str]:
        return self.type_ref.referenced_names() if self.type_ref else []


def _collect_names(refs) -> List[str]:
    names = []
    for ref in refs:
        for name in ref.referenced_names():
            if name not in names:
                names.append(name)
    return names


class TypeGraph:
    """Ordered collection of declarations, keyed by source name."""

    def __init__(self, declarations: Optional[List[TypeDecl]] = None):
        self._declarations: List[TypeDecl] = []
        for decl in declarations or []:
            self.add(decl)

    def add(self, decl: TypeDecl) -> None:
        """Append a declaration; names must be unique."""
        if decl.name in self:
            raise GraphFormatError(f"duplicate declaration '{decl.name}'")
        self._declarations.append(decl)

    def insert_before(self, anchor: str, decl: TypeDecl) -> None:
        """Insert ``decl`` immediately before the declaration named ``anchor``."""
        if decl.name in self:
            raise GraphFormatError(f"duplicate declaration '{decl.name}'")
        index = self.index_of(anchor)
        self._declarations.insert(index, decl)

    def index_of(self, name: str) -> int:
        for index, decl in enumerate(self._declarations):
            if decl.name == name:
                return index
        raise KeyError(name)

    def get(self, name: str) -> Optional[TypeDecl]:
        for decl in self._declarations:
            if decl.name == name:
                return decl
        return None

    def names(self) -> List[str]:
        return [decl.name for decl in self._declarations]

    def enums(self) -> List[EnumDecl]:
        return [d for d in self._declarations if isinstance(d, EnumDecl)]

    def copy(self) -> "TypeGraph":
        """Deep copy; the copy shares nothing mutable with the original."""
        return TypeGraph(copy.deepcopy(self._declarations))

    def __contains__(self, name: str) -> bool:
        return any(decl.name == name for decl in self._declarations)

    def __iter__(self) -> Iterator[TypeDecl]:
        return iter(list(self._declarations))

    def __len__(self) -> int:
        return len(self._declarations)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TypeGraph):
            return NotImplemented
        return self._declarations == other._declarations

    def __repr__(self) -> str:
        return f"TypeGraph({self.names()!r})"


def dependency_order(graph: TypeGraph) -> List[str]:
    """
    Order declaration names so that referenced declarations come first.

    Depth-first over referenced names with declaration order as the
    tie-break; cycles are tolerated (the back edge is ignored).
    """
    visited = set()
    visiting = set()
    ordered = []

    def visit(name: str):
        if name in visited or name not in graph:
            return
        if name in visiting:
            # Circular reference, the forward reference is left as is
            return

        visiting.add(name)
        for dependency in graph.get(name).referenced_names():
            visit(dependency)
        visiting.remove(name)
        visited.add(name)
        ordered.append(name)

    for name in graph.names():
        visit(name)

    return ordered


# ---------------------------------------------------------------------------
# Loading from the parser's JSON document
# ---------------------------------------------------------------------------


def graph_from_dict(document: Dict[str, Any]) -> TypeGraph:
    """
    Convert the parser's JSON document into a TypeGraph.

    Args:
        document: Parsed JSON with a top-level ``declarations`` list

    Returns:
        TypeGraph with declarations in document order

    Raises:
        GraphFormatError: If the document is malformed
    """
    if not isinstance(document, dict):
        raise GraphFormatError("document must be an object")
    declarations = document.get("declarations")
    if not isinstance(declarations, list):
        raise GraphFormatError("'declarations' must be a list")

    graph = TypeGraph()
    for index, node in enumerate(declarations):
        path = f"$.declarations[{index}]"
        decl = _convert_declaration(node, path)
        if decl.name in graph:
            raise GraphFormatError(f"duplicate declaration '{decl.name}'", path)
        graph.add(decl)
    return graph


def _require(node: Dict[str, Any], key: str, path: str, kind=str):
    if key not in node:
        raise GraphFormatError(f"missing '{key}'", path)
    value = node[key]
    if not isinstance(value, kind):
        raise GraphFormatError(f"'{key}' must be of type {kind.__name__}", path)
    return value


def _optional_str(node: Dict[str, Any], key: str, path: str) -> Optional[str]:
    value = node.get(key)
    if value is not None and not isinstance(value, str):
        raise GraphFormatError(f"'{key}' must be a string", path)
    return value


def _convert_declaration(node: Any, path: str) -> TypeDecl:
    if not isinstance(node, dict):
        raise GraphFormatError("declaration must be an object", path)

    kind = _require(node, "kind", path)
    name = _require(node, "name", path)
    common = {
        "name": name,
        "doc_comment": _optional_str(node, "doc_comment", path),
        "generic_params": _convert_generic_params(node, path),
        "rename": _optional_str(node, "rename", path),
    }

    if kind == DeclKind.STRUCT.value:
        fields = _convert_fields(node.get("fields", []), f"{path}.fields")
        return StructDecl(fields=fields, **common)

    if kind == DeclKind.ENUM.value:
        variants = [
            _convert_variant(v, f"{path}.variants[{i}]")
            for i, v in enumerate(_require(node, "variants", path, list))
        ]
        shared = _convert_fields(node.get("shared_fields", []), f"{path}.shared_fields")
        return EnumDecl(
            variants=variants,
            shared_fields=shared,
            tag_key=_optional_str(node, "tag_key", path) or "type",
            content_key=_optional_str(node, "content_key", path) or "content",
            **common,
        )

    if kind == DeclKind.ALIAS.value:
        type_ref = _convert_type(_require(node, "type", path, dict), f"{path}.type")
        return AliasDecl(type_ref=type_ref, **common)

    raise GraphFormatError(f"unknown declaration kind '{kind}'", path)


def _convert_generic_params(node: Dict[str, Any], path: str) -> List[str]:
    params = node.get("generic_params", [])
    if not isinstance(params, list) or not all(isinstance(p, str) for p in params):
        raise GraphFormatError("'generic_params' must be a list of strings", path)
    if len(set(params)) != len(params):
        raise GraphFormatError("duplicate generic parameter", path)
    return list(params)


def _convert_fields(nodes: Any, path: str) -> List[Field]:
    if not isinstance(nodes, list):
        raise GraphFormatError("fields must be a list", path)
    fields = []
    for index, node in enumerate(nodes):
        field_path = f"{path}[{index}]"
        if not isinstance(node, dict):
            raise GraphFormatError("field must be an object", field_path)
        type_ref = _convert_type(_require(node, "type", field_path, dict), f"{field_path}.type")
        is_optional = bool(node.get("optional", False))

        # Optionality lives on the field, never at the top of its type
        if type_ref.kind == TypeKind.OPTIONAL:
            is_optional = True
            type_ref = type_ref.element

        fields.append(
            Field(
                name=_require(node, "name", field_path),
                type_ref=type_ref,
                is_optional=is_optional,
                rename=_optional_str(node, "rename", field_path),
                doc_comment=_optional_str(node, "doc_comment", field_path),
            )
        )
    return fields


def _convert_variant(node: Any, path: str) -> Variant:
    if not isinstance(node, dict):
        raise GraphFormatError("variant must be an object", path)

    payload = node.get("payload", {"kind": VariantKind.UNIT.value})
    if not isinstance(payload, dict):
        raise GraphFormatError("'payload' must be an object", path)

    try:
        kind = VariantKind(payload.get("kind", VariantKind.UNIT.value))
    except ValueError:
        raise GraphFormatError(f"unknown payload kind '{payload.get('kind')}'", f"{path}.payload")

    variant = Variant(
        name=_require(node, "name", path),
        kind=kind,
        skip=bool(node.get("skip", False)),
        rename=_optional_str(node, "rename", path),
        doc_comment=_optional_str(node, "doc_comment", path),
    )

    if kind == VariantKind.TYPED:
        variant.type_ref = _convert_type(
            _require(payload, "type", f"{path}.payload", dict), f"{path}.payload.type"
        )
    elif kind == VariantKind.ANONYMOUS_STRUCT:
        variant.fields = _convert_fields(payload.get("fields", []), f"{path}.payload.fields")

    return variant


def _convert_type(node: Dict[str, Any], path: str) -> TypeRef:
    """Recursively convert a JSON type node into a TypeRef."""
    if "primitive" in node:
        try:
            return TypeRef.of_primitive(node["primitive"])
        except ValueError:
            raise GraphFormatError(f"unknown primitive '{node['primitive']}'", path)

    if "list" in node:
        return TypeRef.list_of(_convert_type(_as_dict(node["list"], path), f"{path}.list"))

    if "map" in node:
        pair = node["map"]
        if not isinstance(pair, list) or len(pair) != 2:
            raise GraphFormatError("'map' must be a [key, value] pair", path)
        return TypeRef.map_of(
            _convert_type(_as_dict(pair[0], path), f"{path}.map[0]"),
            _convert_type(_as_dict(pair[1], path), f"{path}.map[1]"),
        )

    if "optional" in node:
        inner = _convert_type(_as_dict(node["optional"], path), f"{path}.optional")
        return TypeRef.optional_of(inner)

    if "named" in node:
        name = node["named"]
        if not isinstance(name, str) or not name:
            raise GraphFormatError("'named' must be a non-empty string", path)
        args = node.get("args", [])
        if not isinstance(args, list):
            raise GraphFormatError("'args' must be a list", path)
        return TypeRef.named(
            name,
            tuple(
                _convert_type(_as_dict(arg, path), f"{path}.args[{i}]")
                for i, arg in enumerate(args)
            ),
        )

    raise GraphFormatError("unrecognized type node", path)


def _as_dict(value: Any, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise GraphFormatError("type node must be an object", path)
    return value
