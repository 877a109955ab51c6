"""
Go code generator implementation.

Generates Go types with JSON tags from a type graph. Tagged unions become a
string discriminant type, a wrapper struct holding the tag and the content,
an ``UnmarshalJSON`` method decoding the content by tag and one constructor
per variant.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .... import __version__
from ...core.classify import EnumShape, PayloadKind, VariantShape, is_pure_enumeration
from ...core.config import GeneratorConfig
from ...core.errors import UnsupportedShape
from ...core.generator import CodeGenerator, EmittedDeclaration
from ...core.ir import (
    AliasDecl,
    EnumDecl,
    Field,
    StructDecl,
    TypeDecl,
    TypeGraph,
    TypeKind,
    TypeRef,
)
from ...core.naming import NameSanitizer, NamingCase, NamingContext, ResolvedName
from ...core.promote import Promotion
from ...core.templates import quote_literal
from ....logging_config import get_logger
from .naming import create_go_sanitizer, validate_go_package_name
from .types import GoTypeMapper, GoTypeScope, create_type_config

logger = get_logger(__name__)

# Characters a struct tag value cannot carry
_ILLEGAL_TAG_CHARACTERS = ('"', "`", ",")


class GoGenerator(CodeGenerator):
    """Code generator for Go types with JSON tags."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Go generator with configuration."""
        super().__init__(config)

        # Initialize type system
        self.type_config = create_type_config(self.config.custom, self.config.type_mappings)
        self.type_mapper = GoTypeMapper(
            self.type_config,
            resolve_name=lambda name: self.resolver.resolve_type_name(name, self.type_case),
        )

        # State tracking
        self._type_names: Dict[str, str] = {}
        self._taken_names: Set[str] = set()

    def get_template_directory(self) -> Path:
        """Return the Go templates directory."""
        return Path(__file__).parent / "templates"

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "go"

    @property
    def file_extension(self) -> str:
        """Return Go file extension."""
        return ".go"

    @property
    def field_case(self) -> NamingCase:
        # Unexported fields are invisible to encoding/json
        return NamingCase.PASCAL_CASE

    def create_sanitizer(self) -> NameSanitizer:
        return create_go_sanitizer()

    def builtin_named_types(self) -> set:
        return self.type_mapper.known_named_types()

    def emit(
        self,
        graph: TypeGraph,
        shapes: Dict[str, EnumShape],
        promotions: List[Promotion],
    ) -> List[EmittedDeclaration]:
        """Render every declaration of the promoted graph as Go source."""
        # Reset state
        self._type_names = {}
        self._taken_names = set()
        for decl in graph:
            self._type_names[decl.name] = self._claim_name(self.type_name(decl), decl.name)

        promoted = {p.struct_name: p for p in promotions}
        declarations = []

        for decl in self.ordered_declarations(graph):
            if isinstance(decl, StructDecl):
                declarations.append(self._emit_struct(decl, promoted.get(decl.name)))
            elif isinstance(decl, EnumDecl):
                shape = shapes[decl.name]
                if shape.is_pure:
                    declarations.append(self._emit_pure_enum(decl, shape))
                else:
                    declarations.extend(self._emit_tagged_union(decl, shape))
            elif isinstance(decl, AliasDecl):
                declarations.append(self._emit_alias(decl))

        return declarations

    # Declarations

    def _emit_struct(
        self, decl: StructDecl, promotion: Optional[Promotion] = None
    ) -> EmittedDeclaration:
        struct_name = self._type_names[decl.name]
        scope = self._scope(decl)
        fields, go_types = self._field_data(decl.name, decl.fields, scope)

        code = self.render_template(
            "struct.go.j2",
            {
                "struct_name": struct_name,
                "type_params": self._type_params(decl.generic_params),
                "description": self._description(decl.doc_comment),
                "fields": fields,
            },
        )

        imports = self.type_mapper.get_all_imports(go_types)
        if promotion is not None:
            return self._emitted(struct_name, promotion.enum_name, "promoted_struct", code, imports)
        return self._emitted(struct_name, decl.name, "struct", code, imports)

    def _emit_pure_enum(self, decl: EnumDecl, shape: EnumShape) -> EmittedDeclaration:
        type_name = self._type_names[decl.name]
        code = self.render_template(
            "enum.go.j2",
            {
                "type_name": type_name,
                "description": self._description(decl.doc_comment),
                "constants": self._constants(decl.name, type_name, type_name, shape),
            },
        )
        return self._emitted(type_name, decl.name, "enum", code)

    def _emit_tagged_union(self, decl: EnumDecl, shape: EnumShape) -> List[EmittedDeclaration]:
        if decl.generic_params:
            raise UnsupportedShape(
                "generic tagged unions cannot be decoded by encoding/json", decl.name
            )

        struct_name = self._type_names[decl.name]
        scope = self._scope(decl)

        tag = self._key_name(decl, decl.tag_key)
        content = self._key_name(decl, decl.content_key)
        if tag.identifier == content.identifier:
            raise UnsupportedShape(
                f"tag key '{decl.tag_key}' and content key '{decl.content_key}' "
                f"map to the same field '{tag.identifier}'",
                decl.name,
            )

        # Discriminant type
        types_name = self._claim_name(f"{struct_name}Types", decl.name)
        constants = self._constants(decl.name, types_name, f"{struct_name}TypeVariant", shape)
        discriminant = self.render_template(
            "enum.go.j2",
            {
                "type_name": types_name,
                "description": f"{types_name} is the discriminant of {struct_name}.",
                "constants": constants,
            },
        )

        shared, go_types = self._field_data(decl.name, decl.shared_fields, scope)
        for entry in shared:
            if entry["name"] in (tag.identifier, content.identifier):
                raise UnsupportedShape(
                    f"shared field '{entry['name']}' collides with the tag or content key",
                    decl.name,
                    entry["name"],
                )

        fields = [
            self._field_entry(tag, types_name, omit_empty=False),
            self._field_entry(content, "any", omit_empty=True),
        ] + shared
        self._align(fields)

        cases = []
        constructors = []
        for variant, constant in zip(shape.variants, constants):
            content_type = None
            if variant.payload != PayloadKind.NONE:
                go_type = self.type_mapper.map_type(self._payload_ref(decl, variant), scope)
                go_types.append(go_type)
                content_type = go_type.name
            cases.append({"constant": constant["name"], "content_type": content_type})
            constructors.append((variant, constant["name"], content_type))

        imports = self.type_mapper.get_all_imports(go_types) | {"encoding/json", "fmt"}

        code = self.render_template(
            "tagged_union.go.j2",
            {
                "struct_name": struct_name,
                "description": self._description(decl.doc_comment),
                "fields": fields,
                "tag": tag,
                "content": content,
                "content_tag": self._json_tag(content.wire_name, omit_empty=True),
                "cases": cases,
                "constructors": self._constructor_data(
                    decl, struct_name, constructors, tag, content, shared
                )
                if self.config.generate_constructors
                else [],
            },
        )

        logger.debug(
            f"Tagged union {struct_name}: {len(shape.variants)} variant(s), "
            f"content decoded by {types_name}"
        )
        return [
            self._emitted(types_name, decl.name, "discriminant", discriminant),
            self._emitted(struct_name, decl.name, "tagged_union", code, imports),
        ]

    def _emit_alias(self, decl: AliasDecl) -> EmittedDeclaration:
        type_name = self._type_names[decl.name]
        scope = self._scope(decl)

        ref = decl.type_ref
        if ref.kind == TypeKind.NAMED and ref.name in decl.generic_params:
            raise UnsupportedShape(
                f"alias to the bare type parameter '{ref.name}' is not expressible in Go",
                decl.name,
            )
        target = self.type_mapper.map_type(ref, scope)

        code = self.render_template(
            "alias.go.j2",
            {
                "type_name": type_name,
                "type_params": self._type_params(decl.generic_params),
                "target": target.name,
                "description": self._description(decl.doc_comment),
            },
        )
        return self._emitted(type_name, decl.name, "alias", code, target.imports_needed)

    # Fields and members

    def _field_data(self, declaration: str, fields: List[Field], scope: GoTypeScope):
        """Template data and mapped types for a list of fields."""
        resolved = self.resolver.resolve_fields(declaration, fields, self.field_case)
        data = []
        go_types = []
        for f, name in zip(fields, resolved):
            scope.member = f.name
            go_type = self.type_mapper.map_field_type(f, scope)
            go_types.append(go_type)

            self._check_tag(name.wire_name, declaration, f.name)
            entry = self._field_entry(
                name,
                go_type.name,
                omit_empty=f.is_optional and self.type_config.omit_empty_optional,
            )
            entry["comment"] = self._description(f.doc_comment)
            data.append(entry)
        scope.member = None

        self._align(data)
        return data, go_types

    def _field_entry(self, name: ResolvedName, go_type: str, omit_empty: bool) -> Dict[str, Any]:
        return {
            "name": name.identifier,
            "type": go_type,
            "json_tag": self._json_tag(name.wire_name, omit_empty),
            "comment": None,
        }

    @staticmethod
    def _json_tag(wire_name: str, omit_empty: bool) -> str:
        options = ",omitempty" if omit_empty else ""
        return f'`json:"{wire_name}{options}"`'

    @staticmethod
    def _check_tag(wire_name: str, declaration: str, member: Optional[str]):
        if any(c in wire_name for c in _ILLEGAL_TAG_CHARACTERS):
            raise UnsupportedShape(
                f"serialized name {wire_name!r} cannot be written in a struct tag",
                declaration,
                member,
            )

    @staticmethod
    def _align(fields: List[Dict[str, Any]]):
        """Pad names and types into columns, the way gofmt lays out a struct."""
        name_width = max((len(f["name"]) for f in fields), default=0)
        type_width = max((len(f["type"]) for f in fields), default=0)
        for f in fields:
            f["padded_name"] = f["name"].ljust(name_width)
            f["padded_type"] = f["type"].ljust(type_width)

    def _key_name(self, decl: EnumDecl, key: str) -> ResolvedName:
        """Field name of the tag or content key of a tagged union."""
        self._check_tag(key, decl.name, key)
        return self.resolver.resolve(
            key, NamingContext(self.field_case, declaration=decl.name, member=key)
        )

    def _constants(
        self, declaration: str, type_name: str, prefix: str, shape: EnumShape
    ) -> List[Dict[str, str]]:
        """Named constants of a string enumeration, one per serialized variant."""
        constants = []
        for variant in shape.variants:
            suffix = self.resolver.resolve(
                variant.variant_name,
                NamingContext(
                    self.constant_case, declaration=declaration, member=variant.variant_name
                ),
            ).identifier
            constants.append(
                {
                    "name": self._claim_name(f"{prefix}{suffix}", declaration),
                    "type": type_name,
                    "value": quote_literal(variant.discriminant),
                }
            )

        width = max((len(c["name"]) for c in constants), default=0)
        for c in constants:
            c["padded_name"] = c["name"].ljust(width)
        return constants

    def _constructor_data(
        self,
        decl: EnumDecl,
        struct_name: str,
        constructors,
        tag: ResolvedName,
        content: ResolvedName,
        shared: List[Dict[str, Any]],
    ) -> List[Dict[str, str]]:
        """Functions building the wrapper for each variant."""
        content_param = self._param_name(decl, content.identifier)
        shared_params = []
        shared_values = []
        for entry in shared:
            param = self._param_name(decl, entry["name"])
            if param == content_param:
                param = f"{param}_"
            shared_params.append(f"{param} {entry['type']}")
            shared_values.append(f"{entry['name']}: {param}")

        data = []
        for variant, constant, content_type in constructors:
            suffix = self.resolver.resolve(
                variant.variant_name,
                NamingContext(
                    NamingCase.PASCAL_CASE, declaration=decl.name, member=variant.variant_name
                ),
            ).identifier
            name = self._claim_name(f"New{struct_name}{suffix}", decl.name)

            params = []
            values = [f"{tag.identifier}: {constant}"]
            if content_type is not None:
                params.append(f"{content_param} {content_type}")
                values.append(f"{content.identifier}: {content_param}")
            params.extend(shared_params)
            values.extend(shared_values)

            data.append(
                {
                    "name": name,
                    "variant": variant.variant_name,
                    "params": ", ".join(params),
                    "literal": f"{struct_name}{{{', '.join(values)}}}",
                }
            )
        return data

    def _param_name(self, decl: EnumDecl, identifier: str) -> str:
        return self.resolver.resolve(
            identifier, NamingContext(NamingCase.CAMEL_CASE, declaration=decl.name)
        ).identifier

    # Helpers

    def _scope(self, decl: TypeDecl) -> GoTypeScope:
        return GoTypeScope(decl.name, list(decl.generic_params), self._type_names)

    @staticmethod
    def _type_params(generic_params: List[str]) -> str:
        if not generic_params:
            return ""
        return f"[{', '.join(f'{p} any' for p in generic_params)}]"

    def _claim_name(self, name: str, declaration: str) -> str:
        """Reserve a package-level name, failing on collisions."""
        if name in self._taken_names:
            raise UnsupportedShape(
                f"package-level name '{name}' is used more than once", declaration
            )
        self._taken_names.add(name)
        return name

    def _payload_ref(self, decl: EnumDecl, shape: VariantShape) -> TypeRef:
        """Type carried by a variant, promoted struct included."""
        if shape.payload != PayloadKind.ANONYMOUS:
            return shape.type_ref
        for variant in decl.variants:
            if variant.name == shape.variant_name:
                return variant.type_ref
        raise UnsupportedShape("promoted variant is missing", decl.name, shape.variant_name)

    def _description(self, text: Optional[str]) -> Optional[str]:
        if not text or not self.config.add_comments:
            return None
        return text

    @staticmethod
    def _emitted(
        name: str, source_name: str, kind: str, code: str, imports=()
    ) -> EmittedDeclaration:
        return EmittedDeclaration(
            name=name,
            source_name=source_name,
            kind=kind,
            code=code,
            imports=frozenset((path, None) for path in imports),
        )

    def validate_graph(self, graph: TypeGraph) -> List[str]:
        """Validate a graph for Go generation."""
        warnings = super().validate_graph(graph)

        for decl in graph:
            if (
                isinstance(decl, EnumDecl)
                and decl.generic_params
                and not is_pure_enumeration(decl)
            ):
                warnings.append(f"Generic tagged union '{decl.name}' cannot be generated")

        # Validate package name
        warnings.extend(validate_go_package_name(self.config.package_name))
        return warnings

    # File

    def render_file(self, declarations: List[EmittedDeclaration]) -> str:
        """Render the file: header, package clause, imports, declarations."""
        imports = sorted({module for decl in declarations for module, _ in decl.imports})
        return self.render_template(
            "file.go.j2",
            {
                "version": __version__,
                "package_name": self.config.package_name,
                "imports": imports,
                "declarations": [d.code.strip("\n") for d in declarations],
            },
        )


# Factory functions
def create_go_generator(config: Optional[GeneratorConfig] = None) -> GoGenerator:
    """Create a Go generator, with default configuration when none is given."""
    return GoGenerator(config)


def create_strict_go_generator() -> GoGenerator:
    """Create a generator that never uses pointers, optional fields rely on zero values."""
    return GoGenerator({"custom": {"pointer_strategy": "never"}})
