"""
Python code generator implementation.

Generates Pydantic v2 models using templates. Tagged unions become a
``{Enum}Types`` string enum, one container model per variant and a wrapper
model holding the tag and the content.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from .... import __version__
from ...core.classify import EnumShape, PayloadKind, VariantShape
from ...core.config import GeneratorConfig
from ...core.errors import UnsupportedShape
from ...core.generator import CodeGenerator, EmittedDeclaration
from ...core.ir import AliasDecl, EnumDecl, StructDecl, TypeDecl, TypeGraph, TypeKind, TypeRef
from ...core.naming import NameSanitizer, NamingCase, NamingContext, ResolvedName
from ...core.promote import Promotion
from ...core.templates import quote_literal
from ....logging_config import get_logger
from .config import PYTHON_IMPORT_MAP, PythonConfig, UnitEnumStyle
from .naming import create_python_sanitizer

logger = get_logger(__name__)


@dataclass
class _Fragment:
    """Imports and type variables collected while rendering one declaration."""

    declaration: str
    generic_params: List[str] = field(default_factory=list)
    imports: Set[Tuple[str, Optional[str]]] = field(default_factory=set)
    type_vars: List[str] = field(default_factory=list)

    def need(self, name: str, module: Optional[str] = None):
        self.imports.add((module or PYTHON_IMPORT_MAP[name], name))

    def emitted(
        self, name: str, kind: str, code: str, source_name: Optional[str] = None
    ) -> EmittedDeclaration:
        return EmittedDeclaration(
            name=name,
            source_name=source_name or self.declaration,
            kind=kind,
            code=code,
            imports=frozenset(self.imports),
            type_vars=tuple(self.type_vars),
        )


def _docstring_text(text: str) -> str:
    """Make free text safe to place inside a triple-quoted docstring."""
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


class PythonGenerator(CodeGenerator):
    """Code generator for Pydantic v2 models."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Python generator with configuration."""
        super().__init__(config)

        # Initialize Python-specific configuration
        self.python_config = PythonConfig(self.config.type_mappings, **self.config.custom)

        # State tracking
        self._type_names: Dict[str, str] = {}
        self._taken_names: Set[str] = set()

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def create_sanitizer(self) -> NameSanitizer:
        return create_python_sanitizer()

    def builtin_named_types(self) -> set:
        return set(self.python_config.named_map)

    def emit(
        self,
        graph: TypeGraph,
        shapes: Dict[str, EnumShape],
        promotions: List[Promotion],
    ) -> List[EmittedDeclaration]:
        """Render every declaration of the promoted graph as Python source."""
        # Reset state
        self._type_names = {}
        self._taken_names = set()
        for decl in graph:
            name = self.type_name(decl)
            if name in self._taken_names:
                raise UnsupportedShape(
                    f"class name '{name}' is used by more than one declaration", decl.name
                )
            self._taken_names.add(name)
            self._type_names[decl.name] = name

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
        class_name = self._type_names[decl.name]
        fragment = self._fragment(decl)
        fragment.need("BaseModel")

        fields = self._field_data(decl.name, decl.fields, fragment)
        config_args = []
        if any(f["alias"] is not None for f in fields):
            fragment.need("ConfigDict")
            config_args.append("populate_by_name=True")

        code = self.render_template(
            "struct.py.j2",
            {
                "class_name": class_name,
                "bases": self._bases(fragment),
                "description": self._description(decl.doc_comment),
                "config_args": config_args,
                "fields": fields,
            },
        )

        if promotion is not None:
            return fragment.emitted(class_name, "promoted_struct", code, promotion.enum_name)
        return fragment.emitted(class_name, "struct", code)

    def _emit_pure_enum(self, decl: EnumDecl, shape: EnumShape) -> EmittedDeclaration:
        name = self._type_names[decl.name]
        fragment = self._fragment(decl)
        description = self._description(decl.doc_comment)

        if self.python_config.unit_enum_style == UnitEnumStyle.LITERAL and shape.variants:
            fragment.need("Literal")
            code = self.render_template(
                "literal_enum.py.j2",
                {
                    "alias_name": name,
                    "values": [v.discriminant for v in shape.variants],
                    "description": description,
                },
            )
        else:
            fragment.need("Enum")
            code = self.render_template(
                "enum.py.j2",
                {
                    "class_name": name,
                    "members": self._enum_members(decl.name, shape),
                    "description": description,
                },
            )
        return fragment.emitted(name, "enum", code)

    def _emit_tagged_union(
        self, decl: EnumDecl, shape: EnumShape
    ) -> List[EmittedDeclaration]:
        class_name = self._type_names[decl.name]
        emitted = []

        tag = self._key_name(decl, decl.tag_key)
        content = self._key_name(decl, decl.content_key)
        if tag.identifier == content.identifier:
            raise UnsupportedShape(
                f"tag key '{decl.tag_key}' and content key '{decl.content_key}' "
                f"map to the same field '{tag.identifier}'",
                decl.name,
            )

        # Discriminant enumeration
        types_name = self._claim_name(f"{class_name}Types", decl.name)
        members = self._enum_members(decl.name, shape)
        types_fragment = _Fragment(decl.name)
        types_fragment.need("Enum")
        emitted.append(
            types_fragment.emitted(
                types_name,
                "discriminant",
                self.render_template(
                    "enum.py.j2",
                    {"class_name": types_name, "members": members, "description": None},
                ),
            )
        )

        wrapper = self._fragment(decl)
        wrapper.need("BaseModel")
        wrapper.need("ConfigDict")
        wrapper.need("Union")

        union_members = []
        constructors = []
        for variant, member in zip(shape.variants, members):
            if variant.payload == PayloadKind.ANONYMOUS:
                # Promoted structs are content types on their own
                payload_type = self.python_type(
                    self._promoted_ref(decl, variant), wrapper, variant.variant_name
                )
                union_members.append(payload_type)
                argument_type = payload_type
                value = content.identifier
            else:
                container, container_type = self._emit_container(decl, class_name, variant)
                emitted.append(container)
                union_members.append(container_type)
                if variant.payload == PayloadKind.NONE:
                    argument_type = None
                    value = "None"
                else:
                    argument_type = self.python_type(
                        variant.type_ref, wrapper, variant.variant_name
                    )
                    value = f"{container.name}({content.identifier})"

            constructors.append(
                {
                    "variant": variant,
                    "argument_type": argument_type,
                    "tag_value": f"{types_name}.{member['name']}",
                    "content_value": value,
                }
            )

        if shape.has_unit_variant:
            union_members.append("None")

        fields = [
            self._field_entry(tag, types_name, wrapper),
            self._field_entry(
                content,
                f"Union[{', '.join(union_members)}]",
                wrapper,
                optional_default=shape.has_unit_variant,
            ),
        ]
        shared = self._field_data(decl.name, decl.shared_fields, wrapper)
        for entry in shared:
            if entry["name"] in (tag.identifier, content.identifier):
                raise UnsupportedShape(
                    f"shared field '{entry['name']}' collides with the tag or content key",
                    decl.name,
                    entry["name"],
                )
        fields.extend(shared)

        config_args = ["use_enum_values=True"]
        if any(f["alias"] is not None for f in fields):
            config_args.append("populate_by_name=True")

        code = self.render_template(
            "tagged_union.py.j2",
            {
                "class_name": class_name,
                "bases": self._bases(wrapper),
                "description": self._description(decl.doc_comment),
                "config_args": config_args,
                "fields": fields,
                "constructors": self._constructor_data(
                    decl, constructors, tag, content, shared, wrapper
                )
                if self.config.generate_constructors
                else [],
            },
        )
        emitted.append(wrapper.emitted(class_name, "tagged_union", code))

        constructor_count = len(constructors) if self.config.generate_constructors else 0
        logger.debug(
            f"Tagged union {class_name}: {len(shape.variants)} variant(s), "
            f"{constructor_count} constructor(s)"
        )
        return emitted

    def _emit_container(
        self, decl: EnumDecl, class_name: str, variant: VariantShape
    ) -> Tuple[EmittedDeclaration, str]:
        """
        Root model holding the content of one variant.

        A root model serializes as its payload alone, so the wrapper's
        content key carries the bare value on the wire.
        """
        container_name = self._claim_name(
            self.resolver.resolve_type_name(
                f"{class_name}{variant.variant_name}", self.type_case
            ),
            decl.name,
        )

        if variant.payload == PayloadKind.NONE:
            generics = []
        else:
            referenced = variant.type_ref.referenced_names()
            generics = [p for p in decl.generic_params if p in referenced]

        fragment = _Fragment(decl.name, generics)
        fragment.type_vars = [self._type_var(p) for p in generics]
        fragment.need("RootModel")

        if variant.payload == PayloadKind.NONE:
            entry = self._field_entry(ResolvedName("root"), "None", fragment, optional_default=True)
        else:
            entry = self._field_entry(
                ResolvedName("root"),
                self.python_type(variant.type_ref, fragment, variant.variant_name),
                fragment,
            )

        code = self.render_template(
            "struct.py.j2",
            {
                "class_name": container_name,
                "bases": self._bases(fragment, "RootModel"),
                "description": self._description(variant.doc_comment),
                "config_args": [],
                "fields": [entry],
            },
        )

        reference = container_name
        if generics:
            reference = f"{container_name}[{', '.join(fragment.type_vars)}]"
        return fragment.emitted(container_name, "variant", code), reference

    def _emit_alias(self, decl: AliasDecl) -> EmittedDeclaration:
        name = self._type_names[decl.name]
        fragment = self._fragment(decl)
        target = self.python_type(decl.type_ref, fragment)
        code = self.render_template(
            "alias.py.j2",
            {
                "alias_name": name,
                "target": target,
                "description": self._description(decl.doc_comment),
            },
        )
        return fragment.emitted(name, "alias", code)

    # Fields and members

    def _field_data(
        self, declaration: str, fields, fragment: _Fragment
    ) -> List[Dict[str, Any]]:
        """Template data for a list of fields."""
        resolved = self.resolver.resolve_fields(declaration, fields, self.field_case)
        data = []
        for f, name in zip(fields, resolved):
            annotation = self.python_type(f.type_ref, fragment, f.name)
            if f.is_optional:
                fragment.need("Optional")
                annotation = f"Optional[{annotation}]"
            entry = self._field_entry(
                name, annotation, fragment, optional_default=f.is_optional
            )
            entry["description"] = self._description(f.doc_comment)
            data.append(entry)
        return data

    def _field_entry(
        self,
        name: ResolvedName,
        annotation: str,
        fragment: _Fragment,
        optional_default: bool = False,
    ) -> Dict[str, Any]:
        if name.alias is not None:
            fragment.need("Annotated")
            fragment.need("Field")
            annotation = f"Annotated[{annotation}, Field(alias={quote_literal(name.alias)})]"
        return {
            "name": name.identifier,
            "annotation": annotation,
            "default": " = None" if optional_default else "",
            "alias": name.alias,
            "description": None,
        }

    def _key_name(self, decl: EnumDecl, key: str) -> ResolvedName:
        """Field name of the tag or content key of a tagged union."""
        return self.resolver.resolve(
            key, NamingContext(self.field_case, declaration=decl.name, member=key)
        )

    def _enum_members(self, declaration: str, shape: EnumShape) -> List[Dict[str, str]]:
        members = []
        seen: Dict[str, str] = {}
        for variant in shape.variants:
            member = self.resolver.resolve(
                variant.variant_name,
                NamingContext(
                    self.constant_case, declaration=declaration, member=variant.variant_name
                ),
            ).identifier
            if member in seen:
                raise UnsupportedShape(
                    f"variants {seen[member]} and {variant.variant_name} "
                    f"both map to enum member '{member}'",
                    declaration,
                    variant.variant_name,
                )
            seen[member] = variant.variant_name
            members.append({"name": member, "value": variant.discriminant})
        return members

    def _constructor_data(
        self,
        decl: EnumDecl,
        constructors: List[Dict[str, Any]],
        tag: ResolvedName,
        content: ResolvedName,
        shared: List[Dict[str, Any]],
        fragment: _Fragment,
    ) -> List[Dict[str, str]]:
        """Classmethods building the wrapper for each variant."""
        # Required parameters must precede the ones defaulting to None
        shared_params = [f"{f['name']}: {f['annotation']}" for f in shared if not f["default"]]
        shared_params += [
            f"{f['name']}: {f['annotation']} = None" for f in shared if f["default"]
        ]
        shared_arguments = [f"{f['name']}={f['name']}" for f in shared]
        field_names = {tag.identifier, content.identifier} | {f["name"] for f in shared}

        data = []
        for item in constructors:
            variant = item["variant"]
            name = self.resolver.resolve(
                variant.constructor_name,
                NamingContext(
                    NamingCase.SNAKE_CASE,
                    declaration=decl.name,
                    member=variant.variant_name,
                ),
            ).identifier
            if name in field_names:
                raise UnsupportedShape(
                    f"constructor '{name}' would shadow a field", decl.name, variant.variant_name
                )

            params = ["cls"]
            if item["argument_type"] is not None:
                params.append(f"{content.identifier}: {item['argument_type']}")
            params.extend(shared_params)

            arguments = [
                f"{tag.identifier}={item['tag_value']}",
                f"{content.identifier}={item['content_value']}",
            ]
            arguments.extend(shared_arguments)

            data.append(
                {"name": name, "params": ", ".join(params), "arguments": ", ".join(arguments)}
            )
        return data

    # Types

    def python_type(
        self, ref: TypeRef, fragment: _Fragment, member: Optional[str] = None
    ) -> str:
        """
        Python annotation for a type reference.

        Args:
            ref: Type reference to render
            fragment: Declaration being rendered, collects the imports
            member: Field or variant name, for error reporting

        Returns:
            Annotation source text
        """
        if ref.kind == TypeKind.PRIMITIVE:
            return self.python_config.primitive_type(ref.primitive)

        if ref.kind == TypeKind.LIST:
            fragment.need("List")
            return f"List[{self.python_type(ref.element, fragment, member)}]"

        if ref.kind == TypeKind.MAP:
            if ref.key.kind == TypeKind.NAMED and ref.key.name in fragment.generic_params:
                raise UnsupportedShape(
                    f"map keyed by the generic parameter '{ref.key.name}' is not supported",
                    fragment.declaration,
                    member,
                )
            fragment.need("Dict")
            key = self.python_type(ref.key, fragment, member)
            value = self.python_type(ref.element, fragment, member)
            return f"Dict[{key}, {value}]"

        if ref.kind == TypeKind.OPTIONAL:
            fragment.need("Optional")
            return f"Optional[{self.python_type(ref.element, fragment, member)}]"

        return self._named_type(ref, fragment, member)

    def _named_type(self, ref: TypeRef, fragment: _Fragment, member: Optional[str]) -> str:
        if ref.name in fragment.generic_params:
            return self._type_var(ref.name)

        if ref.name in self._type_names:
            name = self._type_names[ref.name]
        else:
            mapping = self.python_config.named_type(ref.name)
            if mapping is not None:
                module, name = mapping
                if module:
                    fragment.need(name, module)
            else:
                name = self.resolver.resolve_type_name(ref.name, self.type_case)

        if ref.args:
            args = ", ".join(self.python_type(a, fragment, member) for a in ref.args)
            return f"{name}[{args}]"
        return name

    # Helpers

    def _fragment(self, decl: TypeDecl) -> _Fragment:
        fragment = _Fragment(decl.name, list(decl.generic_params))
        fragment.type_vars = [self._type_var(p) for p in decl.generic_params]
        return fragment

    def _type_var(self, param: str) -> str:
        return self.resolver.resolve_type_name(param, NamingCase.ORIGINAL)

    def _bases(self, fragment: _Fragment, base: str = "BaseModel") -> str:
        if fragment.type_vars:
            fragment.need("Generic")
            return f"{base}, Generic[{', '.join(fragment.type_vars)}]"
        return base

    def _claim_name(self, name: str, declaration: str) -> str:
        """Reserve a synthesized class name, failing on collisions."""
        if name in self._taken_names:
            raise UnsupportedShape(
                f"generated class name '{name}' collides with another declaration",
                declaration,
            )
        self._taken_names.add(name)
        return name

    def _promoted_ref(self, decl: EnumDecl, shape: VariantShape) -> TypeRef:
        for variant in decl.variants:
            if variant.name == shape.variant_name:
                return variant.type_ref
        raise UnsupportedShape("promoted variant is missing", decl.name, shape.variant_name)

    def _description(self, text: Optional[str]) -> Optional[str]:
        if not text or not self.config.add_comments:
            return None
        return _docstring_text(text)

    # File

    def render_file(self, declarations: List[EmittedDeclaration]) -> str:
        """Render the module: header, imports, type variables, declarations."""
        from_imports: Dict[str, Set[str]] = {}
        module_imports: Set[str] = set()
        type_vars: Set[str] = set()

        for decl in declarations:
            for module, name in decl.imports:
                if name is None:
                    module_imports.add(module)
                else:
                    from_imports.setdefault(module, set()).add(name)
            type_vars.update(decl.type_vars)

        if type_vars:
            from_imports.setdefault("typing", set()).add("TypeVar")

        import_lines = [f"import {module}" for module in sorted(module_imports)]
        import_lines.extend(
            f"from {module} import {', '.join(sorted(names))}"
            for module, names in sorted(from_imports.items())
        )

        return self.render_template(
            "file.py.j2",
            {
                "version": __version__,
                "import_lines": import_lines,
                "type_vars": sorted(type_vars),
                "declarations": [d.code.strip("\n") for d in declarations],
            },
        )


# Factory functions
def create_python_generator(config: Optional[GeneratorConfig] = None) -> PythonGenerator:
    """Create a Python generator, with default configuration when none is given."""
    return PythonGenerator(config)


def create_literal_enum_generator() -> PythonGenerator:
    """Create a generator rendering unit-only enums as ``Literal`` aliases."""
    return PythonGenerator({"custom": {"unit_enum_style": "literal"}})
