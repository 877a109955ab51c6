"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement and the
pipeline every target runs: classify enums, promote anonymous variants,
emit declarations, render the file.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from .classify import EnumShape, classify_graph
from .config import GeneratorConfig, load_config
from .errors import GeneratorError, UnsupportedShape
from .ir import AliasDecl, EnumDecl, StructDecl, TypeDecl, TypeGraph, dependency_order
from .naming import NameSanitizer, NamingCase, NamingResolver, naming_case
from .promote import Promotion, promote
from .templates import TemplateEngine, TemplateError, create_template_engine
from ...logging_config import get_logger

logger = get_logger(__name__)

# (module, name) pairs; name is None for a plain module import
ImportSet = FrozenSet[Tuple[str, Optional[str]]]


@dataclass
class EmittedDeclaration:
    """
    One rendered declaration of a target language.

    ``source_name`` is the source declaration the fragment originates from
    (the owning enum for promoted structs and per-variant containers), so a
    writer can group fragments into files without asking the generator.
    """

    name: str
    source_name: str
    kind: str
    code: str
    imports: ImportSet = frozenset()
    type_vars: Tuple[str, ...] = ()


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Union[GeneratorConfig, Dict[str, Any], None] = None):
        """Initialize generator with optional configuration."""
        if not isinstance(config, GeneratorConfig):
            config = load_config(self.language_name, config)
        self.config = config
        self.resolver = NamingResolver(self.create_sanitizer())
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self.get_template_directory()
        if template_dir:
            self._template_engine = create_template_engine(template_dir)
        else:
            # Fallback to in-memory templates
            self._template_engine = create_template_engine()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'go', 'python')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.go', '.py')."""
        pass

    @abstractmethod
    def create_sanitizer(self) -> NameSanitizer:
        """Return the name sanitizer holding this language's reserved words."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.
        Return None to use in-memory templates only.

        Returns:
            Path to template directory or None
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @property
    def type_case(self) -> NamingCase:
        return naming_case(self.config.struct_case)

    @property
    def field_case(self) -> NamingCase:
        return naming_case(self.config.field_case)

    @property
    def constant_case(self) -> NamingCase:
        return naming_case(self.config.constant_case)

    @abstractmethod
    def emit(
        self,
        graph: TypeGraph,
        shapes: Dict[str, EnumShape],
        promotions: List[Promotion],
    ) -> List[EmittedDeclaration]:
        """
        Render every declaration of a promoted graph.

        Args:
            graph: Graph after promotion
            shapes: Enum classification of the graph, keyed by enum name
            promotions: Anonymous variants that were promoted

        Returns:
            Emitted declarations in dependency order
        """
        pass

    @abstractmethod
    def render_file(self, declarations: List[EmittedDeclaration]) -> str:
        """
        Assemble emitted declarations into one source file.

        Args:
            declarations: Declarations as returned by ``emit``

        Returns:
            Complete file contents
        """
        pass

    def build(self, graph: TypeGraph) -> List[EmittedDeclaration]:
        """Run classification, promotion and emission for one graph."""
        shapes = classify_graph(graph)
        for shape in shapes.values():
            if not shape.variants:
                # Every variant skipped, or none declared
                raise UnsupportedShape("enum has no serialized variant", shape.enum_name)
        result = promote(graph, self.type_case)
        declarations = self.emit(result.graph, shapes, result.promotions)
        logger.debug(
            f"{self.language_name}: emitted {len(declarations)} declaration(s) "
            f"from {len(graph)} source declaration(s)"
        )
        return declarations

    def generate(self, graph: TypeGraph) -> str:
        """
        Generate code for a whole type graph.

        Args:
            graph: Type graph as produced by the parser

        Returns:
            Generated code as a string
        """
        return self.format_code(self.render_file(self.build(graph)))

    def ordered_declarations(self, graph: TypeGraph) -> List[TypeDecl]:
        """Declarations of the graph, referenced ones first."""
        return [graph.get(name) for name in dependency_order(graph)]

    def type_name(self, decl: TypeDecl) -> str:
        """Target identifier of a declaration."""
        return self.resolver.resolve_type_name(decl.emitted_name, self.type_case)

    def validate_graph(self, graph: TypeGraph) -> List[str]:
        """
        Validate a graph for basic structural issues.

        Language generators can override this to add language-specific validation.

        Args:
            graph: Graph to validate

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []
        mapped = set(self.config.type_mappings)

        for decl in graph:
            known = set(graph.names()) | set(decl.generic_params) | mapped
            known |= self.builtin_named_types()

            for name in decl.referenced_names():
                if name not in known:
                    warnings.append(f"{decl.name} references undeclared type '{name}'")

            if isinstance(decl, StructDecl) and not decl.fields:
                warnings.append(f"Struct '{decl.name}' has no fields")

            if isinstance(decl, EnumDecl):
                if not decl.variants:
                    warnings.append(f"Enum '{decl.name}' has no variants")
                elif all(v.skip for v in decl.variants):
                    warnings.append(f"Every variant of enum '{decl.name}' is skipped")

            if isinstance(decl, AliasDecl) and decl.type_ref is None:
                warnings.append(f"Alias '{decl.name}' has no target type")

        return warnings

    def builtin_named_types(self) -> set:
        """Named types the backend maps without a declaration."""
        return set()

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        # Basic cleanup - remove excessive blank lines
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template file name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
        declarations: List[EmittedDeclaration] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
            declarations: Emitted declarations the code was rendered from
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.declarations = declarations or []
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def generate_code(generator: CodeGenerator, graph: TypeGraph) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    Generation errors are fatal to this target only: they come back as a
    failed result carrying the original exception.

    Args:
        generator: Code generator instance
        graph: Type graph to generate code for

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    try:
        # Validate graph at the base level
        warnings = generator.validate_graph(graph)
        for warning in warnings:
            logger.warning(f"{generator.language_name}: {warning}")

        declarations = generator.build(graph)
        formatted_code = generator.format_code(generator.render_file(declarations))

        metadata = {
            "language": generator.language_name,
            "file_extension": generator.file_extension,
            "declaration_count": len(graph),
            "emitted_count": len(declarations),
            "enum_count": len(graph.enums()),
            "promoted": sorted(
                {d.name for d in declarations if d.kind == "promoted_struct"}
            ),
        }

        logger.info(
            f"Generated {generator.language_name} code for {len(graph)} declaration(s)"
        )
        return GenerationResult(formatted_code, warnings, metadata, declarations)

    except (GeneratorError, TemplateError) as e:
        logger.error(f"{generator.language_name} generation failed: {e}")
        return GenerationResult.error(f"Code generation failed: {str(e)}", exception=e)
