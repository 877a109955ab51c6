"""
crosstype code generation module.

Generates wire-compatible type declarations in several languages from one
type graph.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from .core.config import ConfigManager, GeneratorConfig, load_config
from .core.errors import GeneratorError
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.ir import TypeGraph, graph_from_dict
from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    get_registry,
    is_language_supported,
    list_all_language_info,
    list_supported_languages,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

ConfigLike = Union[GeneratorConfig, Dict[str, Any], str, Path, None]


# Convenience functions
def generate_from_graph(
    graph: TypeGraph, language: str = "python", config: ConfigLike = None
) -> GenerationResult:
    """
    Generate code for one target language.

    Args:
        graph: Type graph to generate from
        language: Target language name or alias
        config: Generator configuration as GeneratorConfig, dict or file path

    Returns:
        GenerationResult with generated code
    """
    generator = get_generator(language, config)
    return generate_code(generator, graph)


def generate_targets(
    graph: TypeGraph,
    languages: Iterable[str],
    configs: Optional[Dict[str, ConfigLike]] = None,
) -> Dict[str, GenerationResult]:
    """
    Generate code for several targets from the same graph.

    A failing target never affects the others: its result carries the
    error instead of code.

    Args:
        graph: Type graph to generate from
        languages: Target language names or aliases
        configs: Per-language configuration, keyed by the name given in ``languages``

    Returns:
        Results keyed by the requested language name
    """
    configs = configs or {}
    results = {}

    for language in languages:
        try:
            results[language] = generate_from_graph(graph, language, configs.get(language))
        except RegistryError as e:
            logger.error(f"{language}: {e}")
            results[language] = GenerationResult.error(str(e), exception=e)

    failed = [language for language, result in results.items() if not result.success]
    if failed:
        logger.warning(f"Generation failed for: {', '.join(failed)}")
    return results


def quick_generate(document: Union[TypeGraph, Dict[str, Any], str], language="python", **options):
    """
    Quick code generation from a type graph document.

    Args:
        document: TypeGraph, parsed graph document or its JSON text
        language: Target language
        **options: Generator options

    Returns:
        Generated code string
    """
    if isinstance(document, str):
        document = json.loads(document)
    graph = document if isinstance(document, TypeGraph) else graph_from_dict(document)

    result = generate_from_graph(graph, language, options)

    if result.success:
        return result.code
    raise RuntimeError(f"Code generation failed: {result.error_message}")


# Export main interfaces
__all__ = [
    "CodeGenerator",
    "ConfigManager",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "GeneratorRegistry",
    "RegistryError",
    "TypeGraph",
    "generate_code",
    "generate_from_graph",
    "generate_targets",
    "get_generator",
    "get_language_info",
    "get_registry",
    "is_language_supported",
    "list_all_language_info",
    "list_supported_languages",
    "load_config",
    "quick_generate",
]
