"""Tests for the generator registry."""

import json

import pytest

from crosstype.codegen.languages.go import GoGenerator
from crosstype.codegen.languages.python import PythonGenerator
from crosstype.codegen.registry import GeneratorRegistry, RegistryError, get_registry


@pytest.fixture
def registry() -> GeneratorRegistry:
    registry = GeneratorRegistry()
    registry.register("go", GoGenerator, aliases=["golang"])
    registry.register("python", PythonGenerator, aliases=["py", "Python3"])
    return registry


def test_resolve_names_and_aliases(registry: GeneratorRegistry) -> None:
    assert registry.resolve("GO") == "go"
    assert registry.resolve("golang") == "go"
    assert registry.resolve("python3") == "python"
    assert registry.get_generator_class("py") is PythonGenerator


def test_unknown_language(registry: GeneratorRegistry) -> None:
    assert not registry.is_supported("rust")
    with pytest.raises(RegistryError, match="Available: go, python"):
        registry.resolve("rust")


def test_listing(registry: GeneratorRegistry) -> None:
    assert registry.list_languages() == ["go", "python"]
    assert registry.get_aliases_for_language("python") == ["py", "python3"]
    assert registry.list_all_names() == {"go": ["go", "golang"], "python": ["python", "py", "python3"]}


def test_registering_twice_keeps_the_first(registry: GeneratorRegistry) -> None:
    registry.register("go", PythonGenerator)
    assert registry.get_generator_class("go") is GoGenerator

    registry.register("go", PythonGenerator, replace=True)
    assert registry.get_generator_class("go") is PythonGenerator


@pytest.mark.parametrize(
    ("language", "aliases", "message"),
    [
        ("golang", None, "already an alias of 'go'"),
        ("ts", ["python"], "conflicts with existing primary language"),
        ("ts", ["py"], "already points to 'python'"),
    ],
)
def test_conflicting_names(registry: GeneratorRegistry, language, aliases, message) -> None:
    with pytest.raises(RegistryError, match=message):
        registry.register(language, GoGenerator, aliases=aliases)


def test_only_code_generators_can_be_registered(registry: GeneratorRegistry) -> None:
    with pytest.raises(RegistryError, match="must inherit from CodeGenerator"):
        registry.register("text", str)


def test_unregister_drops_aliases(registry: GeneratorRegistry) -> None:
    registry.unregister("python")

    assert registry.list_languages() == ["go"]
    assert not registry.is_supported("py")


def test_create_generator_from_dict(registry: GeneratorRegistry) -> None:
    generator = registry.create_generator("golang", {"package_name": "wire", "pointer_strategy": "never"})

    assert isinstance(generator, GoGenerator)
    assert generator.config.package_name == "wire"
    assert generator.config.custom["pointer_strategy"] == "never"


def test_create_generator_from_file(registry: GeneratorRegistry, tmp_path) -> None:
    config_file = tmp_path / "python.json"
    config_file.write_text(json.dumps({"module_name": "wire_types"}), encoding="utf-8")

    generator = registry.create_generator("python", config_file)
    assert generator.config.module_name == "wire_types"


def test_create_generator_with_bad_config(registry: GeneratorRegistry, tmp_path) -> None:
    with pytest.raises(RegistryError, match="Failed to configure go generator"):
        registry.create_generator("go", tmp_path / "missing.json")
    with pytest.raises(RegistryError, match="Invalid config type"):
        registry.create_generator("go", 42)


def test_language_info(registry: GeneratorRegistry) -> None:
    info = registry.get_language_info("py")

    assert info["name"] == "python"
    assert info["class"] == "PythonGenerator"
    assert info["file_extension"] == ".py"
    assert info["aliases"] == ["py", "python3"]
    assert info["module"] == "crosstype.codegen.languages.python.generator"


def test_global_registry_has_builtin_targets() -> None:
    registry = get_registry()

    assert {"go", "python"} <= set(registry.list_languages())
    assert registry.resolve("golang") == "go"
    assert registry is get_registry()
