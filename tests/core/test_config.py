"""Tests for configuration loading, merging and validation."""

import json
from pathlib import Path

import pytest

from crosstype.codegen.core.config import (
    EXAMPLE_CONFIGS,
    EXAMPLE_GO_CONFIG,
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    load_config,
)


@pytest.fixture
def manager() -> ConfigManager:
    return ConfigManager()


def test_language_defaults(manager: ConfigManager) -> None:
    go = manager.get_config("go")
    python = manager.get_config("python")

    assert (go.package_name, go.field_case, go.constant_case) == ("main", "pascal", "pascal")
    assert go.custom == {"pointer_strategy": "optional_only", "omit_empty": True}
    assert (python.module_name, python.field_case) == ("models", "snake")
    assert python.custom == {"unit_enum_style": "enum"}


def test_unknown_language_gets_dataclass_defaults(manager: ConfigManager) -> None:
    assert manager.get_config("rust") == GeneratorConfig()


def test_unknown_keys_become_custom_settings(manager: ConfigManager) -> None:
    config = manager.get_config("go", {"pointer_strategy": "never", "package_name": "wire"})

    assert config.package_name == "wire"
    assert config.custom["pointer_strategy"] == "never"
    assert config.custom["omit_empty"] is True


def test_custom_section_is_merged(manager: ConfigManager) -> None:
    config = manager.get_config("go", {"custom": {"omit_empty": False}})
    assert config.custom == {"pointer_strategy": "optional_only", "omit_empty": False}


def test_overrides_never_leak_into_defaults(manager: ConfigManager) -> None:
    manager.get_config("go", {"custom": {"omit_empty": False}})
    assert manager.get_config("go").custom["omit_empty"] is True


def test_file_then_overrides(manager: ConfigManager, tmp_path: Path) -> None:
    config_file = tmp_path / "go.json"
    config_file.write_text(json.dumps(EXAMPLE_GO_CONFIG), encoding="utf-8")

    config = manager.get_config("go", {"package_name": "api"}, config_file)

    assert config.package_name == "api"
    assert config.module_name == "models"
    assert config.type_mappings == {"Uuid": "github.com/google/uuid.UUID"}


@pytest.mark.parametrize(
    ("file_name", "content", "message"),
    [
        ("config.yaml", "{}", "must be JSON"),
        ("config.json", "{not json", "Invalid JSON"),
        ("config.json", "[1, 2]", "must contain a JSON object"),
    ],
)
def test_bad_config_files(
    manager: ConfigManager, tmp_path: Path, file_name: str, content: str, message: str
) -> None:
    path = tmp_path / file_name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        manager.get_config("python", config_file=path)


def test_missing_config_file(manager: ConfigManager, tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        manager.get_config("python", config_file=tmp_path / "absent.json")


def test_saved_config_loads_back(manager: ConfigManager, tmp_path: Path) -> None:
    original = manager.get_config("python", {"unit_enum_style": "literal", "module_name": "wire"})
    path = tmp_path / "saved.json"
    manager.save_config(original, path)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert "custom" not in saved
    assert saved["unit_enum_style"] == "literal"
    assert manager.get_config("python", config_file=path) == original


def test_validate_config(manager: ConfigManager) -> None:
    config = manager.get_config(
        "go", {"struct_case": "title", "field_case": "snake", "package_name": "my-pkg"}
    )
    warnings = manager.validate_config(config, "go")

    assert "Invalid struct_case: title" in warnings
    assert "Invalid Go package name: my-pkg" in warnings
    assert any("forced to pascal" in w for w in warnings)


def test_validate_python_unit_enum_style(manager: ConfigManager) -> None:
    config = manager.get_config("python", {"unit_enum_style": "flags"})
    assert manager.validate_config(config, "python") == ["Invalid unit_enum_style: flags"]


def test_default_configs_are_valid(manager: ConfigManager) -> None:
    for language in manager.list_languages():
        assert manager.validate_config(manager.get_config(language), language) == []


def test_load_config_uses_the_shared_manager() -> None:
    assert load_config("python", {"field_case": "camel"}).field_case == "camel"


@pytest.mark.parametrize("language", ["go", "python"])
def test_example_configs_are_valid(manager: ConfigManager, tmp_path: Path, language: str) -> None:
    config_file = tmp_path / f"{language}.json"
    config_file.write_text(json.dumps(EXAMPLE_CONFIGS[language]), encoding="utf-8")

    config = manager.get_config(language, config_file=config_file)

    assert manager.validate_config(config, language) == []
    assert config.type_mappings == EXAMPLE_CONFIGS[language]["type_mappings"]
