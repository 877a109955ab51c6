"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ...logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


# Case styles an identifier can be generated in
IDENTIFIER_CASES = {"pascal", "camel", "snake", "screaming_snake", "original"}


@dataclass
class GeneratorConfig:
    """Base configuration for code generators."""

    # Output settings
    output_file: Optional[str] = None
    package_name: str = "main"
    module_name: str = "types"

    # Naming settings
    struct_case: str = "pascal"  # pascal, camel, snake, original
    field_case: str = "snake"
    constant_case: str = "screaming_snake"

    # Generated content
    add_comments: bool = True
    generate_constructors: bool = True

    # Named type overrides, source name -> target type
    type_mappings: Dict[str, str] = field(default_factory=dict)

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported languages."""
        # Go defaults
        self._configs["go"] = {
            "package_name": "main",
            "module_name": "types",
            "struct_case": "pascal",
            "field_case": "pascal",
            "constant_case": "pascal",
            "add_comments": True,
            "generate_constructors": True,
            "custom": {
                "pointer_strategy": "optional_only",  # optional_only, always, never
                "omit_empty": True,
            },
        }

        # Python defaults
        self._configs["python"] = {
            "package_name": "",
            "module_name": "models",
            "struct_case": "pascal",
            "field_case": "snake",
            "constant_case": "screaming_snake",
            "add_comments": True,
            "generate_constructors": True,
            "custom": {
                "unit_enum_style": "enum",  # enum, literal
            },
        }

    def get_config(
        self,
        language: str,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a language.

        Args:
            language: Target language name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the language
        """
        # Start with defaults, custom dict copied so merging never leaks
        base_config = self._configs.get(language, {}).copy()
        base_config["custom"] = dict(base_config.get("custom", {}))

        # Load from file if provided
        if config_file:
            file_config = self._load_config_file(config_file)
            self._merge(base_config, file_config)

        # Apply custom overrides
        if custom_config:
            self._merge(base_config, custom_config)

        return self._dict_to_config(base_config)

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]):
        for key, value in overrides.items():
            if key == "custom" and isinstance(value, dict):
                base["custom"].update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}")

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.debug(f"Loaded configuration file {path}")
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        # Extract known fields
        known_fields = set(GeneratorConfig.__dataclass_fields__)

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys are language-specific settings
        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")

        # Custom settings are saved flat, the way they are loaded
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}")

    def list_languages(self) -> list[str]:
        """Get list of languages with default configurations."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig, language: str) -> list[str]:
        """
        Validate configuration for a language.

        Returns:
            List of validation warnings/errors
        """
        warnings = []

        if config.struct_case not in IDENTIFIER_CASES:
            warnings.append(f"Invalid struct_case: {config.struct_case}")

        if config.field_case not in IDENTIFIER_CASES:
            warnings.append(f"Invalid field_case: {config.field_case}")

        if config.constant_case not in IDENTIFIER_CASES:
            warnings.append(f"Invalid constant_case: {config.constant_case}")

        if not config.module_name or not config.module_name.isidentifier():
            warnings.append(f"Invalid module_name: {config.module_name}")

        # Language-specific validations
        if language == "go":
            if not config.package_name or not config.package_name.isidentifier():
                warnings.append(f"Invalid Go package name: {config.package_name}")
            if config.field_case != "pascal":
                warnings.append(
                    "Go fields must be exported to be serialized; "
                    f"field_case '{config.field_case}' is forced to pascal"
                )

        elif language == "python":
            unit_enum_style = config.custom.get("unit_enum_style", "enum")
            if unit_enum_style not in {"enum", "literal"}:
                warnings.append(f"Invalid unit_enum_style: {unit_enum_style}")

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    language: str,
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        language: Target language name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration for the language
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)


# Example configuration files, shown by `crosstype info`
EXAMPLE_GO_CONFIG = {
    "package_name": "models",
    "module_name": "models",
    "generate_constructors": True,
    "pointer_strategy": "optional_only",
    "omit_empty": True,
    "type_mappings": {"Uuid": "github.com/google/uuid.UUID"},
}

EXAMPLE_PYTHON_CONFIG = {
    "module_name": "wire_types",
    "field_case": "snake",
    "unit_enum_style": "literal",
    "type_mappings": {"Decimal": "float"},
}

EXAMPLE_CONFIGS = {"go": EXAMPLE_GO_CONFIG, "python": EXAMPLE_PYTHON_CONFIG}
