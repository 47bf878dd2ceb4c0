"""
Configuration loader for grapplebuild.

Handles loading configuration from YAML files and CLI arguments.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import BuildConfig, BuildKind, CompilerConfig, KindConfig


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def load_config_from_yaml(config_path: Path) -> BuildConfig:
    """Load configuration from a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration file must contain a mapping at the top level")

    try:
        config = BuildConfig(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")

    for kind in BuildKind:
        kind_cfg = config.kind(kind)
        if kind_cfg.enabled and not kind_cfg.patterns:
            raise ConfigurationError(f"'{kind.value}.patterns' must not be empty")

    return config


def create_config_from_args(
    script_directory: Path | None = None,
    script_output: Path | None = None,
    scene_directory: Path | None = None,
    scene_output: Path | None = None,
    system_directory: Path | None = None,
    system_output: Path | None = None,
    recursive: bool | None = None,
    references: list[Path] | None = None,
    compiler: list[str] | None = None,
    strict: bool | None = None,
    timeout: int | None = None,
    base: BuildConfig | None = None,
) -> BuildConfig:
    """Create configuration from CLI arguments, layered over ``base`` if given."""
    config = base.model_copy(deep=True) if base else BuildConfig()

    overrides = {
        BuildKind.SCRIPTS: (script_directory, script_output),
        BuildKind.SCENES: (scene_directory, scene_output),
        BuildKind.SYSTEMS: (system_directory, system_output),
    }
    for kind, (directory, output) in overrides.items():
        kind_cfg: KindConfig = config.kind(kind)
        if directory is not None:
            kind_cfg.directory = directory
            # Naming a directory for an optional kind switches it on.
            kind_cfg.enabled = True
        if output is not None:
            kind_cfg.output = output

    if recursive is not None:
        config.recursive = recursive
    if references:
        config.references = [*config.references, *references]
    if compiler:
        config.compiler = CompilerConfig(
            command=compiler,
            extra_args=config.compiler.extra_args,
            timeout=config.compiler.timeout,
        )
    if strict is not None:
        config.strict = strict
    if timeout is not None:
        config.compiler.timeout = timeout

    return config


def generate_default_config(output_path: Path) -> None:
    """Generate a default configuration file."""
    default_config = {
        "scripts": {
            "enabled": True,
            "directory": "Scripts",
            "output": "GrappleFightScripts.dll",
            "patterns": ["*.cs"],
        },
        "systems": {
            "enabled": False,
            "directory": "Systems",
            "output": "GrappleFightSystems.dll",
            "patterns": ["*.cs"],
        },
        "scenes": {
            "enabled": True,
            "directory": "Scenes",
            "output": "GrappleFightScenes.dll",
            "patterns": ["*.yaml", "*.yml"],
        },
        "references": [],
        "recursive": False,
        "strict": False,
        "compiler": {
            "command": ["csc"],
            "extra_args": [],
            "timeout": 120,
        },
        "embed": {
            "constant_name": "Base64WorldContents",
            "accessor_name": "World",
            "accessor_type": "JsonDocument",
            "interface_name": "IWorldDataInterface",
        },
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
