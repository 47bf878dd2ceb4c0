"""
Unit tests for configuration loading.
"""

from pathlib import Path

import pytest

from grapplebuild.config.loader import (
    ConfigurationError,
    create_config_from_args,
    generate_default_config,
    load_config_from_yaml,
)
from grapplebuild.config.models import (
    DEFAULT_IMPORTS,
    AssemblySettings,
    BuildConfig,
    BuildKind,
)


def test_default_config_round_trips(tmp_path):
    path = tmp_path / "grapplebuild.yaml"

    generate_default_config(path)
    config = load_config_from_yaml(path)

    assert config.scripts.directory == Path("Scripts")
    assert config.scenes.patterns == ["*.yaml", "*.yml"]
    assert config.systems.enabled is False
    assert config.compiler.command == ["csc"]


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config_from_yaml(tmp_path / "missing.yaml")


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ConfigurationError, match="empty"):
        load_config_from_yaml(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("scripts: [unclosed")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_config_from_yaml(path)


def test_validation_failure(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("compiler:\n  timeout: -5\n")
    with pytest.raises(ConfigurationError, match="validation failed"):
        load_config_from_yaml(path)


def test_cli_overrides_layer_on_base():
    base = BuildConfig(recursive=False, references=[Path("Engine.dll")])

    config = create_config_from_args(
        script_directory=Path("Game/Scripts"),
        system_directory=Path("Game/Systems"),
        recursive=True,
        references=[Path("Ecs.dll")],
        compiler=["dotnet", "csc.dll"],
        base=base,
    )

    assert config.scripts.directory == Path("Game/Scripts")
    assert config.systems.enabled is True
    assert config.recursive is True
    assert config.references == [Path("Engine.dll"), Path("Ecs.dll")]
    assert config.compiler.command == ["dotnet", "csc.dll"]
    assert base.recursive is False


def test_timeout_override_keeps_compiler_command():
    base = BuildConfig()
    base.compiler.command = ["mcs"]

    config = create_config_from_args(timeout=15, base=base)

    assert config.compiler.timeout == 15
    assert config.compiler.command == ["mcs"]
    assert base.compiler.timeout == 120


def test_settings_for_each_kind():
    config = BuildConfig(references=[Path("Engine.dll")])

    scripts = config.settings_for(BuildKind.SCRIPTS)
    scenes = config.settings_for(BuildKind.SCENES)

    assert scripts.root_namespace == "ScriptData"
    assert scripts.assembly_name == "GrappleFightScripts"
    assert scripts.imports == DEFAULT_IMPORTS
    assert scripts.references == (Path("Engine.dll"),)
    assert scenes.root_namespace == "SceneData"
    assert "using System.Text.Json;" in scenes.imports


def test_kind_overrides_apply():
    config = BuildConfig(
        scripts={
            "directory": "S",
            "output": "out/Mods.dll",
            "namespace": "ModData",
            "imports": ["using System;"],
        }
    )

    settings = config.settings_for(BuildKind.SCRIPTS)

    assert settings.root_namespace == "ModData"
    assert settings.assembly_name == "Mods"
    assert settings.imports == ("using System;",)


def test_settings_are_immutable():
    settings = AssemblySettings.for_scripts()
    with pytest.raises(Exception):
        settings.root_namespace = "Other"
