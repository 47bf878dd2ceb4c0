"""
Integration tests for the grapplebuild CLI.

Builds real directories of scripts and scenes end to end, with the compile
gateway replaced by an in-process fake.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from grapplebuild.cli import main as cli_main
from grapplebuild.config.models import ArtifactKind, CompileResult, Diagnostic, Severity

runner = CliRunner()


class RecordingGateway:
    """Fake gateway: fails any unit containing FAIL, succeeds otherwise."""

    sources: dict[str, str] = {}

    def __init__(self, config=None):
        self.config = config

    def compile(self, sources, references, assembly_name, kind=ArtifactKind.LIBRARY):
        RecordingGateway.sources[assembly_name] = sources[0]
        if "FAIL" in sources[0]:
            return CompileResult(
                diagnostics=[Diagnostic(severity=Severity.ERROR, code="CS1002", message="; expected")]
            )
        return CompileResult(artifact=f"dll:{assembly_name}".encode())


@pytest.fixture
def game_dir(tmp_path):
    scripts = tmp_path / "Scripts"
    (scripts / "Combat").mkdir(parents=True)
    (scripts / "Player.cs").write_text("using System;\nusing System.Linq;\n\npublic class Player {}\n")
    (scripts / "Combat" / "Grab.cs").write_text("using System.Linq;\npublic class Grab {}\n")

    scenes = tmp_path / "Scenes"
    scenes.mkdir()
    (scenes / "Arena.yaml").write_text("entities:\n  - name: Ring\n    components: {Size: 5}\n")
    return tmp_path


@pytest.fixture(autouse=True)
def fake_gateway(monkeypatch):
    RecordingGateway.sources = {}
    monkeypatch.setattr(cli_main, "CscCompileGateway", RecordingGateway)


def _build_args(root: Path, *extra: str) -> list[str]:
    return [
        "build",
        "--script-directory", str(root / "Scripts"),
        "--script-output", str(root / "out" / "Scripts.dll"),
        "--scene-directory", str(root / "Scenes"),
        "--scene-output", str(root / "out" / "Scenes.dll"),
        *extra,
    ]


def test_build_writes_both_assemblies(game_dir):
    result = runner.invoke(cli_main.app, _build_args(game_dir, "--recursive"))

    assert result.exit_code == 0, result.output
    assert (game_dir / "out" / "Scripts.dll").read_bytes() == b"dll:Scripts"
    assert (game_dir / "out" / "Scenes.dll").read_bytes() == b"dll:Scenes"

    script_source = RecordingGateway.sources["Scripts"]
    assert script_source.count("using System.Linq;") == 1
    assert "namespace Combat\n{\n" in script_source
    assert "public static class _Arena" in RecordingGateway.sources["Scenes"]


def test_failed_build_continues_and_exits_zero(game_dir):
    (game_dir / "Scripts" / "Broken.cs").write_text("FAIL\n")

    result = runner.invoke(cli_main.app, _build_args(game_dir))

    assert result.exit_code == 0, result.output
    assert "failed" in result.output
    assert not (game_dir / "out" / "Scripts.dll").exists()
    assert (game_dir / "out" / "Scenes.dll").exists()


def test_strict_exits_non_zero_on_failure(game_dir):
    (game_dir / "Scripts" / "Broken.cs").write_text("FAIL\n")

    result = runner.invoke(cli_main.app, _build_args(game_dir, "--strict"))

    assert result.exit_code == 1


def test_missing_directory_is_skipped(game_dir):
    args = _build_args(game_dir)
    args[args.index("--scene-directory") + 1] = str(game_dir / "NoScenes")

    result = runner.invoke(cli_main.app, args)

    assert result.exit_code == 0, result.output
    assert "skipping" in result.output
    assert (game_dir / "out" / "Scripts.dll").exists()


def test_preview_writes_source(game_dir):
    out = game_dir / "preview.cs"

    result = runner.invoke(
        cli_main.app,
        ["preview", "scripts", "--directory", str(game_dir / "Scripts"), "--output", str(out)],
    )

    assert result.exit_code == 0, result.output
    source = out.read_text()
    assert source.startswith("using System;\n")
    assert "namespace ScriptData\n{\npublic static class Example{}\n" in source
    assert RecordingGateway.sources == {}


def test_init_generates_config(tmp_path):
    path = tmp_path / "grapplebuild.yaml"

    result = runner.invoke(cli_main.app, ["init", "--output", str(path)])
    again = runner.invoke(cli_main.app, ["init", "--output", str(path)])

    assert result.exit_code == 0
    assert path.exists()
    assert again.exit_code == 1


def test_bad_config_reports_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("compiler: [")

    result = runner.invoke(cli_main.app, ["build", "--config", str(path)])

    assert result.exit_code == 1
    assert "Configuration Error" in result.output


def test_unreadable_script_fails_its_kind_and_continues(game_dir):
    (game_dir / "Scripts" / "Legacy.cs").write_bytes(b"// caf\xe9\npublic class Legacy {}\n")

    result = runner.invoke(cli_main.app, _build_args(game_dir))

    assert result.exit_code == 0, result.output
    assert "UTF-8" in result.output
    assert not (game_dir / "out" / "Scripts.dll").exists()
    assert (game_dir / "out" / "Scenes.dll").exists()


def test_unreadable_script_with_strict_exits_non_zero(game_dir):
    (game_dir / "Scripts" / "Legacy.cs").write_bytes(b"// caf\xe9\npublic class Legacy {}\n")

    result = runner.invoke(cli_main.app, _build_args(game_dir, "--strict"))

    assert result.exit_code == 1


def test_timeout_option_reaches_gateway(game_dir, monkeypatch):
    seen = {}

    class TimeoutRecordingGateway(RecordingGateway):
        def __init__(self, config=None):
            super().__init__(config)
            seen["timeout"] = config.timeout

    monkeypatch.setattr(cli_main, "CscCompileGateway", TimeoutRecordingGateway)

    result = runner.invoke(cli_main.app, _build_args(game_dir, "--timeout", "30"))

    assert result.exit_code == 0, result.output
    assert seen["timeout"] == 30
