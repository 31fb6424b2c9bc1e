"""Integration tests for CLI commands."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from vlens import __version__
from vlens.cli.main import app, parse_dependency
from vlens.clients.factory import create_package_client
from vlens.core.errors import TransportError

REGISTRY = "https://registry.npmjs.org"

PACKUMENT = {
    "dist-tags": {"latest": "1.2.0"},
    "versions": {"1.0.0": {}, "1.1.0": {}, "1.2.0": {}, "2.0.0-rc.1": {}},
}


@pytest.fixture
def runner():
    """Get a CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_registry(transport):
    """Route every client the CLI creates through the fake transport."""
    transport.routes[f"{REGISTRY}/left-pad"] = PACKUMENT

    def create(provider, config):
        return create_package_client(provider, config, transport)

    with patch("vlens.cli.main.create_package_client", side_effect=create):
        yield transport


class TestParseDependency:
    """Tests for name@spec parsing."""

    def test_plain(self):
        dep = parse_dependency("left-pad@^1.0.0")
        assert (dep.name, dep.version) == ("left-pad", "^1.0.0")

    def test_scoped(self):
        dep = parse_dependency("@types/node@^18")
        assert (dep.name, dep.version) == ("@types/node", "^18")

    def test_alias_spec(self):
        dep = parse_dependency("pad@npm:left-pad@^1")
        assert (dep.name, dep.version) == ("pad", "npm:left-pad@^1")

    def test_missing_spec(self):
        dep = parse_dependency("left-pad")
        assert (dep.name, dep.version) == ("left-pad", "")


class TestInfoCommands:
    """Tests for 'vlens version' and 'vlens providers'."""

    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_providers(self, runner: CliRunner):
        result = runner.invoke(app, ["providers"])

        assert result.exit_code == 0
        assert result.output.split() == ["composer", "dotnet", "dub", "npm"]


class TestSuggestCommand:
    """Tests for 'vlens suggest' command."""

    def test_prints_table(self, runner: CliRunner, temp_dir: Path, fake_registry):
        result = runner.invoke(
            app, ["suggest", "npm", "left-pad@^1.0.0", "--path", str(temp_dir)]
        )

        assert result.exit_code == 0
        assert "left-pad" in result.output
        assert "satisfies" in result.output
        assert "1.2.0" in result.output
        assert "2.0.0-rc.1" not in result.output

    def test_prereleases_flag(self, runner: CliRunner, temp_dir: Path, fake_registry):
        result = runner.invoke(
            app,
            ["suggest", "npm", "left-pad@^1.0.0", "--prereleases", "--path", str(temp_dir)],
        )

        assert result.exit_code == 0
        assert "2.0.0-rc.1" in result.output

    def test_json_output(self, runner: CliRunner, temp_dir: Path, fake_registry):
        result = runner.invoke(
            app, ["suggest", "npm", "left-pad@^1.0.0", "--json", "--path", str(temp_dir)]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data[0]["package"]["name"] == "left-pad"
        assert data[0]["package"]["path"] == str(temp_dir.resolve())
        assert data[0]["suggestions"] == [{"name": "satisfies", "version": "1.2.0", "flags": 5}]

    def test_batch_failure_exits_nonzero(self, runner: CliRunner, temp_dir: Path, fake_registry):
        fake_registry.routes[f"{REGISTRY}/broken"] = TransportError("HTTP 500", status=500)

        result = runner.invoke(
            app,
            ["suggest", "npm", "left-pad@^1.0.0", "broken@^1.0.0", "--path", str(temp_dir)],
        )

        assert result.exit_code == 1
        assert "HTTP 500" in result.output

    def test_keep_going_reports_failures(
        self, runner: CliRunner, temp_dir: Path, fake_registry
    ):
        fake_registry.routes[f"{REGISTRY}/broken"] = TransportError("HTTP 500", status=500)

        result = runner.invoke(
            app,
            [
                "suggest",
                "npm",
                "left-pad@^1.0.0",
                "broken@^1.0.0",
                "--keep-going",
                "--path",
                str(temp_dir),
            ],
        )

        assert result.exit_code == 1
        assert "satisfies" in result.output
        assert "error" in result.output
        assert "HTTP 500" in result.output

    def test_unknown_provider(self, runner: CliRunner, temp_dir: Path):
        result = runner.invoke(app, ["suggest", "pypi", "requests@2.0.0", "--path", str(temp_dir)])

        assert result.exit_code == 1
        assert "Unknown provider" in result.output

    def test_invalid_config(self, runner: CliRunner, temp_dir: Path):
        (temp_dir / "vlens.yaml").write_text("npm: [unclosed")

        result = runner.invoke(
            app, ["suggest", "npm", "left-pad@^1.0.0", "--path", str(temp_dir)]
        )

        assert result.exit_code == 1
        assert "Invalid YAML" in result.output


class TestSelectionsCommand:
    """Tests for 'vlens selections' command."""

    def test_dub_selections(self, runner: CliRunner, temp_dir: Path):
        path = temp_dir / "dub.selections.json"
        path.write_text(
            json.dumps(
                {
                    "fileVersion": 1,
                    "versions": {"vibe-d": "0.9.7", "taggedalgebraic": {"version": "0.11.22"}},
                }
            )
        )

        result = runner.invoke(app, ["selections", str(path), "--provider", "dub"])

        assert result.exit_code == 0
        assert "vibe-d" in result.output
        assert "0.11.22" in result.output

    def test_dub_unknown_file_version(self, runner: CliRunner, temp_dir: Path):
        path = temp_dir / "dub.selections.json"
        path.write_text(json.dumps({"fileVersion": 3, "versions": {}}))

        result = runner.invoke(app, ["selections", str(path), "--provider", "dub"])

        assert result.exit_code == 1
        assert "Unknown selections file version" in result.output

    def test_composer_lock(self, runner: CliRunner, temp_dir: Path):
        path = temp_dir / "composer.lock"
        path.write_text(json.dumps({"packages": [{"name": "psr/log", "version": "3.0.0"}]}))

        result = runner.invoke(app, ["selections", str(path), "--provider", "composer"])

        assert result.exit_code == 0
        assert "psr/log" in result.output

    def test_unsupported_provider(self, runner: CliRunner, temp_dir: Path):
        result = runner.invoke(
            app, ["selections", str(temp_dir / "x.json"), "--provider", "npm"]
        )

        assert result.exit_code == 1
        assert "Unsupported selections provider" in result.output
