"""Tests for the command-line interface."""

import json
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ccoptimizer.interfaces.cli import cli


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[CliRunner]:
    """CLI runner in an empty directory with logging setup stubbed out."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CACHE_CAPACITY", raising=False)
    monkeypatch.delenv("CACHE_SNAPSHOT_PATH", raising=False)
    with patch("ccoptimizer.interfaces.cli.init_logging"), patch(
        "ccoptimizer.interfaces.cli.shutdown_logging"
    ):
        yield CliRunner()


class TestCli:
    """Test cases for the ccoptimizer commands."""

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """Test that every command is registered."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("monitor", "route", "cache", "batch", "benchmark", "response-cache"):
            assert name in result.output

    def test_monitor(self, runner: CliRunner) -> None:
        """Test the cost monitor report."""
        result = runner.invoke(cli, ["monitor"])
        assert result.exit_code == 0, result.output
        assert "Total:" in result.output
        assert "model-downgrade" in result.output

    def test_route_default_prompts(self, runner: CliRunner) -> None:
        """Test routing of the sample prompts."""
        result = runner.invoke(cli, ["route"])
        assert result.exit_code == 0, result.output
        assert "simple" in result.output
        assert "medium" in result.output

    def test_route_given_prompt(self, runner: CliRunner) -> None:
        """Test routing a prompt from the command line with reasoning."""
        result = runner.invoke(cli, ["route", "--reasoning", "Design system"])
        assert result.exit_code == 0, result.output
        assert "complex" in result.output

    def test_cache(self, runner: CliRunner) -> None:
        """Test the prompt caching analysis."""
        result = runner.invoke(cli, ["cache"])
        assert result.exit_code == 0, result.output
        assert "500" in result.output

    def test_batch(self, runner: CliRunner) -> None:
        """Test the batch savings estimate."""
        result = runner.invoke(cli, ["batch"])
        assert result.exit_code == 0, result.output
        assert "50%" in result.output

    def test_benchmark(self, runner: CliRunner) -> None:
        """Test the benchmark report."""
        result = runner.invoke(cli, ["benchmark", "--requests", "10"])
        assert result.exit_code == 0, result.output
        assert "HIGHLY RECOMMENDED" in result.output

    def test_benchmark_unknown_strategy(self, runner: CliRunner) -> None:
        """Test that domain errors become a non-zero exit."""
        result = runner.invoke(cli, ["benchmark", "--strategy", "teleport"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_response_cache_snapshot(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that the demo saves a snapshot and restores it on the next run."""
        snapshot = tmp_path / "cache.json"

        first = runner.invoke(cli, ["response-cache", "--snapshot", str(snapshot)])
        assert first.exit_code == 0, first.output
        assert json.loads(snapshot.read_text(encoding="utf-8"))["entries"]

        second = runner.invoke(cli, ["response-cache", "--snapshot", str(snapshot)])
        assert second.exit_code == 0, second.output
        assert "Restored 1 entries" in second.output

    def test_response_cache_snapshot_from_settings(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that CACHE_SNAPSHOT_PATH is used when --snapshot is absent."""
        snapshot = tmp_path / "env_snapshot.json"
        monkeypatch.setenv("CACHE_SNAPSHOT_PATH", str(snapshot))

        result = runner.invoke(cli, ["response-cache"])
        assert result.exit_code == 0, result.output
        assert "Saved 1 entries" in result.output
        assert json.loads(snapshot.read_text(encoding="utf-8"))["entries"]

    def test_response_cache_without_snapshot(
        self, runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test that the demo writes nothing when no snapshot path is configured."""
        result = runner.invoke(cli, ["response-cache"])
        assert result.exit_code == 0, result.output
        assert "Saved" not in result.output
        assert list(tmp_path.iterdir()) == []

    def test_response_cache_bad_snapshot(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that an unreadable snapshot fails cleanly."""
        snapshot = tmp_path / "cache.json"
        snapshot.write_text("not json", encoding="utf-8")

        result = runner.invoke(cli, ["response-cache", "--snapshot", str(snapshot)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_configuration(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that misconfiguration exits with an error."""
        monkeypatch.setenv("CACHE_CAPACITY", "0")
        result = runner.invoke(cli, ["batch"])
        assert result.exit_code == 1
        assert "CACHE_CAPACITY" in result.output

    def test_unparseable_configuration(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that values pydantic cannot parse also exit with an error."""
        monkeypatch.setenv("CACHE_CAPACITY", "many")
        result = runner.invoke(cli, ["batch"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
