"""Tests for the root storyweb CLI."""

import pytest
from click.testing import CliRunner

from storyweb import __version__
from storyweb.cli import cli

EXPECTED_COMMANDS = ["build", "visible", "layout", "render", "view"]


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "storyweb" in result.output
    assert "graph" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json"])
def test_global_flag_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


def test_invalid_config_is_reported(cli_runner: CliRunner) -> None:
    with cli_runner.isolated_filesystem():
        with open("broken.toml", "w", encoding="utf-8") as fh:
            fh.write("[viewer\n")
        result = cli_runner.invoke(cli, ["-c", "broken.toml", "graph", "--help"])
    assert result.exit_code == 1
    assert "Invalid TOML" in result.output


@pytest.mark.parametrize("command", EXPECTED_COMMANDS)
def test_command_registered(cli_runner: CliRunner, command: str) -> None:
    result = cli_runner.invoke(cli, ["graph", command, "--help"])
    assert result.exit_code == 0, f"{command} --help failed: {result.output}"
    assert "--examples" in result.output


def test_all_commands_in_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["graph", "--help"])
    for name in EXPECTED_COMMANDS:
        assert name in result.output, f"{name} missing from --help"


# --- --examples ---

EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["graph", "--examples"], ["storyweb graph build", "storyweb graph view"]),
    (["graph", "build", "--examples"], ["storyweb --json graph build"]),
    (["graph", "visible", "--examples"], ["--hide-character c1"]),
    (["graph", "layout", "--examples"], ["--ticks 50"]),
    (["graph", "render", "--examples"], ["--width 1600", "--select n1"]),
    (["graph", "view", "--examples"], ["Esc quits"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert result.output.startswith("Examples for")
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"
