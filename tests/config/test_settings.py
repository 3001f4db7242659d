"""Tests for StoryWebSettings: defaults, TOML, env vars, and CLI flags."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from storyweb.config.models import GraphConfig, SimulationConfig, ViewportConfig
from storyweb.config.settings import StoryWebSettings

SAMPLE_TOML = """\
[simulation]
charge_strength = -200.0
seed = 3

[viewport]
max_scale = 3.0

[filters]
show_scene_to_scene = true
hidden_character_ids = ["c2"]

[viewer]
width = 640
legend = false
"""


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    (tmp_path / "storyweb.toml").write_text(SAMPLE_TOML, encoding="utf-8")
    return tmp_path


class TestDefaults:
    def test_code_defaults(self, tmp_path: Path) -> None:
        settings = StoryWebSettings.from_cli(start=tmp_path / "nowhere")
        assert settings.simulation == SimulationConfig()
        assert settings.viewport.min_scale == 0.1
        assert settings.viewport.max_scale == 5.0
        assert settings.interaction.click_threshold == 5.0
        assert settings.render.label_max_chars == 24
        assert settings.filters.show_scene_to_scene is False
        assert settings.viewer.legend is True
        assert settings.viewer.width == 1200

    def test_graph_section_bundle(self) -> None:
        settings = StoryWebSettings(viewport=ViewportConfig(max_scale=2.0))
        graph = settings.graph
        assert isinstance(graph, GraphConfig)
        assert graph.viewport.max_scale == 2.0
        assert graph.simulation == settings.simulation

    def test_frozen(self) -> None:
        settings = StoryWebSettings()
        with pytest.raises(ValidationError):
            settings.verbose = True  # type: ignore[misc]


class TestToml:
    def test_discovered_by_walk_up(self, config_dir: Path) -> None:
        nested = config_dir / "chapters"
        nested.mkdir()
        settings = StoryWebSettings.from_cli(start=nested)
        assert settings.config_path == (config_dir / "storyweb.toml").resolve()
        assert settings.simulation.charge_strength == -200.0
        assert settings.simulation.seed == 3
        assert settings.viewport.max_scale == 3.0
        assert settings.filters.hidden_character_ids == ["c2"]
        assert settings.viewer.width == 640
        assert settings.viewer.legend is False

    def test_sparse_sections_keep_defaults(self, config_dir: Path) -> None:
        settings = StoryWebSettings.from_cli(start=config_dir)
        assert settings.simulation.tag_link_distance == 160.0
        assert settings.viewport.min_scale == 0.1
        assert settings.viewer.height == 800

    def test_explicit_config_path(self, config_dir: Path) -> None:
        settings = StoryWebSettings.from_cli(config_path=str(config_dir / "storyweb.toml"))
        assert settings.viewer.width == 640

    def test_missing_explicit_path_uses_defaults(self, tmp_path: Path) -> None:
        settings = StoryWebSettings.from_cli(config_path=str(tmp_path / "missing.toml"))
        assert settings.config_path is None
        assert settings.viewer.width == 1200

    def test_invalid_toml(self, tmp_path: Path) -> None:
        bad = tmp_path / "storyweb.toml"
        bad.write_text("[simulation\nseed = ", encoding="utf-8")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            StoryWebSettings.from_cli(config_path=str(bad))

    def test_out_of_range_value(self, tmp_path: Path) -> None:
        bad = tmp_path / "storyweb.toml"
        bad.write_text("[simulation]\nalpha_min = 2.0\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            StoryWebSettings.from_cli(config_path=str(bad))


class TestPriority:
    def test_env_overrides_toml(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORYWEB_VIEWER__WIDTH", "900")
        settings = StoryWebSettings.from_cli(start=config_dir)
        assert settings.viewer.width == 900

    def test_cli_flags_override_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STORYWEB_VERBOSE", "false")
        settings = StoryWebSettings.from_cli(start=tmp_path, verbose=True, json_output=True)
        assert settings.verbose is True
        assert settings.json_output is True

    def test_env_flag(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STORYWEB_QUIET", "1")
        assert StoryWebSettings.from_cli(start=tmp_path).quiet is True
