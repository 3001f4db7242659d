"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, storyweb.toml only contains
overrides for the sections a user wants to tune.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- storyweb.toml sections ---


class SimulationConfig(BaseModel):
    """[simulation] section: force strengths and cooling schedule."""

    model_config = {"frozen": True}

    charge_strength: float = -120.0
    direct_link_distance: float = 80.0
    direct_link_strength: float = 1.0
    tag_link_distance: float = 160.0
    tag_link_strength: float = 0.3
    collide_margin: float = 8.0
    alpha_min: float = Field(default=0.001, gt=0, lt=1)
    velocity_decay: float = Field(default=0.4, ge=0, le=1)
    drag_alpha_target: float = 0.3
    seed: int | None = None


class ViewportConfig(BaseModel):
    """[viewport] section: zoom limits and animation."""

    model_config = {"frozen": True}

    min_scale: float = 0.1
    max_scale: float = 5.0
    wheel_zoom_in: float = 1.08
    wheel_zoom_out: float = 0.92
    button_zoom_factor: float = 1.4
    animation_ms: float = 200.0
    fit_padding: float = 60.0
    fit_max_scale: float = 2.0


class InteractionConfig(BaseModel):
    """[interaction] section."""

    model_config = {"frozen": True}

    click_threshold: float = 5.0
    hit_slop: float = 4.0


class RenderConfig(BaseModel):
    """[render] section."""

    model_config = {"frozen": True}

    label_max_chars: int = 24
    label_keep_chars: int = 22
    stable_group_colors: bool = False


class FiltersConfig(BaseModel):
    """[filters] section: initial filter toggles."""

    model_config = {"frozen": True}

    show_notes: bool = True
    show_scenes: bool = True
    show_scene_to_scene: bool = False
    show_wikilinks: bool = True
    show_scene_links: bool = True
    show_shared_tags: bool = True
    hidden_character_ids: list[str] = Field(default_factory=list)


class ViewerConfig(BaseModel):
    """[viewer] section: interactive window."""

    model_config = {"frozen": True}

    width: int = 1200
    height: int = 800
    fps: int = 60
    title: str = "storyweb"
    legend: bool = True


class GraphConfig(BaseModel):
    """Everything the graph view needs, composed from the sections above."""

    model_config = {"frozen": True}

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
