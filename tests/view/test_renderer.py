"""Tests for frame drawing, recorded through RecordingSurface."""

from __future__ import annotations

import pytest

from storyweb.config.models import RenderConfig, SimulationConfig
from storyweb.domain.builder import build_graph
from storyweb.domain.filters import Filters, Visibility, compute_visibility
from storyweb.domain.model import GraphModel
from storyweb.domain.types import GraphInput, LinkType
from storyweb.infrastructure.graph.simulation import ForceSimulation
from storyweb.view.renderer import (
    EDGE_STYLES,
    HALO_GAP,
    LABEL_ACTIVE_COLOR,
    LABEL_COLOR,
    LABEL_OFFSET,
    OUTLINE_COLOR,
    SCENE_SIZE_FACTOR,
    Renderer,
    truncate_label,
)
from storyweb.view.surface import RecordingSurface, Surface
from storyweb.view.viewport import ViewportTransform


@pytest.fixture
def model(story_input: GraphInput) -> GraphModel:
    return build_graph(story_input.notes, story_input.scenes, story_input.characters)


@pytest.fixture
def simulation(model: GraphModel) -> ForceSimulation:
    sim = ForceSimulation(model, config=SimulationConfig(seed=1))
    sim.settle()
    return sim


def _draw(
    model: GraphModel,
    simulation: ForceSimulation,
    *,
    visibility: Visibility | None = None,
    hovered: str | None = None,
    selected: str | None = None,
) -> RecordingSurface:
    surface = RecordingSurface()
    drawn = Renderer().draw(
        surface,
        model=model,
        simulation=simulation,
        visibility=visibility if visibility is not None else compute_visibility(model, Filters()),
        transform=ViewportTransform(400.0, 300.0, 1.5),
        hovered_id=hovered,
        selected_id=selected,
    )
    assert drawn
    return surface


class TestFrame:
    def test_no_surface(self, model: GraphModel, simulation: ForceSimulation) -> None:
        drawn = Renderer().draw(
            None,
            model=model,
            simulation=simulation,
            visibility=compute_visibility(model, Filters()),
            transform=ViewportTransform(),
        )
        assert drawn is False

    def test_recording_surface_satisfies_protocol(self) -> None:
        assert isinstance(RecordingSurface(), Surface)

    def test_frame_structure(self, model: GraphModel, simulation: ForceSimulation) -> None:
        surface = _draw(model, simulation)
        ops = [c.op for c in surface.commands]
        assert ops[0] == "clear"
        assert ops[1] == "push_transform"
        assert ops[-1] == "pop_transform"
        assert surface.depth == 0
        assert surface.commands[1].args == {"offset_x": 400.0, "offset_y": 300.0, "scale": 1.5}
        # edges are drawn before any node
        last_line = max(i for i, op in enumerate(ops) if op == "line")
        first_node = min(i for i, op in enumerate(ops) if op in ("circle", "rounded_rect"))
        assert last_line < first_node

    def test_only_visible_nodes_and_links(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        surface = _draw(model, simulation)
        assert len(surface.of("line")) == 3
        assert len(surface.of("circle")) == 4
        assert len(surface.of("rounded_rect")) == 1
        assert {c["text"] for c in surface.of("text")} == {
            "Root",
            "Child",
            "Loner",
            "Tagged",
            "Arrival",
        }

    def test_hidden_scenes_are_not_drawn(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        surface = _draw(
            model,
            simulation,
            visibility=compute_visibility(model, Filters(show_scenes=False)),
        )
        assert surface.of("rounded_rect") == []
        assert len(surface.of("line")) == 1


class TestEdges:
    def test_styles_per_link_type(self, model: GraphModel, simulation: ForceSimulation) -> None:
        surface = _draw(model, simulation)
        colors = sorted(c["color"] for c in surface.of("line"))
        expected = sorted(EDGE_STYLES[t].color for t in LinkType)
        assert colors == expected
        dashed = [c for c in surface.of("line") if c["dash"]]
        assert len(dashed) == 1
        assert dashed[0]["color"] == EDGE_STYLES[LinkType.SHARED_TAG].color
        assert dashed[0]["width"] == 1.0

    def test_hover_highlights_incident_edges(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        surface = _draw(model, simulation, hovered="n4")
        colors = {c["color"] for c in surface.of("line")}
        assert EDGE_STYLES[LinkType.SHARED_TAG].highlight_color in colors
        assert EDGE_STYLES[LinkType.WIKILINK].color in colors
        assert EDGE_STYLES[LinkType.WIKILINK].highlight_color not in colors

    def test_selection_highlights_incident_edges(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        surface = _draw(model, simulation, selected="n1")
        colors = {c["color"] for c in surface.of("line")}
        assert EDGE_STYLES[LinkType.WIKILINK].highlight_color in colors
        assert EDGE_STYLES[LinkType.SCENE_LINK].highlight_color in colors
        assert EDGE_STYLES[LinkType.SHARED_TAG].color in colors


class TestNodes:
    def test_resting_nodes_are_translucent(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        surface = _draw(model, simulation)
        shapes = surface.of("circle") + surface.of("rounded_rect")
        assert all(c["alpha"] == 0.8 and c["stroke"] is None for c in shapes)
        assert all(c["color"] == LABEL_COLOR and c["size"] == 10 for c in surface.of("text"))

    def test_selected_note_gets_outline_and_halo(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        node = model.get("n1")
        x, y = simulation.position(node.index)
        surface = _draw(model, simulation, selected="n1")
        at_node = [c for c in surface.of("circle") if (c["cx"], c["cy"]) == (x, y)]
        body, halo = at_node
        assert body["stroke"] == OUTLINE_COLOR
        assert body["line_width"] == 2.5
        assert body["alpha"] == 1.0
        assert halo["radius"] == node.radius + HALO_GAP
        assert halo["fill"] is None
        assert halo["stroke"] == node.color
        assert halo["alpha"] == 0.4

    def test_selected_label_is_bold_and_larger(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        node = model.get("n1")
        x, y = simulation.position(node.index)
        surface = _draw(model, simulation, selected="n1")
        label = next(c for c in surface.of("text") if c["text"] == "Root")
        assert (label["x"], label["y"]) == (x, y + node.radius + LABEL_OFFSET)
        assert label["size"] == 12
        assert label["bold"] is True
        assert label["color"] == LABEL_ACTIVE_COLOR

    def test_hovered_node_outline(self, model: GraphModel, simulation: ForceSimulation) -> None:
        surface = _draw(model, simulation, hovered="n3")
        outlined = [c for c in surface.of("circle") if c["stroke"] == OUTLINE_COLOR]
        assert len(outlined) == 1
        assert outlined[0]["line_width"] == 2.0
        label = next(c for c in surface.of("text") if c["text"] == "Loner")
        assert label["bold"] is False
        assert label["size"] == 12

    def test_scene_is_a_rounded_square(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        node = model.get("c1:1")
        x, y = simulation.position(node.index)
        surface = _draw(model, simulation)
        (rect,) = surface.of("rounded_rect")
        size = node.radius * SCENE_SIZE_FACTOR
        assert rect["w"] == rect["h"] == size
        assert (rect["x"], rect["y"]) == (x - size / 2, y - size / 2)
        assert rect["fill"] == node.color

    def test_selected_scene_gets_square_halo(
        self, model: GraphModel, simulation: ForceSimulation
    ) -> None:
        surface = _draw(model, simulation, selected="c1:1")
        body, halo = surface.of("rounded_rect")
        assert body["stroke"] == OUTLINE_COLOR
        assert halo["corner"] == 0.0
        assert halo["w"] == body["w"] + HALO_GAP * 2


class TestLabels:
    def test_short_titles_are_kept(self) -> None:
        assert truncate_label("x" * 24) == "x" * 24

    def test_long_titles_are_truncated(self) -> None:
        assert truncate_label("x" * 25) == "x" * 22 + "..."

    def test_configured_limits(self, story_input: GraphInput) -> None:
        model = build_graph(story_input.notes, story_input.scenes, story_input.characters)
        sim = ForceSimulation(model, config=SimulationConfig(seed=1))
        surface = RecordingSurface()
        Renderer(RenderConfig(label_max_chars=3, label_keep_chars=2)).draw(
            surface,
            model=model,
            simulation=sim,
            visibility=compute_visibility(model, Filters()),
            transform=ViewportTransform(),
        )
        assert "Ro..." in {c["text"] for c in surface.of("text")}
