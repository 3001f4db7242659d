"""GraphService: build, filter, lay out, and draw the relationship graph.

Each operation reads one JSON input document, builds the model, and
reports on it.  ``render`` and ``view`` drive the same :class:`GraphView`
the interactive viewer uses, so snapshots match what the window shows.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from storyweb.config.models import FiltersConfig
from storyweb.domain.builder import build_graph
from storyweb.domain.filters import Filters, Visibility, compute_visibility
from storyweb.domain.model import GraphModel, GraphNode
from storyweb.domain.types import GraphInput, LinkType
from storyweb.infrastructure.graph.simulation import ForceSimulation
from storyweb.infrastructure.scheduler import FrameScheduler
from storyweb.services.base import BaseService
from storyweb.services.result import ServiceResult
from storyweb.services.telemetry import trace_span, traced
from storyweb.view.graph_view import GraphView

FILTER_TOGGLES = (
    "show_notes",
    "show_scenes",
    "show_scene_to_scene",
    "show_wikilinks",
    "show_scene_links",
    "show_shared_tags",
)


def build_filters(
    config: FiltersConfig,
    *,
    hide_characters: Iterable[str] = (),
    **toggles: bool | None,
) -> Filters:
    """Start from the configured filters and apply explicit overrides.

    ``None`` toggles keep the configured value.  *hide_characters* adds to
    the configured hidden characters.
    """
    unknown = set(toggles) - set(FILTER_TOGGLES)
    if unknown:
        msg = f"Unknown filter toggle(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    values: dict[str, Any] = {name: getattr(config, name) for name in FILTER_TOGGLES}
    values.update({name: value for name, value in toggles.items() if value is not None})
    hidden = frozenset(config.hidden_character_ids) | frozenset(hide_characters)
    return Filters(**values, hidden_character_ids=hidden)


def _node_item(node: GraphNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "title": node.title,
        "type": node.node_type.value,
        "connections": node.connection_count,
        "group": node.top_ancestor_id if node.is_note else node.character_id,
    }


def _link_counts(links: Iterable[Any]) -> dict[str, int]:
    counts = Counter(link.type for link in links)
    return {link_type.value: counts.get(link_type, 0) for link_type in LinkType}


def _filters_data(filters: Filters) -> dict[str, Any]:
    data: dict[str, Any] = {name: getattr(filters, name) for name in FILTER_TOGGLES}
    data["hidden_character_ids"] = sorted(filters.hidden_character_ids)
    return data


class GraphService(BaseService):
    """Graph operations over a JSON input document."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _build(self, graph_input: GraphInput) -> GraphModel:
        with trace_span("build_graph") as span:
            model = build_graph(
                graph_input.notes,
                graph_input.scenes,
                graph_input.characters,
                stable_group_colors=self._settings.render.stable_group_colors,
            )
            if span:
                span.annotate("nodes", len(model))
                span.annotate("links", len(model.links))
        return model

    def _filters(self, filters: Filters | None) -> Filters:
        return filters if filters is not None else build_filters(self._settings.filters)

    def _visibility(self, model: GraphModel, filters: Filters) -> Visibility:
        with trace_span("compute_visibility") as span:
            visibility = compute_visibility(model, filters)
            if span:
                span.annotate("visible", len(visibility))
        return visibility

    def _view(self, graph_input: GraphInput, filters: Filters, **kwargs: Any) -> GraphView:
        view = GraphView(
            scheduler=FrameScheduler(),
            config=self._settings.graph,
            filters=filters,
            **kwargs,
        )
        with trace_span("build_graph"):
            view.load(graph_input)
        return view

    # ------------------------------------------------------------------
    # build: model summary
    # ------------------------------------------------------------------

    @traced
    def build(self, path: Path) -> ServiceResult:
        """Build the unfiltered model and summarise nodes, links, and groups."""
        loaded = self._load_input("build", path)
        if isinstance(loaded, ServiceResult):
            return loaded

        model = self._build(loaded)
        dropped = len({scene.key for scene in loaded.scenes}) - model.scene_count
        warnings = [f"{dropped} scene(s) without connections dropped"] if dropped else []
        isolated = [n.id for n in model.nodes if n.is_note and n.connection_count == 0]

        return ServiceResult(
            ok=True,
            op="build",
            data={
                "count": len(model),
                "notes": model.note_count,
                "scenes": model.scene_count,
                "links": len(model.links),
                "link_types": _link_counts(model.links),
                "groups": len(model.groups),
                "isolated": isolated,
                "items": [_node_item(node) for node in model.nodes],
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # visible: filter cascade
    # ------------------------------------------------------------------

    @traced
    def visible(self, path: Path, *, filters: Filters | None = None) -> ServiceResult:
        """Apply *filters* (default: configured filters) and list what is shown."""
        loaded = self._load_input("visible", path)
        if isinstance(loaded, ServiceResult):
            return loaded

        active = self._filters(filters)
        model = self._build(loaded)
        visibility = self._visibility(model, active)

        return ServiceResult(
            ok=True,
            op="visible",
            data={
                "filters": _filters_data(active),
                "count": len(visibility),
                "total": len(model),
                "candidates": len(visibility.candidate_ids),
                "links": len(visibility.links),
                "link_types": _link_counts(visibility.links),
                "items": [
                    _node_item(node) for node in model.nodes if visibility.is_visible(node.id)
                ],
            },
        )

    # ------------------------------------------------------------------
    # layout: headless simulation
    # ------------------------------------------------------------------

    @traced
    def layout(
        self,
        path: Path,
        *,
        ticks: int | None = None,
        filters: Filters | None = None,
    ) -> ServiceResult:
        """Run the simulation to rest (or for *ticks* steps) and report positions.

        The simulation always covers the unfiltered model; *filters* only
        mark which positions are currently visible.
        """
        loaded = self._load_input("layout", path)
        if isinstance(loaded, ServiceResult):
            return loaded

        model = self._build(loaded)
        visibility = self._visibility(model, self._filters(filters))
        simulation = ForceSimulation(model, config=self._settings.simulation)
        with trace_span("settle") as span:
            ran = simulation.settle(ticks)
            if span:
                span.annotate("ticks", ran)

        items = []
        for node in model.nodes:
            x, y = simulation.position(node.index)
            items.append(
                {
                    "id": node.id,
                    "type": node.node_type.value,
                    "x": round(x, 2),
                    "y": round(y, 2),
                    "visible": visibility.is_visible(node.id),
                }
            )

        return ServiceResult(
            ok=True,
            op="layout",
            data={
                "count": len(items),
                "ticks": ran,
                "alpha": round(simulation.alpha, 6),
                "settled": simulation.alpha < simulation.alpha_min,
                "items": items,
            },
        )

    # ------------------------------------------------------------------
    # render: PNG snapshot
    # ------------------------------------------------------------------

    @traced
    def render(
        self,
        path: Path,
        output: Path,
        *,
        width: int = 1200,
        height: int = 800,
        ticks: int | None = None,
        filters: Filters | None = None,
        selected: str | None = None,
    ) -> ServiceResult:
        """Lay out the graph, frame the visible nodes, and save a PNG."""
        from storyweb.view import pygame_surface

        loaded = self._load_input("render", path)
        if isinstance(loaded, ServiceResult):
            return loaded

        view = self._view(loaded, self._filters(filters))
        simulation = view.simulation
        assert simulation is not None
        simulation.stop()
        with trace_span("settle"):
            ran = simulation.settle(ticks)
        if selected is not None:
            view.set_selection(selected)

        with trace_span("save_png"):
            try:
                pygame_surface.save_png(view, output, width=width, height=height)
            except (pygame_surface.PygameError, OSError) as exc:
                return ServiceResult.failure(
                    "render",
                    "RENDER_FAILED",
                    f"Could not write {output}: {exc}",
                    output=str(output),
                )
            finally:
                view.close()

        visible = len(view.scene.visibility) if view.scene else 0
        return ServiceResult(
            ok=True,
            op="render",
            data={
                "output": str(output),
                "width": width,
                "height": height,
                "ticks": ran,
                "visible": visible,
                "scale": round(view.transform.scale, 4),
            },
            warnings=[] if visible else ["Nothing visible with the current filters"],
        )

    # ------------------------------------------------------------------
    # view: interactive window
    # ------------------------------------------------------------------

    @traced
    def view(self, path: Path, *, filters: Filters | None = None) -> ServiceResult:
        """Open the interactive viewer and report the notes clicked in it."""
        from storyweb.view import pygame_surface

        loaded = self._load_input("view", path)
        if isinstance(loaded, ServiceResult):
            return loaded

        selections: list[str] = []

        def on_select(note_id: str) -> None:
            selections.append(note_id)
            graph_view.set_selection(note_id)

        graph_view = self._view(loaded, self._filters(filters), on_select_note=on_select)
        try:
            pygame_surface.run_viewer(graph_view, self._settings.viewer)
        except pygame_surface.PygameError as exc:
            return ServiceResult.failure(
                "view",
                "VIEWER_UNAVAILABLE",
                f"Cannot open the viewer window: {exc}",
            )
        finally:
            graph_view.close()

        return ServiceResult(
            ok=True,
            op="view",
            data={
                "selected": selections[-1] if selections else None,
                "selections": selections,
            },
        )
