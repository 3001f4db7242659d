"""GraphView: wires builder, filters, simulation, viewport, renderer, and controller.

The host supplies inputs, a surface, and a frame scheduler; the view owns
everything else.  Lifecycle rules:

* Every input change rebuilds the model and replaces the simulation.  The
  previous simulation is stopped first so two simulations never step at
  once.  Pins and energy start over; filters, drag state, and the viewport
  carry across.  A node dragged during the rebuild stays pinned where it
  was and keeps the new simulation warm; if it is gone, the drag ends.
* The viewport is centred on the surface midpoint once, for the first
  build that has a surface to measure.
* Filter changes recompute visibility from scratch and redraw, without
  touching the simulation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from storyweb.config.models import GraphConfig, ViewportConfig
from storyweb.domain.filters import Filters, compute_visibility
from storyweb.domain.types import CharacterRecord, GraphInput, NoteRecord, SceneRecord
from storyweb.infrastructure.graph.engine import GraphEngine
from storyweb.infrastructure.graph.simulation import ForceSimulation
from storyweb.view.interaction import IDLE, DraggingNode, InteractionController, InteractionState
from storyweb.view.overlay import CharacterKey, Overlay, characters_in_scenes
from storyweb.view.renderer import Renderer
from storyweb.view.scene import GraphScene
from storyweb.view.viewport import ViewportTransform, ZoomAnimator, button_zoom, fit_transform

if TYPE_CHECKING:
    from storyweb.domain.model import GraphModel
    from storyweb.infrastructure.scheduler import FrameScheduler
    from storyweb.view.surface import Surface

logger = logging.getLogger(__name__)


class GraphView:
    """Interactive relationship graph over one set of notes and scenes."""

    def __init__(
        self,
        *,
        scheduler: FrameScheduler,
        config: GraphConfig | None = None,
        filters: Filters | None = None,
        surface: Surface | None = None,
        on_select_note: Callable[[str], None] | None = None,
    ) -> None:
        self.config = config or GraphConfig()
        self.scheduler = scheduler
        self.filters = filters or Filters()
        self.transform = ViewportTransform()
        self.state = InteractionState()
        self.renderer = Renderer(self.config.render)
        self.overlay = Overlay()
        self.show_overlay = False
        self.controller = InteractionController(self, self.config.interaction)
        self.redraws = 0

        self._surface = surface
        self._on_select_note = on_select_note
        self._engine = GraphEngine(stable_group_colors=self.config.render.stable_group_colors)
        self._scene: GraphScene | None = None
        self._characters: tuple[CharacterKey, ...] = ()
        self._centered = False
        self._zoom = ZoomAnimator(
            self.transform,
            scheduler,
            duration_ms=self.config.viewport.animation_ms,
            on_frame=self.invalidate,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def scene(self) -> GraphScene | None:
        return self._scene

    @property
    def surface(self) -> Surface | None:
        return self._surface

    @property
    def viewport_config(self) -> ViewportConfig:
        return self.config.viewport

    @property
    def model(self) -> GraphModel | None:
        return self._scene.model if self._scene else None

    @property
    def simulation(self) -> ForceSimulation | None:
        return self._scene.simulation if self._scene else None

    @property
    def scene_characters(self) -> tuple[CharacterKey, ...]:
        """Characters owning scenes in the current inputs, in toggle-key order."""
        return self._characters

    @property
    def zoom_animating(self) -> bool:
        return self._zoom.active

    # ------------------------------------------------------------------
    # Host inputs
    # ------------------------------------------------------------------

    def set_data(
        self,
        notes: Iterable[NoteRecord] = (),
        scenes: Iterable[SceneRecord] = (),
        characters: Iterable[CharacterRecord] = (),
    ) -> None:
        self.load(
            GraphInput(notes=tuple(notes), scenes=tuple(scenes), characters=tuple(characters))
        )

    def load(self, graph_input: GraphInput) -> None:
        """Replace the inputs and rebuild the graph from scratch."""
        self._engine.load(graph_input)
        self._rebuild()

    def _rebuild(self) -> None:
        drag = self.state.drag
        held = None
        if self._scene is not None:
            self._scene.simulation.stop()
            if isinstance(drag, DraggingNode):
                held = self._scene.simulation.position_of(drag.node_id)

        model = self._engine.model
        simulation = ForceSimulation(
            model,
            config=self.config.simulation,
            scheduler=self.scheduler,
        )
        simulation.on_tick(self.invalidate)
        self._scene = GraphScene(model, simulation, compute_visibility(model, self.filters))
        self._characters = characters_in_scenes(self._engine.input)
        if isinstance(drag, DraggingNode):
            if held is not None and drag.node_id in model:
                simulation.pin(drag.node_id, *held)
                simulation.drag_started()
            else:
                self.state.drag = IDLE
        logger.debug(
            "graph rebuilt: %d nodes, %d links, %d visible",
            len(model),
            len(model.links),
            len(self._scene.visibility),
        )
        self._center_once()
        simulation.start()
        self.invalidate()

    def attach(self, surface: Surface) -> None:
        """Mount (or re-mount after a resize) the drawing surface.

        Resizing never rebuilds the graph or resets the viewport; zoom pivots
        are measured from the surface at the time of each zoom.
        """
        self._surface = surface
        self._center_once()
        self.invalidate()

    def detach(self) -> None:
        self._surface = None

    def _center_once(self) -> None:
        if self._centered or self._surface is None or self._scene is None:
            return
        self.transform.assign(
            ViewportTransform(self._surface.width / 2, self._surface.height / 2, 1.0)
        )
        self._centered = True

    def set_filters(self, filters: Filters) -> None:
        self.filters = filters
        if self._scene is not None:
            self._scene.visibility = compute_visibility(self._scene.model, filters)
        self.invalidate()

    def toggle_filter(self, name: str) -> None:
        self.set_filters(self.filters.toggled(name))

    def toggle_character(self, character_id: str) -> None:
        self.set_filters(self.filters.with_character_toggled(character_id))

    def toggle_overlay(self) -> None:
        self.show_overlay = not self.show_overlay
        self.invalidate()

    def set_selection(self, note_id: str | None) -> None:
        """Highlight *note_id* (the host's current selection)."""
        self.state.selected_id = note_id
        self.invalidate()

    def select_note(self, note_id: str) -> None:
        """Report a clicked note to the host."""
        if self._on_select_note is not None:
            self._on_select_note(note_id)

    # ------------------------------------------------------------------
    # Drawing and zoom
    # ------------------------------------------------------------------

    def invalidate(self) -> None:
        """Redraw the graph surface now.  No-op until a surface is mounted.

        With :attr:`show_overlay` set, the filter panel and legend are drawn
        on top in screen space.
        """
        if self._scene is None:
            return
        drawn = self.renderer.draw(
            self._surface,
            model=self._scene.model,
            simulation=self._scene.simulation,
            visibility=self._scene.visibility,
            transform=self.transform,
            hovered_id=self.state.hovered_id,
            selected_id=self.state.selected_id,
        )
        if drawn:
            if self.show_overlay:
                self.overlay.draw(self._surface, filters=self.filters, characters=self._characters)
            self.redraws += 1

    def zoom_in(self) -> None:
        self._zoom_button(zoom_in=True)

    def zoom_out(self) -> None:
        self._zoom_button(zoom_in=False)

    def _zoom_button(self, *, zoom_in: bool) -> None:
        if self._surface is None:
            return
        target = button_zoom(
            self.transform,
            self._surface.width,
            self._surface.height,
            zoom_in=zoom_in,
            config=self.config.viewport,
        )
        self._zoom.animate_to(target)

    def zoom_fit(self) -> None:
        """Animate to the bounding box of the visible nodes."""
        if self._surface is None or self._scene is None:
            return
        target = fit_transform(
            self.visible_positions(),
            self._surface.width,
            self._surface.height,
            self.config.viewport,
        )
        if target is not None:
            self._zoom.animate_to(target)

    def fit_now(self) -> bool:
        """Jump straight to the fit-to-view transform (headless snapshots)."""
        if self._surface is None or self._scene is None:
            return False
        target = fit_transform(
            self.visible_positions(),
            self._surface.width,
            self._surface.height,
            self.config.viewport,
        )
        if target is None:
            return False
        self._zoom.cancel()
        self.transform.assign(target)
        self.invalidate()
        return True

    def visible_positions(self) -> list[tuple[float, float]]:
        if self._scene is None:
            return []
        sim = self._scene.simulation
        return [
            sim.position(node.index)
            for node in self._scene.model.nodes
            if self._scene.visibility.is_visible(node.id)
        ]

    def close(self) -> None:
        """Stop all scheduled work (simulation steps and zoom animation)."""
        self._zoom.cancel()
        if self._scene is not None:
            self._scene.simulation.stop()
