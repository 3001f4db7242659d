"""Pointer interaction: hit-testing, drag vs. pan, hover, and click selection.

Hover and drag state are plain mutable objects updated in place by the
controller, followed by an explicit redraw of the graph surface.  They are
never routed through the host's own state updates, so moving the pointer
costs one repaint and nothing else.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from storyweb.config.models import InteractionConfig
from storyweb.view.viewport import wheel_zoom

if TYPE_CHECKING:
    from storyweb.config.models import ViewportConfig
    from storyweb.domain.model import GraphNode
    from storyweb.view.scene import GraphScene
    from storyweb.view.surface import Surface
    from storyweb.view.viewport import ViewportTransform

logger = logging.getLogger(__name__)

CURSOR_POINTER = "pointer"
CURSOR_GRAB = "grab"


# ── Drag state ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Idle:
    """No button held."""


@dataclass(frozen=True)
class Panning:
    """Background drag: the viewport follows the pointer."""

    start_x: float
    start_y: float
    start_offset_x: float
    start_offset_y: float


@dataclass(frozen=True)
class DraggingNode:
    """Node drag: the node is pinned under the pointer."""

    node_id: str
    start_x: float
    start_y: float


type DragState = Idle | Panning | DraggingNode

IDLE = Idle()


@dataclass
class InteractionState:
    """Hover, selection, and drag, kept outside any reactive state."""

    hovered_id: str | None = None
    selected_id: str | None = None
    drag: DragState = IDLE
    cursor: str = CURSOR_GRAB


class InteractionHost(Protocol):
    """What the controller needs from the view that owns it."""

    transform: ViewportTransform
    state: InteractionState

    @property
    def scene(self) -> GraphScene | None: ...

    @property
    def surface(self) -> Surface | None: ...

    @property
    def viewport_config(self) -> ViewportConfig: ...

    def invalidate(self) -> None: ...

    def select_note(self, note_id: str) -> None: ...


def find_node_at(scene: GraphScene, gx: float, gy: float, slop: float = 4.0) -> GraphNode | None:
    """Topmost visible node whose hit circle contains ``(gx, gy)``.

    Nodes added later are drawn later, so they win on overlap.  Nodes hidden
    by filters are never hit.
    """
    for node in reversed(scene.model.nodes):
        if not scene.visibility.is_visible(node.id):
            continue
        x, y = scene.simulation.position(node.index)
        reach = node.radius + slop
        dx = x - gx
        dy = y - gy
        if dx * dx + dy * dy <= reach * reach:
            return node
    return None


class InteractionController:
    """Interprets pointer events for a graph view."""

    def __init__(self, host: InteractionHost, config: InteractionConfig | None = None) -> None:
        self._host = host
        self.config = config or InteractionConfig()

    @property
    def state(self) -> InteractionState:
        return self._host.state

    def hit_test(self, sx: float, sy: float) -> GraphNode | None:
        """Node under the screen point, or None (also when nothing is mounted)."""
        scene = self._host.scene
        if scene is None or self._host.surface is None:
            return None
        gx, gy = self._host.transform.screen_to_graph(sx, sy)
        return find_node_at(scene, gx, gy, self.config.hit_slop)

    # ------------------------------------------------------------------
    # Pointer events (screen coordinates relative to the surface)
    # ------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float) -> None:
        if self._host.surface is None:
            return
        node = self.hit_test(sx, sy)
        scene = self._host.scene
        if node is not None and scene is not None:
            self.state.drag = DraggingNode(node.id, sx, sy)
            x, y = scene.simulation.position(node.index)
            scene.simulation.pin(node.id, x, y)
            scene.simulation.drag_started()
            return
        t = self._host.transform
        self.state.drag = Panning(sx, sy, t.offset_x, t.offset_y)

    def pointer_move(self, sx: float, sy: float) -> None:
        if self._host.surface is None:
            return
        drag = self.state.drag
        match drag:
            case Panning():
                t = self._host.transform
                t.offset_x = drag.start_offset_x + (sx - drag.start_x)
                t.offset_y = drag.start_offset_y + (sy - drag.start_y)
                self._host.invalidate()
            case DraggingNode():
                scene = self._host.scene
                if scene is not None:
                    gx, gy = self._host.transform.screen_to_graph(sx, sy)
                    scene.simulation.pin(drag.node_id, gx, gy)
            case Idle():
                node = self.hit_test(sx, sy)
                hovered = node.id if node else None
                self.state.cursor = CURSOR_POINTER if node else CURSOR_GRAB
                if hovered != self.state.hovered_id:
                    self.state.hovered_id = hovered
                    self._host.invalidate()

    def pointer_up(self, sx: float, sy: float) -> None:
        drag = self.state.drag
        if isinstance(drag, DraggingNode):
            scene = self._host.scene
            if scene is not None:
                node = scene.model.get(drag.node_id)
                travel = math.hypot(sx - drag.start_x, sy - drag.start_y)
                if node is not None and node.is_note and travel < self.config.click_threshold:
                    logger.debug("note selected: %s", node.id)
                    self._host.select_note(node.id)
                scene.simulation.unpin(drag.node_id)
                scene.simulation.drag_ended()
        self.state.drag = IDLE

    def pointer_leave(self) -> None:
        """Clear hover and release any pin without selecting."""
        self.state.hovered_id = None
        self.state.cursor = CURSOR_GRAB
        self._host.invalidate()
        drag = self.state.drag
        if isinstance(drag, DraggingNode):
            scene = self._host.scene
            if scene is not None:
                scene.simulation.unpin(drag.node_id)
                scene.simulation.drag_ended()
        self.state.drag = IDLE

    def wheel(self, sx: float, sy: float, delta_y: float) -> None:
        """Zoom about the cursor; positive *delta_y* zooms out."""
        if self._host.surface is None:
            return
        t = self._host.transform
        t.assign(wheel_zoom(t, sx, sy, delta_y, self._host.viewport_config))
        self._host.invalidate()
