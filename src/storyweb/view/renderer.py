"""Renderer: draws the visible subgraph onto a surface.

Each call redraws the whole frame: clear, push the viewport transform,
visible edges, then visible nodes with their labels, pop.  Edges touching
the hovered or selected node are drawn brighter; hovered and selected
nodes get an outline, and the selected node a translucent halo.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from storyweb.config.models import RenderConfig
from storyweb.domain.types import LinkType

if TYPE_CHECKING:
    from storyweb.domain.filters import Visibility
    from storyweb.domain.model import GraphModel, GraphNode
    from storyweb.infrastructure.graph.simulation import ForceSimulation
    from storyweb.view.surface import Surface
    from storyweb.view.viewport import ViewportTransform


@dataclass(frozen=True)
class EdgeStyle:
    color: str
    highlight_color: str
    width: float
    dash: tuple[float, ...] = ()


EDGE_STYLES: dict[LinkType, EdgeStyle] = {
    LinkType.WIKILINK: EdgeStyle("rgba(156,163,175,0.35)", "rgba(99,102,241,0.8)", 1.5),
    LinkType.SCENE_LINK: EdgeStyle("rgba(239,68,68,0.25)", "rgba(239,68,68,0.7)", 1.5),
    LinkType.SHARED_TAG: EdgeStyle(
        "rgba(156,163,175,0.2)", "rgba(99,102,241,0.5)", 1.0, dash=(4.0, 4.0)
    ),
}

OUTLINE_COLOR = "#ffffff"
LABEL_COLOR = "#6b7280"
LABEL_ACTIVE_COLOR = "#1f2937"
SCENE_SIZE_FACTOR = 1.6
SCENE_CORNER = 3.0
HALO_GAP = 4.0
LABEL_OFFSET = 14.0


def truncate_label(title: str, max_chars: int = 24, keep_chars: int = 22) -> str:
    """Shorten titles longer than *max_chars* to *keep_chars* plus an ellipsis."""
    if len(title) > max_chars:
        return title[:keep_chars] + "..."
    return title


class Renderer:
    """Stateless drawing of one frame; all inputs are passed per call."""

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()

    def draw(
        self,
        surface: Surface | None,
        *,
        model: GraphModel,
        simulation: ForceSimulation,
        visibility: Visibility,
        transform: ViewportTransform,
        hovered_id: str | None = None,
        selected_id: str | None = None,
    ) -> bool:
        """Draw a full frame.  Returns False when there is no surface to draw on."""
        if surface is None:
            return False

        surface.clear()
        surface.push_transform(transform.offset_x, transform.offset_y, transform.scale)
        try:
            for link in visibility.links:
                sx, sy = simulation.position(link.source_index)
                tx, ty = simulation.position(link.target_index)
                style = EDGE_STYLES[link.type]
                active = link.touches(hovered_id) or link.touches(selected_id)
                surface.line(
                    sx,
                    sy,
                    tx,
                    ty,
                    color=style.highlight_color if active else style.color,
                    width=style.width,
                    dash=style.dash,
                )

            for node in model.nodes:
                if not visibility.is_visible(node.id):
                    continue
                x, y = simulation.position(node.index)
                self._draw_node(
                    surface,
                    node,
                    x,
                    y,
                    hovered=node.id == hovered_id,
                    selected=node.id == selected_id,
                )
        finally:
            surface.pop_transform()
        return True

    def _draw_node(
        self,
        surface: Surface,
        node: GraphNode,
        x: float,
        y: float,
        *,
        hovered: bool,
        selected: bool,
    ) -> None:
        r = node.radius
        color = node.color
        if selected:
            style = {"fill": color, "stroke": OUTLINE_COLOR, "line_width": 2.5, "alpha": 1.0}
        elif hovered:
            style = {"fill": color, "stroke": OUTLINE_COLOR, "line_width": 2.0, "alpha": 1.0}
        else:
            style = {"fill": color, "stroke": None, "line_width": 1.0, "alpha": 0.8}

        if node.is_scene:
            size = r * SCENE_SIZE_FACTOR
            half = size / 2
            surface.rounded_rect(x - half, y - half, size, size, SCENE_CORNER, **style)
            if selected:
                halo = size + HALO_GAP * 2
                surface.rounded_rect(
                    x - halo / 2,
                    y - halo / 2,
                    halo,
                    halo,
                    0.0,
                    stroke=color,
                    line_width=1.5,
                    alpha=0.4,
                )
        else:
            surface.circle(x, y, r, **style)
            if selected:
                surface.circle(x, y, r + HALO_GAP, stroke=color, line_width=1.5, alpha=0.4)

        active = hovered or selected
        surface.text(
            x,
            y + r + LABEL_OFFSET,
            truncate_label(node.title, self.config.label_max_chars, self.config.label_keep_chars),
            color=LABEL_ACTIVE_COLOR if active else LABEL_COLOR,
            size=12 if active else 10,
            bold=selected,
        )
