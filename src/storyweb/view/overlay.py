"""Screen-space overlay: the legend and the filter panel.

Drawn after the graph with no transform pushed, so it stays put while the
viewport pans and zooms.  The filter panel sits in the top-left corner and
lists every toggle with its key; the character section appears only while
scenes are shown.  The legend sits in the bottom-left corner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from storyweb.domain.palette import DEFAULT_SCENE_COLOR, UNGROUPED_COLOR, character_color
from storyweb.domain.types import LinkType
from storyweb.view.renderer import EDGE_STYLES

if TYPE_CHECKING:
    from storyweb.domain.filters import Filters
    from storyweb.domain.types import GraphInput
    from storyweb.view.surface import Surface

# Key -> Filters toggle, in panel order.
FILTER_KEYS: dict[str, str] = {
    "n": "show_notes",
    "s": "show_scenes",
    "x": "show_scene_to_scene",
    "w": "show_wikilinks",
    "l": "show_scene_links",
    "t": "show_shared_tags",
}

FILTER_LABELS: dict[str, str] = {
    "show_notes": "Notes",
    "show_scenes": "Scenes",
    "show_scene_to_scene": "Scene-to-scene",
    "show_wikilinks": "Links",
    "show_scene_links": "Scene links",
    "show_shared_tags": "Shared tags",
}

CHARACTER_KEYS = "12345678"
OVERLAY_KEY = "h"

PANEL_FILL = "rgba(255,255,255,0.9)"
PANEL_STROKE = "#e5e7eb"
TEXT_COLOR = "#374151"
MUTED_COLOR = "#9ca3af"
CHECK_ON = "#6366f1"
MARGIN = 12.0
PADDING = 10.0
ROW = 18.0
TEXT_SIZE = 11.0
TITLE_SIZE = 10.0
SWATCH = 10.0

LEGEND_EDGES: tuple[tuple[str, LinkType, str], ...] = (
    ("Link", LinkType.WIKILINK, "#9ca3af"),
    ("Scene link", LinkType.SCENE_LINK, "#ef4444"),
    ("Shared tag", LinkType.SHARED_TAG, "#9ca3af"),
)

# Rough advance of one glyph, in multiples of the font size.
GLYPH_WIDTH = 0.55


@dataclass(frozen=True)
class CharacterKey:
    """A character that owns at least one scene, as listed in the panel."""

    id: str
    name: str
    color: str


def characters_in_scenes(graph_input: GraphInput) -> tuple[CharacterKey, ...]:
    """Characters referenced by scenes, in character-list order.

    Colours follow the scene nodes, which index the full character list.
    """
    in_scenes = {s.character_id for s in graph_input.scenes}
    return tuple(
        CharacterKey(c.id, c.name or c.id, character_color(index))
        for index, c in enumerate(graph_input.characters)
        if c.id in in_scenes
    )


def _text_width(text: str, size: float) -> float:
    return len(text) * size * GLYPH_WIDTH


class Overlay:
    """Draws the filter panel and the legend onto an untransformed surface."""

    def draw(
        self,
        surface: Surface,
        *,
        filters: Filters,
        characters: tuple[CharacterKey, ...] = (),
    ) -> None:
        self._draw_panel(surface, filters, characters)
        self._draw_legend(surface)

    def _label(
        self,
        surface: Surface,
        left: float,
        row_y: float,
        text: str,
        *,
        color: str = TEXT_COLOR,
        size: float = TEXT_SIZE,
        bold: bool = False,
    ) -> None:
        # Surfaces anchor text at its bottom centre.
        width = _text_width(text, size)
        surface.text(left + width / 2, row_y + size / 2, text, color=color, size=size, bold=bold)

    def _draw_panel(
        self,
        surface: Surface,
        filters: Filters,
        characters: tuple[CharacterKey, ...],
    ) -> None:
        rows: list[tuple[str, str, bool, str | None]] = [
            (key, FILTER_LABELS[name], getattr(filters, name), None)
            for key, name in FILTER_KEYS.items()
        ]
        listed = characters[: len(CHARACTER_KEYS)] if filters.show_scenes else ()
        for key, char in zip(CHARACTER_KEYS, listed, strict=False):
            rows.append((key, char.name, char.id not in filters.hidden_character_ids, char.color))

        labels = [f"[{key}] {label}" for key, label, _on, _color in rows]
        width = max(_text_width(t, TEXT_SIZE) for t in labels) + SWATCH * 2 + PADDING * 2
        height = ROW * (len(rows) + (2 if listed else 1)) + PADDING * 2
        surface.rounded_rect(
            MARGIN, MARGIN, width, height, 6.0, fill=PANEL_FILL, stroke=PANEL_STROKE
        )

        left = MARGIN + PADDING
        y = MARGIN + PADDING + ROW / 2
        self._label(surface, left, y, "Filters", color=MUTED_COLOR, size=TITLE_SIZE, bold=True)
        for i, (label, (_key, _name, on, color)) in enumerate(zip(labels, rows, strict=True)):
            if i == len(FILTER_KEYS):
                y += ROW
                self._label(
                    surface, left, y, "Characters", color=MUTED_COLOR, size=TITLE_SIZE, bold=True
                )
            y += ROW
            swatch = color or CHECK_ON
            surface.rounded_rect(
                left,
                y - SWATCH / 2,
                SWATCH,
                SWATCH,
                2.0,
                fill=swatch if on else None,
                stroke=swatch,
                line_width=1.0,
                alpha=1.0 if on else 0.5,
            )
            self._label(
                surface, left + SWATCH * 1.6, y, label, color=TEXT_COLOR if on else MUTED_COLOR
            )

    def _draw_legend(self, surface: Surface) -> None:
        labels = ["Note", "Scene", *(label for label, _type, _color in LEGEND_EDGES)]
        swatch_w = SWATCH * 2.4
        width = max(_text_width(t, TEXT_SIZE) for t in labels) + swatch_w + PADDING * 3
        height = ROW * len(labels) + PADDING * 2
        top = surface.height - MARGIN - height
        surface.rounded_rect(MARGIN, top, width, height, 6.0, fill=PANEL_FILL, stroke=PANEL_STROKE)

        left = MARGIN + PADDING
        mid = left + swatch_w / 2
        text_left = left + swatch_w + PADDING
        y = top + PADDING + ROW / 2
        surface.circle(mid, y, SWATCH / 2, fill=UNGROUPED_COLOR)
        self._label(surface, text_left, y, "Note")
        y += ROW
        surface.rounded_rect(
            mid - SWATCH / 2, y - SWATCH / 2, SWATCH, SWATCH, 2.0, fill=DEFAULT_SCENE_COLOR
        )
        self._label(surface, text_left, y, "Scene")
        for label, link_type, color in LEGEND_EDGES:
            y += ROW
            style = EDGE_STYLES[link_type]
            surface.line(
                left, y, left + swatch_w, y, color=color, width=style.width, dash=style.dash
            )
            self._label(surface, text_left, y, label)
