"""Colour palettes and node sizing shared by the simulation, renderer, and hit-testing."""

from __future__ import annotations

# Ancestor-group colours for note nodes.
GROUP_COLORS: tuple[str, ...] = (
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#f59e0b",
    "#10b981",
    "#06b6d4",
    "#f97316",
    "#84cc16",
)

# Character colours for scene nodes.
CHARACTER_COLORS: tuple[str, ...] = (
    "#ef4444",
    "#3b82f6",
    "#22c55e",
    "#a855f7",
    "#f97316",
    "#14b8a6",
    "#e879f9",
    "#eab308",
)

UNGROUPED_COLOR = "#6b7280"
DEFAULT_SCENE_COLOR = "#ef4444"

MIN_NODE_RADIUS = 6.0
MAX_NODE_RADIUS = 16.0
RADIUS_PER_CONNECTION = 2.0


def node_radius(connection_count: int) -> float:
    """Drawn radius of a node: ``clamp(6, 16, 6 + 2 * connection_count)``."""
    grown = MIN_NODE_RADIUS + connection_count * RADIUS_PER_CONNECTION
    return max(MIN_NODE_RADIUS, min(MAX_NODE_RADIUS, grown))


def group_color(index: int | None) -> str:
    if index is None:
        return UNGROUPED_COLOR
    return GROUP_COLORS[index % len(GROUP_COLORS)]


def character_color(index: int | None) -> str:
    if index is None:
        return DEFAULT_SCENE_COLOR
    return CHARACTER_COLORS[index % len(CHARACTER_COLORS)]
