"""Immutable graph model produced by one build.

Nodes live in an arena: each :class:`GraphNode` carries its ``index`` and
links carry the indices of their endpoints, so the simulation can integrate
into flat position arrays instead of mutating node objects.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storyweb.domain.palette import character_color, group_color, node_radius
from storyweb.domain.types import NodeType

if TYPE_CHECKING:
    import networkx as nx

    from storyweb.domain.types import LinkType


@dataclass(frozen=True)
class GraphNode:
    """A note or scene in the graph.

    Attributes:
        id: Note id, or ``"characterId:sceneNumber"`` for scenes.
        title: Display label.
        node_type: Note or scene.
        index: Slot in the model's node arena (and the simulation arrays).
        connection_count: Incident edges in the unfiltered graph.
        top_ancestor_id: Root of the parent chain (notes only).
        character_id: Owning character (scenes only).
        color_index: Ancestor group index for notes, character index for
            scenes; None when the character is unknown.
    """

    id: str
    title: str
    node_type: NodeType
    index: int
    connection_count: int = 0
    top_ancestor_id: str | None = None
    character_id: str | None = None
    color_index: int | None = None

    @property
    def is_note(self) -> bool:
        return self.node_type is NodeType.NOTE

    @property
    def is_scene(self) -> bool:
        return self.node_type is NodeType.SCENE

    @property
    def radius(self) -> float:
        return node_radius(self.connection_count)

    @property
    def color(self) -> str:
        if self.is_scene:
            return character_color(self.color_index)
        return group_color(self.color_index)


@dataclass(frozen=True)
class GraphLink:
    """An undirected relationship between two nodes."""

    source: str
    target: str
    type: LinkType
    source_index: int
    target_index: int

    def touches(self, node_id: str | None) -> bool:
        return node_id is not None and node_id in (self.source, self.target)

    @property
    def pair_key(self) -> tuple[str, str]:
        """Canonical unordered key used for deduplication."""
        a, b = sorted((self.source, self.target))
        return a, b


@dataclass(frozen=True)
class GraphModel:
    """The full, unfiltered graph of one build.

    ``graph`` is the undirected NetworkX view of the same nodes and links,
    kept for degree and neighbourhood queries.
    """

    nodes: tuple[GraphNode, ...]
    links: tuple[GraphLink, ...]
    groups: tuple[str, ...]
    graph: nx.Graph[str] = field(repr=False, compare=False)
    _by_id: dict[str, GraphNode] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {n.id: n for n in self.nodes})

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def get(self, node_id: str | None) -> GraphNode | None:
        if node_id is None:
            return None
        return self._by_id.get(node_id)

    def node_type(self, node_id: str) -> NodeType | None:
        node = self._by_id.get(node_id)
        return node.node_type if node else None

    def neighbors(self, node_id: str) -> list[str]:
        if node_id not in self.graph:
            return []
        return list(self.graph.neighbors(node_id))

    @property
    def note_count(self) -> int:
        return sum(1 for n in self.nodes if n.is_note)

    @property
    def scene_count(self) -> int:
        return sum(1 for n in self.nodes if n.is_scene)
