"""Graph model builder: notes, scenes, and characters to nodes and links.

Pure function of its inputs.  Dangling references (link targets or scene
keys that resolve to no node) are dropped silently: the graph favours
availability over referential integrity, since users edit notes
independently of the links pointing at them.

Edges are deduplicated on the unordered pair of endpoints, so the first
relationship found between two nodes wins (wikilinks, then scene links,
then shared tags).  The NetworkX graph doubles as the dedup index and the
degree counter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import networkx as nx

from storyweb.domain.model import GraphLink, GraphModel, GraphNode
from storyweb.domain.types import (
    CharacterRecord,
    LinkType,
    NodeType,
    NoteRecord,
    SceneRecord,
)

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


def find_top_ancestor(note_id: str, notes_by_id: Mapping[str, NoteRecord]) -> str:
    """Walk ``parent_id`` pointers to the root of a note's parent chain.

    The walk stops at a parent that does not resolve, or at the first note
    seen twice when the chain loops back on itself.
    """
    current = notes_by_id.get(note_id)
    if current is None:
        return note_id
    seen = {current.id}
    while current.parent_id:
        parent = notes_by_id.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        seen.add(parent.id)
        current = parent
    return current.id


@dataclass
class _EdgeCollector:
    """Accumulates deduplicated edges in insertion order."""

    graph: nx.Graph[str]
    edges: list[tuple[str, str, LinkType]] = field(default_factory=list)
    dangling: int = 0
    duplicates: int = 0

    def add(self, source: str, target: str, link_type: LinkType) -> None:
        if source not in self.graph or target not in self.graph:
            self.dangling += 1
            return
        if source == target or self.graph.has_edge(source, target):
            self.duplicates += 1
            return
        self.graph.add_edge(source, target, type=link_type)
        self.edges.append((source, target, link_type))


def build_graph(
    notes: Iterable[NoteRecord],
    scenes: Iterable[SceneRecord],
    characters: Iterable[CharacterRecord],
    *,
    stable_group_colors: bool = False,
) -> GraphModel:
    """Build the full, unfiltered graph model.

    A node never links to itself: a note that wikilinks to itself, or a tag
    repeated on one node, adds no edge and nothing to the connection count.
    A scene whose only relationships are with itself is therefore dropped
    like any other unlinked scene.

    Args:
        notes: Note records with precomputed outgoing links and tags.
        scenes: Scene records.
        characters: Characters, in the order that assigns their colours.
        stable_group_colors: Sort ancestor ids before assigning group
            colours.  By default groups are numbered in first-seen order,
            so a note's colour can change when the input order does.
    """
    notes = list(notes)
    scenes = list(scenes)
    characters = list(characters)

    notes_by_id = {note.id: note for note in notes}
    ancestors = {note.id: find_top_ancestor(note.id, notes_by_id) for note in notes}
    groups = list(dict.fromkeys(ancestors[note.id] for note in notes))
    if stable_group_colors:
        groups.sort()
    group_index = {ancestor: i for i, ancestor in enumerate(groups)}

    character_index: dict[str, int] = {}
    character_names: dict[str, str] = {}
    for i, character in enumerate(characters):
        character_index.setdefault(character.id, i)
        character_names.setdefault(character.id, character.name)

    g: nx.Graph[str] = nx.Graph()
    for note in notes:
        ancestor = ancestors[note.id]
        g.add_node(
            note.id,
            node_type=NodeType.NOTE,
            title=note.title or UNTITLED,
            top_ancestor_id=ancestor,
            character_id=None,
            color_index=group_index[ancestor],
        )
    for scene in scenes:
        name = character_names.get(scene.character_id) or "?"
        g.add_node(
            scene.key,
            node_type=NodeType.SCENE,
            title=scene.title or f"{name} #{scene.scene_number}",
            top_ancestor_id=None,
            character_id=scene.character_id,
            color_index=character_index.get(scene.character_id),
        )

    collector = _EdgeCollector(g)
    for note in notes:
        for target_id in note.outgoing_links:
            collector.add(note.id, target_id, LinkType.WIKILINK)
    for note in notes:
        for key in note.scene_links:
            collector.add(note.id, key, LinkType.SCENE_LINK)

    # Notes first, then scenes, so pair order follows input order.
    tag_index: dict[str, list[str]] = {}
    for note in notes:
        for tag in note.tags:
            tag_index.setdefault(tag, []).append(note.id)
    for scene in scenes:
        for tag in scene.tags:
            tag_index.setdefault(tag, []).append(scene.key)
    for members in tag_index.values():
        for i, first in enumerate(members):
            for second in members[i + 1 :]:
                collector.add(first, second, LinkType.SHARED_TAG)

    unlinked_scenes = [
        node_id
        for node_id, degree in g.degree()
        if degree == 0 and g.nodes[node_id]["node_type"] is NodeType.SCENE
    ]
    g.remove_nodes_from(unlinked_scenes)

    nodes: list[GraphNode] = []
    for index, (node_id, attrs) in enumerate(g.nodes(data=True)):
        nodes.append(
            GraphNode(
                id=node_id,
                title=attrs["title"],
                node_type=attrs["node_type"],
                index=index,
                connection_count=g.degree(node_id),
                top_ancestor_id=attrs["top_ancestor_id"],
                character_id=attrs["character_id"],
                color_index=attrs["color_index"],
            )
        )
    slots = {node.id: node.index for node in nodes}
    links = tuple(
        GraphLink(
            source=source,
            target=target,
            type=link_type,
            source_index=slots[source],
            target_index=slots[target],
        )
        for source, target, link_type in collector.edges
    )

    logger.debug(
        "graph built: %d nodes, %d links (%d dangling refs, %d duplicates, %d unlinked scenes)",
        len(nodes),
        len(links),
        collector.dangling,
        collector.duplicates,
        len(unlinked_scenes),
    )
    return GraphModel(nodes=tuple(nodes), links=links, groups=tuple(groups), graph=g)
