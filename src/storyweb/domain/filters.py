"""Filter cascade: which nodes and links of a built model are shown.

Two passes over the unfiltered model:

1. Candidate nodes: allowed by the node toggles and the character filter.
   With scene-to-scene hidden, a scene also needs an edge to a candidate note.
2. Visible links: both endpoints are candidates and the link type is on
   (scene-to-scene links additionally need their own toggle).

A candidate is finally visible when it has a visible link, or when it is a
note with no connections at all, so truly isolated notes stay discoverable.
The cascade is recomputed from scratch for every filter change and never
touches the model.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from storyweb.domain.types import LinkType, NodeType

if TYPE_CHECKING:
    from storyweb.domain.model import GraphLink, GraphModel


@dataclass(frozen=True)
class Filters:
    """User-controlled visibility toggles."""

    show_notes: bool = True
    show_scenes: bool = True
    show_scene_to_scene: bool = False
    show_wikilinks: bool = True
    show_scene_links: bool = True
    show_shared_tags: bool = True
    hidden_character_ids: frozenset[str] = field(default_factory=frozenset)

    def shows_link_type(self, link_type: LinkType) -> bool:
        if link_type is LinkType.WIKILINK:
            return self.show_wikilinks
        if link_type is LinkType.SCENE_LINK:
            return self.show_scene_links
        return self.show_shared_tags

    def toggled(self, name: str) -> Filters:
        """Return a copy with the boolean toggle *name* flipped."""
        current = getattr(self, name)
        if not isinstance(current, bool):
            msg = f"'{name}' is not a filter toggle"
            raise ValueError(msg)
        return replace(self, **{name: not current})

    def with_character_toggled(self, character_id: str) -> Filters:
        hidden = set(self.hidden_character_ids)
        hidden.symmetric_difference_update({character_id})
        return replace(self, hidden_character_ids=frozenset(hidden))


@dataclass(frozen=True)
class Visibility:
    """Result of the filter cascade."""

    candidate_ids: frozenset[str]
    node_ids: frozenset[str]
    links: tuple[GraphLink, ...]

    def is_visible(self, node_id: str | None) -> bool:
        return node_id is not None and node_id in self.node_ids

    def __len__(self) -> int:
        return len(self.node_ids)


def _is_scene_to_scene(model: GraphModel, link: GraphLink) -> bool:
    return (
        model.node_type(link.source) is NodeType.SCENE
        and model.node_type(link.target) is NodeType.SCENE
    )


def compute_visibility(model: GraphModel, filters: Filters) -> Visibility:
    """Run the two-pass cascade for *filters* over *model*."""
    note_candidates = (
        {node.id for node in model.nodes if node.is_note} if filters.show_notes else set()
    )

    scenes_linked_to_note: set[str] | None = None
    if not filters.show_scene_to_scene:
        scenes_linked_to_note = set()
        for link in model.links:
            source_type = model.node_type(link.source)
            target_type = model.node_type(link.target)
            if source_type is NodeType.SCENE and link.target in note_candidates:
                scenes_linked_to_note.add(link.source)
            if target_type is NodeType.SCENE and link.source in note_candidates:
                scenes_linked_to_note.add(link.target)

    candidates = set(note_candidates)
    if filters.show_scenes:
        for node in model.nodes:
            if not node.is_scene:
                continue
            if node.character_id in filters.hidden_character_ids:
                continue
            if scenes_linked_to_note is not None and node.id not in scenes_linked_to_note:
                continue
            candidates.add(node.id)

    visible_links: list[GraphLink] = []
    linked: set[str] = set()
    for link in model.links:
        if link.source not in candidates or link.target not in candidates:
            continue
        if not filters.shows_link_type(link.type):
            continue
        if not filters.show_scene_to_scene and _is_scene_to_scene(model, link):
            continue
        visible_links.append(link)
        linked.add(link.source)
        linked.add(link.target)

    visible = {
        node.id
        for node in model.nodes
        if node.id in candidates
        and (node.id in linked or (node.is_note and node.connection_count == 0))
    }
    return Visibility(
        candidate_ids=frozenset(candidates),
        node_ids=frozenset(visible),
        links=tuple(visible_links),
    )
