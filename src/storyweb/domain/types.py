"""Node/link kinds and the read-only input records supplied by the host.

The records mirror the host application's data contracts, so they accept
the host's camelCase field names as aliases.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeType(StrEnum):
    """The two node kinds in the graph."""

    NOTE = "note"
    SCENE = "scene"


class LinkType(StrEnum):
    """Edge kinds, in the order the builder adds them."""

    WIKILINK = "wikilink"
    SCENE_LINK = "scene-link"
    SHARED_TAG = "shared-tag"


DIRECT_LINK_TYPES = frozenset({LinkType.WIKILINK, LinkType.SCENE_LINK})


def scene_key(character_id: str, scene_number: int) -> str:
    """Return the node id for a scene: ``"characterId:sceneNumber"``."""
    return f"{character_id}:{scene_number}"


_RECORD_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class NoteRecord(BaseModel):
    """A note with its precomputed outgoing references."""

    model_config = _RECORD_CONFIG

    id: str
    title: str = ""
    parent_id: str | None = Field(default=None, alias="parentId")
    outgoing_links: tuple[str, ...] = Field(default=(), alias="outgoingLinks")
    scene_links: tuple[str, ...] = Field(default=(), alias="sceneLinks")
    tags: tuple[str, ...] = ()

    @field_validator("outgoing_links", "scene_links", "tags", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value


class SceneRecord(BaseModel):
    """A narrative scene, identified by character and sequence number."""

    model_config = _RECORD_CONFIG

    character_id: str = Field(alias="characterId")
    scene_number: int = Field(alias="sceneNumber")
    title: str = ""
    tags: tuple[str, ...] = ()

    @field_validator("tags", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def key(self) -> str:
        return scene_key(self.character_id, self.scene_number)


class CharacterRecord(BaseModel):
    """A point-of-view character owning scenes."""

    model_config = _RECORD_CONFIG

    id: str
    name: str = ""


class GraphInput(BaseModel):
    """One complete set of inputs for a graph build."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    notes: tuple[NoteRecord, ...] = ()
    scenes: tuple[SceneRecord, ...] = ()
    characters: tuple[CharacterRecord, ...] = ()
