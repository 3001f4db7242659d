"""Shared pytest fixtures and test helpers for storyweb tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from storyweb.domain.types import CharacterRecord, GraphInput, NoteRecord, SceneRecord
from storyweb.infrastructure.scheduler import FrameScheduler
from storyweb.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep user config and telemetry state out of every test."""
    monkeypatch.delenv("STORYWEB_CONFIG", raising=False)
    for name in ("STORYWEB_VERBOSE", "STORYWEB_JSON_OUTPUT", "STORYWEB_QUIET"):
        monkeypatch.delenv(name, raising=False)
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scheduler() -> FrameScheduler:
    return FrameScheduler()


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def note(
    note_id: str,
    title: str = "",
    *,
    parent: str | None = None,
    links: tuple[str, ...] = (),
    scenes: tuple[str, ...] = (),
    tags: tuple[str, ...] = (),
) -> NoteRecord:
    return NoteRecord(
        id=note_id,
        title=title or note_id.upper(),
        parent_id=parent,
        outgoing_links=links,
        scene_links=scenes,
        tags=tags,
    )


def scene(
    character_id: str,
    number: int,
    *,
    title: str = "",
    tags: tuple[str, ...] = (),
) -> SceneRecord:
    return SceneRecord(character_id=character_id, scene_number=number, title=title, tags=tags)


def story() -> GraphInput:
    """A small story exercising every edge kind and filter rule.

    Links after dedup: n1-n2 wikilink, n1-c1:1 scene-link, n4-c1:1 and
    c2:1-c2:2 shared-tag.  n3 is isolated, c1:2 has no edges and is dropped,
    and c2's scenes only connect to each other.
    """
    return GraphInput(
        notes=(
            note("n1", "Root", links=("n2",), scenes=("c1:1",), tags=("storm",)),
            note("n2", "Child", parent="n1", links=("n1",), tags=("storm",)),
            note("n3", "Loner"),
            note("n4", "Tagged", tags=("sea",)),
        ),
        scenes=(
            scene("c1", 1, title="Arrival", tags=("sea",)),
            scene("c1", 2),
            scene("c2", 1, tags=("night",)),
            scene("c2", 2, tags=("night",)),
        ),
        characters=(
            CharacterRecord(id="c1", name="Ada"),
            CharacterRecord(id="c2", name="Bo"),
        ),
    )


def write_input(path: Path, graph_input: GraphInput) -> Path:
    """Write *graph_input* as the host-shaped (camelCase) JSON document."""
    path.write_text(
        json.dumps(graph_input.model_dump(mode="json", by_alias=True)),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def story_input() -> GraphInput:
    return story()


@pytest.fixture
def story_file(tmp_path: Path, story_input: GraphInput) -> Path:
    return write_input(tmp_path / "story.json", story_input)
