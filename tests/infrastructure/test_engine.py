"""Tests for the lazily built graph engine."""

from __future__ import annotations

from storyweb.domain.types import GraphInput
from storyweb.infrastructure.graph.engine import GraphEngine
from tests.conftest import note


class TestGraphEngine:
    def test_builds_on_first_access_only(self, story_input: GraphInput) -> None:
        engine = GraphEngine(story_input)
        assert engine.builds == 0
        model = engine.model
        assert engine.model is model
        assert engine.builds == 1

    def test_invalidate_forces_rebuild(self, story_input: GraphInput) -> None:
        engine = GraphEngine(story_input)
        first = engine.model
        engine.invalidate()
        assert engine.model is not first
        assert engine.builds == 2

    def test_load_replaces_inputs(self, story_input: GraphInput) -> None:
        engine = GraphEngine(story_input)
        assert len(engine.model) == 7
        engine.load(GraphInput(notes=(note("solo"),)))
        assert engine.input.notes[0].id == "solo"
        assert [n.id for n in engine.model.nodes] == ["solo"]

    def test_empty_by_default(self) -> None:
        engine = GraphEngine()
        assert len(engine.model) == 0

    def test_stable_group_colors_reach_the_builder(self) -> None:
        engine = GraphEngine(
            GraphInput(notes=(note("zeta"), note("alpha"))),
            stable_group_colors=True,
        )
        assert engine.model.groups == ("alpha", "zeta")
