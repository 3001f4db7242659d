"""GraphEngine: lazily built graph model for the current inputs.

Rebuilt in full whenever the inputs change; there is no incremental
diffing.  Consumers that never touch :attr:`GraphEngine.model` never pay
for a build.
"""

from __future__ import annotations

from storyweb.domain.builder import build_graph
from storyweb.domain.model import GraphModel
from storyweb.domain.types import GraphInput


class GraphEngine:
    """Holds the current inputs and the model built from them."""

    def __init__(
        self,
        graph_input: GraphInput | None = None,
        *,
        stable_group_colors: bool = False,
    ) -> None:
        self._input = graph_input or GraphInput()
        self._stable_group_colors = stable_group_colors
        self._model: GraphModel | None = None
        self.builds = 0

    @property
    def input(self) -> GraphInput:
        return self._input

    @property
    def model(self) -> GraphModel:
        """Return the model, building it from the inputs on first access."""
        if self._model is None:
            self._model = build_graph(
                self._input.notes,
                self._input.scenes,
                self._input.characters,
                stable_group_colors=self._stable_group_colors,
            )
            self.builds += 1
        return self._model

    def load(self, graph_input: GraphInput) -> None:
        """Replace the inputs; the next :attr:`model` access rebuilds."""
        self._input = graph_input
        self.invalidate()

    def invalidate(self) -> None:
        """Clear the cached model, forcing a rebuild on next access."""
        self._model = None
