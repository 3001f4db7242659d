"""GraphScene: the live state of one build."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storyweb.domain.filters import Visibility
    from storyweb.domain.model import GraphModel
    from storyweb.infrastructure.graph.simulation import ForceSimulation


@dataclass
class GraphScene:
    """Model, the simulation laying it out, and the current visible subset.

    ``visibility`` is replaced whenever filters change; the model and the
    simulation are replaced together on every rebuild.
    """

    model: GraphModel
    simulation: ForceSimulation
    visibility: Visibility
