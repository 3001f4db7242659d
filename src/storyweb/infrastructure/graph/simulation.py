"""ForceSimulation: iterative layout of a built graph model.

Owns node positions for the lifetime of one build.  The model stays
immutable; positions, velocities, and drag pins live in the flat
:class:`Bodies` arrays indexed by ``GraphNode.index``.

Energy follows the usual cooling schedule: ``alpha`` starts at 1 and
decays toward ``alpha_target`` each tick; once it drops below
``alpha_min`` the simulation comes to rest and stops scheduling itself.
Dragging raises ``alpha_target`` so the rest of the graph keeps reacting,
and releasing lowers it again so the layout cools back down.

The simulation knows nothing about drawing: listeners registered with
:meth:`ForceSimulation.on_tick` run after every scheduled step.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import TYPE_CHECKING

from storyweb.config.models import SimulationConfig
from storyweb.domain.types import DIRECT_LINK_TYPES, LinkType
from storyweb.infrastructure.graph.forces import (
    Bodies,
    CenterForce,
    CollideForce,
    Force,
    LinkForce,
    ManyBodyForce,
)

if TYPE_CHECKING:
    from storyweb.domain.model import GraphModel
    from storyweb.infrastructure.scheduler import FrameScheduler

logger = logging.getLogger(__name__)

type Listener = Callable[[], None]


class ForceSimulation:
    """Physics integrator for one graph build."""

    def __init__(
        self,
        model: GraphModel,
        *,
        config: SimulationConfig | None = None,
        scheduler: FrameScheduler | None = None,
    ) -> None:
        cfg = config or SimulationConfig()
        self._model = model
        self._config = cfg
        self._scheduler = scheduler
        self._rng = random.Random(cfg.seed)

        self.bodies = Bodies.spiral(len(model))
        self.alpha = 1.0
        self.alpha_min = cfg.alpha_min
        self.alpha_decay = 1 - cfg.alpha_min ** (1 / 300)
        self.alpha_target = 0.0
        self._velocity_keep = 1 - cfg.velocity_decay

        direct = [
            (link.source_index, link.target_index)
            for link in model.links
            if link.type in DIRECT_LINK_TYPES
        ]
        tagged = [
            (link.source_index, link.target_index)
            for link in model.links
            if link.type is LinkType.SHARED_TAG
        ]
        self.forces: dict[str, Force] = {
            "charge": ManyBodyForce(cfg.charge_strength),
            "link-direct": LinkForce(
                direct,
                distance=cfg.direct_link_distance,
                strength=cfg.direct_link_strength,
            ),
            "link-tag": LinkForce(
                tagged,
                distance=cfg.tag_link_distance,
                strength=cfg.tag_link_strength,
            ),
            "center": CenterForce(0.0, 0.0),
            "collide": CollideForce([node.radius + cfg.collide_margin for node in model.nodes]),
        }
        for force in self.forces.values():
            force.initialize(self.bodies, self._rng)

        self._tick_listeners: list[Listener] = []
        self._end_listeners: list[Listener] = []
        self._handle: int | None = None

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    @property
    def model(self) -> GraphModel:
        return self._model

    @property
    def running(self) -> bool:
        """Whether a step is scheduled on the frame scheduler."""
        return self._handle is not None

    def on_tick(self, listener: Listener) -> Listener:
        self._tick_listeners.append(listener)
        return listener

    def on_end(self, listener: Listener) -> Listener:
        self._end_listeners.append(listener)
        return listener

    def start(self) -> None:
        """Begin stepping once per frame.  No-op without a scheduler."""
        if self._scheduler is None or self._handle is not None:
            return
        logger.debug("simulation started: %d nodes, alpha=%.3f", len(self._model), self.alpha)
        self._handle = self._scheduler.request(self._step)

    def restart(self) -> None:
        self.start()

    def stop(self) -> None:
        """Cancel the pending step.  Positions are kept."""
        if self._scheduler is not None:
            self._scheduler.cancel(self._handle)
        if self._handle is not None:
            logger.debug("simulation stopped at alpha=%.4f", self.alpha)
        self._handle = None

    def _step(self, _now: float) -> None:
        self._handle = None
        self.tick()
        for listener in list(self._tick_listeners):
            listener()
        if self.alpha < self.alpha_min:
            logger.debug("simulation at rest")
            for listener in list(self._end_listeners):
                listener()
            return
        if self._scheduler is not None:
            self._handle = self._scheduler.request(self._step)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def tick(self, iterations: int = 1) -> None:
        """Advance the layout synchronously, without notifying listeners."""
        b = self.bodies
        keep = self._velocity_keep
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
            for force in self.forces.values():
                force.apply(self.alpha)
            for i in range(len(b)):
                fx, fy = b.fx[i], b.fy[i]
                if fx is None or fy is None:
                    b.vx[i] *= keep
                    b.vy[i] *= keep
                    b.x[i] += b.vx[i]
                    b.y[i] += b.vy[i]
                else:
                    b.x[i], b.y[i] = fx, fy
                    b.vx[i] = b.vy[i] = 0.0

    def ticks_to_rest(self) -> int:
        """Number of ticks until alpha falls below ``alpha_min`` with no target.

        Replays the decay step by step so the count matches :meth:`tick`
        exactly, with no rounding at the boundary.
        """
        alpha = self.alpha
        count = 0
        while alpha >= self.alpha_min:
            alpha += (0.0 - alpha) * self.alpha_decay
            count += 1
        return count

    def settle(self, max_ticks: int | None = None) -> int:
        """Run ticks until the layout comes to rest (headless layout).

        Returns:
            Number of ticks run.
        """
        count = self.ticks_to_rest()
        if max_ticks is not None:
            count = min(count, max_ticks)
        self.tick(count)
        return count

    # ------------------------------------------------------------------
    # Positions and pins
    # ------------------------------------------------------------------

    def position(self, index: int) -> tuple[float, float]:
        return self.bodies.x[index], self.bodies.y[index]

    def position_of(self, node_id: str) -> tuple[float, float] | None:
        node = self._model.get(node_id)
        if node is None:
            return None
        return self.position(node.index)

    def positions(self) -> dict[str, tuple[float, float]]:
        return {node.id: self.position(node.index) for node in self._model.nodes}

    def pin(self, node_id: str, x: float, y: float) -> None:
        """Hold a node at ``(x, y)``; it still pushes and pulls its neighbours."""
        node = self._model.get(node_id)
        if node is None:
            return
        b = self.bodies
        b.fx[node.index], b.fy[node.index] = x, y
        b.x[node.index], b.y[node.index] = x, y

    def unpin(self, node_id: str) -> None:
        node = self._model.get(node_id)
        if node is None:
            return
        self.bodies.fx[node.index] = self.bodies.fy[node.index] = None

    def is_pinned(self, node_id: str) -> bool:
        node = self._model.get(node_id)
        return node is not None and self.bodies.is_pinned(node.index)

    def drag_started(self) -> None:
        """Raise energy so other nodes keep adjusting while one is dragged."""
        self.alpha_target = self._config.drag_alpha_target
        self.restart()

    def drag_ended(self) -> None:
        """Let energy decay back to rest."""
        self.alpha_target = 0.0
