"""Force models acting on the simulation's flat position arrays.

Each force is initialized once with the shared :class:`Bodies` arena and
then applied every tick with the current ``alpha`` (simulation energy),
accumulating into velocities.  Pairwise forces are exact O(n²) passes:
graphs stay at interactive sizes, so no spatial index is kept.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


def jiggle(rng: random.Random) -> float:
    """Tiny random offset that separates exactly coincident points."""
    return (rng.random() - 0.5) * 1e-6


@dataclass
class Bodies:
    """Positions, velocities, and pins for every node, addressed by index."""

    x: list[float] = field(default_factory=list)
    y: list[float] = field(default_factory=list)
    vx: list[float] = field(default_factory=list)
    vy: list[float] = field(default_factory=list)
    fx: list[float | None] = field(default_factory=list)
    fy: list[float | None] = field(default_factory=list)

    @classmethod
    def spiral(cls, count: int) -> Bodies:
        """Place *count* bodies on a phyllotaxis spiral around the origin."""
        bodies = cls()
        for i in range(count):
            radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            bodies.x.append(radius * math.cos(angle))
            bodies.y.append(radius * math.sin(angle))
            bodies.vx.append(0.0)
            bodies.vy.append(0.0)
            bodies.fx.append(None)
            bodies.fy.append(None)
        return bodies

    def __len__(self) -> int:
        return len(self.x)

    def is_pinned(self, index: int) -> bool:
        return self.fx[index] is not None


class Force(Protocol):
    def initialize(self, bodies: Bodies, rng: random.Random) -> None: ...

    def apply(self, alpha: float) -> None: ...


class ManyBodyForce:
    """Pairwise charge between all nodes; negative strength repels."""

    def __init__(self, strength: float = -120.0, distance_min: float = 1.0) -> None:
        self.strength = strength
        self._distance_min2 = distance_min * distance_min
        self._bodies = Bodies()
        self._rng = random.Random()

    def initialize(self, bodies: Bodies, rng: random.Random) -> None:
        self._bodies = bodies
        self._rng = rng

    def apply(self, alpha: float) -> None:
        b = self._bodies
        x, y, vx, vy = b.x, b.y, b.vx, b.vy
        weight = self.strength * alpha
        n = len(b)
        for i in range(n):
            xi, yi = x[i], y[i]
            dvx = dvy = 0.0
            for j in range(n):
                if j == i:
                    continue
                dx = x[j] - xi
                dy = y[j] - yi
                dist2 = dx * dx + dy * dy
                if dx == 0:
                    dx = jiggle(self._rng)
                    dist2 += dx * dx
                if dy == 0:
                    dy = jiggle(self._rng)
                    dist2 += dy * dy
                if dist2 < self._distance_min2:
                    dist2 = math.sqrt(self._distance_min2 * dist2)
                dvx += dx * weight / dist2
                dvy += dy * weight / dist2
            vx[i] += dvx
            vy[i] += dvy


class LinkForce:
    """Spring along links toward a rest length.

    The correction is split between the endpoints in proportion to their
    degree within this force, so hubs move less than leaves.
    """

    def __init__(
        self,
        pairs: Sequence[tuple[int, int]],
        *,
        distance: float,
        strength: float,
        iterations: int = 1,
    ) -> None:
        self.pairs = list(pairs)
        self.distance = distance
        self.strength = strength
        self.iterations = iterations
        self._bias: list[float] = []
        self._bodies = Bodies()
        self._rng = random.Random()

    def initialize(self, bodies: Bodies, rng: random.Random) -> None:
        self._bodies = bodies
        self._rng = rng
        count = [0] * len(bodies)
        for source, target in self.pairs:
            count[source] += 1
            count[target] += 1
        self._bias = [count[s] / (count[s] + count[t]) for s, t in self.pairs]

    def apply(self, alpha: float) -> None:
        b = self._bodies
        x, y, vx, vy = b.x, b.y, b.vx, b.vy
        for _ in range(self.iterations):
            for (s, t), bias in zip(self.pairs, self._bias, strict=True):
                dx = x[t] + vx[t] - x[s] - vx[s] or jiggle(self._rng)
                dy = y[t] + vy[t] - y[s] - vy[s] or jiggle(self._rng)
                length = math.sqrt(dx * dx + dy * dy)
                k = (length - self.distance) / length * alpha * self.strength
                dx *= k
                dy *= k
                vx[t] -= dx * bias
                vy[t] -= dy * bias
                vx[s] += dx * (1 - bias)
                vy[s] += dy * (1 - bias)


class CenterForce:
    """Translate the whole layout so its mean position sits on a point."""

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        self.x = x
        self.y = y
        self.strength = strength
        self._bodies = Bodies()

    def initialize(self, bodies: Bodies, rng: random.Random) -> None:
        self._bodies = bodies

    def apply(self, alpha: float) -> None:
        b = self._bodies
        n = len(b)
        if n == 0:
            return
        shift_x = (sum(b.x) / n - self.x) * self.strength
        shift_y = (sum(b.y) / n - self.y) * self.strength
        for i in range(n):
            b.x[i] -= shift_x
            b.y[i] -= shift_y


class CollideForce:
    """Push apart nodes whose collision circles overlap.

    Uses positions projected one step ahead (``x + vx``) and shares the
    correction by radius, so the smaller node gives way.
    """

    def __init__(
        self,
        radii: Sequence[float],
        *,
        strength: float = 1.0,
        iterations: int = 1,
    ) -> None:
        self.radii = list(radii)
        self.strength = strength
        self.iterations = iterations
        self._bodies = Bodies()
        self._rng = random.Random()

    def initialize(self, bodies: Bodies, rng: random.Random) -> None:
        self._bodies = bodies
        self._rng = rng

    def apply(self, alpha: float) -> None:
        b = self._bodies
        x, y, vx, vy = b.x, b.y, b.vx, b.vy
        radii = self.radii
        n = len(b)
        for _ in range(self.iterations):
            for i in range(n):
                ri = radii[i]
                ri2 = ri * ri
                xi = x[i] + vx[i]
                yi = y[i] + vy[i]
                for j in range(i + 1, n):
                    rj = radii[j]
                    reach = ri + rj
                    dx = xi - x[j] - vx[j]
                    dy = yi - y[j] - vy[j]
                    dist2 = dx * dx + dy * dy
                    if dist2 >= reach * reach:
                        continue
                    if dx == 0:
                        dx = jiggle(self._rng)
                        dist2 += dx * dx
                    if dy == 0:
                        dy = jiggle(self._rng)
                        dist2 += dy * dy
                    dist = math.sqrt(dist2)
                    k = (reach - dist) / dist * self.strength
                    dx *= k
                    dy *= k
                    rj2 = rj * rj
                    share = rj2 / (ri2 + rj2)
                    vx[i] += dx * share
                    vy[i] += dy * share
                    vx[j] -= dx * (1 - share)
                    vy[j] -= dy * (1 - share)
