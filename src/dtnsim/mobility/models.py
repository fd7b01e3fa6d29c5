"""Mobility models: strategies that own and advance a node's position.

All models keep the node inside the rectangular field [0, width] x [0, height].
Randomness comes from an injected ``random.Random`` so runs are reproducible
from a single seed.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import StrEnum


class MobilityKind(StrEnum):
    """Available mobility models."""

    FIXED = "fixed"
    RANDOM_WALK = "random_walk"
    RANDOM_WAYPOINT = "random_waypoint"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class FixedMobility:
    """A node that never moves."""

    x: float = 0.0
    y: float = 0.0

    def current_position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def move(self, delta: float) -> None:
        pass


@dataclass
class RandomWalkMobility:
    """Each step heads in a fresh uniformly random direction at constant speed."""

    x: float
    y: float
    velocity: float = 1.0
    width: float = 1000.0
    height: float = 1000.0
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def current_position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def move(self, delta: float) -> None:
        heading = self.rng.uniform(0.0, 2.0 * math.pi)
        step = self.velocity * delta
        self.x = _clamp(self.x + step * math.cos(heading), 0.0, self.width)
        self.y = _clamp(self.y + step * math.sin(heading), 0.0, self.height)


@dataclass
class RandomWaypointMobility:
    """Travel in a straight line to a random waypoint, then pick another.

    Speed is drawn uniformly from [min_velocity, max_velocity] for each leg.
    The starting point is random unless x and y are given.
    """

    width: float = 1000.0
    height: float = 1000.0
    min_velocity: float = 1.0
    max_velocity: float = 5.0
    rng: random.Random = field(default_factory=random.Random, repr=False)
    x: float | None = None
    y: float | None = None

    def __post_init__(self) -> None:
        if self.min_velocity > self.max_velocity:
            raise ValueError(
                f"min_velocity ({self.min_velocity}) exceeds max_velocity ({self.max_velocity})"
            )
        if self.x is None:
            self.x = self.rng.uniform(0.0, self.width)
        if self.y is None:
            self.y = self.rng.uniform(0.0, self.height)
        self._new_leg()

    def _new_leg(self) -> None:
        self.waypoint = (self.rng.uniform(0.0, self.width), self.rng.uniform(0.0, self.height))
        self.velocity = self.rng.uniform(self.min_velocity, self.max_velocity)

    def current_position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def move(self, delta: float) -> None:
        remaining = self.velocity * delta
        # A long tick may cover several legs
        while remaining > 0:
            wx, wy = self.waypoint
            dx, dy = wx - self.x, wy - self.y
            distance = math.hypot(dx, dy)
            if distance > remaining:
                self.x += dx / distance * remaining
                self.y += dy / distance * remaining
                return
            self.x, self.y = wx, wy
            remaining -= distance
            self._new_leg()
            if self.velocity <= 0:
                return
