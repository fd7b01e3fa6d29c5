"""Mobility models and a factory keyed by :class:`MobilityKind`."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from dtnsim.mobility.models import (
    FixedMobility,
    MobilityKind,
    RandomWalkMobility,
    RandomWaypointMobility,
)

if TYPE_CHECKING:
    from dtnsim.agent.interfaces import Mobility
    from dtnsim.config import SimulationConfig


def create_mobility(
    kind: MobilityKind | str,
    config: SimulationConfig,
    rng: random.Random,
) -> Mobility:
    """Build a mobility model for one node.

    Starting positions are drawn uniformly over the configured field.

    Raises:
        ValueError: If ``kind`` is not a known mobility model.
    """
    kind = MobilityKind(kind)
    if kind is MobilityKind.FIXED:
        return FixedMobility(
            x=rng.uniform(0.0, config.field_width),
            y=rng.uniform(0.0, config.field_height),
        )
    if kind is MobilityKind.RANDOM_WALK:
        return RandomWalkMobility(
            x=rng.uniform(0.0, config.field_width),
            y=rng.uniform(0.0, config.field_height),
            velocity=config.max_velocity,
            width=config.field_width,
            height=config.field_height,
            rng=rng,
        )
    return RandomWaypointMobility(
        width=config.field_width,
        height=config.field_height,
        min_velocity=config.min_velocity,
        max_velocity=config.max_velocity,
        rng=rng,
    )


__all__ = [
    "FixedMobility",
    "MobilityKind",
    "RandomWalkMobility",
    "RandomWaypointMobility",
    "create_mobility",
]
