"""Simulation configuration.

Settings come from environment variables (prefix ``DTNSIM_``) and an
optional ``.env`` file, validated by pydantic.

Environment Variables:
    DTNSIM_NODE_COUNT: Number of mobile nodes (default: 50)
    DTNSIM_FIELD_WIDTH / DTNSIM_FIELD_HEIGHT: Field size (default: 1000.0)
    DTNSIM_COMM_RANGE: Communication range of every node (default: 50.0)
    DTNSIM_TICK_DELTA: Simulated time per tick (default: 1.0)
    DTNSIM_TICKS: Ticks for a headless run (default: 1000)
    DTNSIM_MESSAGE_COUNT: Messages injected at start (default: 10)
    DTNSIM_MOBILITY: fixed, random_walk, or random_waypoint
    DTNSIM_MIN_VELOCITY / DTNSIM_MAX_VELOCITY: Node speed bounds
    DTNSIM_SEED: Random seed (default: 42)
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dtnsim.mobility.models import MobilityKind
from dtnsim.model.grid import CELL_SIZE

logger = logging.getLogger(__name__)


class SimulationConfig(BaseSettings):
    """Parameters for building and running a simulation."""

    model_config = SettingsConfigDict(
        env_prefix="DTNSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Population
    node_count: int = Field(default=50, ge=2, le=100000, description="Number of mobile nodes")
    comm_range: float = Field(
        default=50.0,
        gt=0,
        le=CELL_SIZE,
        description="Communication range of every node",
    )

    # Field geometry
    field_width: float = Field(default=1000.0, gt=0, description="Field width")
    field_height: float = Field(default=1000.0, gt=0, description="Field height")

    # Clock
    tick_delta: float = Field(default=1.0, gt=0, description="Simulated time per tick")
    ticks: int = Field(default=1000, ge=0, description="Ticks for a headless run")

    # Traffic
    message_count: int = Field(default=10, ge=0, description="Messages injected at start")

    # Mobility
    mobility: MobilityKind = Field(
        default=MobilityKind.RANDOM_WAYPOINT,
        description="Mobility model for every node",
    )
    min_velocity: float = Field(default=1.0, ge=0, description="Minimum node speed")
    max_velocity: float = Field(default=5.0, ge=0, description="Maximum node speed")

    seed: int = Field(default=42, description="Random seed")

    @field_validator("mobility", mode="before")
    @classmethod
    def normalize_mobility(cls, v: Any) -> MobilityKind:
        """Normalize mobility string to enum."""
        if isinstance(v, str):
            return MobilityKind(v.lower())
        return v

    @model_validator(mode="after")
    def check_velocity_bounds(self) -> SimulationConfig:
        if self.min_velocity > self.max_velocity:
            raise ValueError(
                f"min_velocity ({self.min_velocity}) exceeds max_velocity ({self.max_velocity})"
            )
        return self

    def __repr__(self) -> str:
        return (
            f"SimulationConfig("
            f"nodes={self.node_count}, "
            f"range={self.comm_range}, "
            f"field={self.field_width}x{self.field_height}, "
            f"mobility={self.mobility.value}, "
            f"messages={self.message_count}, "
            f"seed={self.seed}"
            f")"
        )


@lru_cache
def get_simulation_config() -> SimulationConfig:
    """Get cached simulation configuration singleton.

    To reload, call ``get_simulation_config.cache_clear()`` first.
    """
    config = SimulationConfig()
    logger.info("Loaded simulation configuration: %r", config)
    return config
