"""Tick driver: owns the node population and the shared grid index.

Tick sequence:
1. Rebuild the grid index with every agent at its current cell
2. Advance every agent (move, detect encounters, forward)
3. Merge every agent's receptions into the messages it carries
4. Increment tick and time

Each phase finishes for the whole population before the next starts. A
reception in step 2 therefore cannot be forwarded again until the next tick.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dtnsim.model.grid import CELL_SIZE, SpatialGridIndex

if TYPE_CHECKING:
    from dtnsim.agent.carry_only import CarryOnlyAgent
    from dtnsim.model.message import Message

logger = logging.getLogger(__name__)

LOG_INTERVAL = 100  # Debug summary every N ticks


class Scheduler:
    """Single-threaded, externally stepped simulation driver.

    Args:
        delta: Simulated time that passes per tick.

    The grid always uses the fixed cell side ``CELL_SIZE``, which bounds every
    agent's range.
    """

    def __init__(self, delta: float = 1.0) -> None:
        if delta <= 0:
            raise ValueError(f"delta must be positive, got {delta}")
        self.delta = delta
        self.agents: list[CarryOnlyAgent] = []
        self.messages: list[Message] = []
        self.tick = 0
        self.time = 0.0
        self._by_id: dict[int, CarryOnlyAgent] = {}
        self._grid: SpatialGridIndex | None = None

    def __repr__(self) -> str:
        return f"Scheduler(tick={self.tick}, agents={len(self.agents)}, delta={self.delta})"

    @property
    def grid_index(self) -> SpatialGridIndex | None:
        """Grid for the current tick; None until :meth:`build_grid` first runs."""
        return self._grid

    def population_size(self) -> int:
        return len(self.agents)

    def tick_delta(self) -> float:
        return self.delta

    def register_node(self, agent: CarryOnlyAgent) -> None:
        """Add an agent to the population.

        Raises:
            ValueError: If another agent already uses the same id.
        """
        if agent.id in self._by_id:
            raise ValueError(f"Duplicate agent id: {agent.id}")
        self._by_id[agent.id] = agent
        self.agents.append(agent)

    def find(self, agent_id: int) -> CarryOnlyAgent | None:
        return self._by_id.get(agent_id)

    def inject(self, message: Message) -> None:
        """Originate ``message`` at its source agent.

        Raises:
            KeyError: If no agent has the message's source id.
        """
        source = self._by_id.get(message.source)
        if source is None:
            raise KeyError(f"No agent with id {message.source} for message {message}")
        source.add_message(message)
        self.messages.append(message)

    def build_grid(self) -> SpatialGridIndex:
        """Rebuild the grid index from scratch with every agent registered."""
        self._grid = SpatialGridIndex(CELL_SIZE)
        for agent in self.agents:
            agent.cache_cell()
        return self._grid

    def step(self) -> int:
        """Run one tick.

        Returns:
            Number of message hand-offs during the tick.
        """
        self.build_grid()

        handoffs = 0
        for agent in self.agents:
            handoffs += agent.advance()

        for agent in self.agents:
            agent.merge()

        self.tick += 1
        self.time += self.delta

        if self.tick % LOG_INTERVAL == 0:
            logger.debug(
                "Simulation tick %d: agents=%d, messages=%d",
                self.tick,
                len(self.agents),
                len(self.messages),
            )
        return handoffs

    def run(self, ticks: int) -> int:
        """Run ``ticks`` ticks and return the total hand-off count."""
        total = 0
        for _ in range(ticks):
            total += self.step()
        logger.info("Ran %d ticks (now at tick %d): %d hand-offs", ticks, self.tick, total)
        return total
